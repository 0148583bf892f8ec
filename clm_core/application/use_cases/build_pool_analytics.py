from __future__ import annotations

import logging

from clm_core.application.dto.pool_analytics import (
    BuildPoolAnalyticsInput,
    BuildPoolAnalyticsOutput,
    PoolAnalyticsRequest,
    PoolAnalyticsResult,
)
from clm_core.application.ports.pool_analytics_store_port import PoolAnalyticsStorePort
from clm_core.application.ports.price_series_port import PriceSeriesPort
from clm_core.core.config import Settings
from clm_core.domain.entities.data_quality import DataQualityThresholds
from clm_core.domain.exceptions import DomainError, InvalidPriceSeries
from clm_core.domain.services.pool_analytics import build_pool_analytics
from clm_core.domain.services.risk_scoring import pool_fee_apr


DEFAULT_LOOKBACK_DAYS = 31
logger = logging.getLogger(__name__)


class BuildPoolAnalyticsUseCase:
    def __init__(
        self,
        *,
        price_series_port: PriceSeriesPort,
        store_port: PoolAnalyticsStorePort | None = None,
        thresholds: DataQualityThresholds | None = None,
        default_lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    ):
        self._price_series_port = price_series_port
        self._store_port = store_port
        self._thresholds = thresholds or DataQualityThresholds()
        self._default_lookback_days = default_lookback_days

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        price_series_port: PriceSeriesPort,
        store_port: PoolAnalyticsStorePort | None = None,
    ) -> BuildPoolAnalyticsUseCase:
        return cls(
            price_series_port=price_series_port,
            store_port=store_port,
            thresholds=settings.thresholds(),
            default_lookback_days=settings.analytics_lookback_days,
        )

    def execute(self, command: BuildPoolAnalyticsInput) -> BuildPoolAnalyticsOutput:
        lookback_days = command.lookback_days or self._default_lookback_days
        if lookback_days <= 0:
            raise InvalidPriceSeries("lookback_days must be a positive integer.")
        logger.info(
            "build_pool_analytics: start pools=%s lookback_days=%s",
            len(command.pools),
            lookback_days,
        )

        results = [self._analyze_one(request, lookback_days=lookback_days) for request in command.pools]

        logger.info(
            "build_pool_analytics: done pools=%s failed=%s",
            len(results),
            sum(1 for row in results if row.analytics is None),
        )
        return BuildPoolAnalyticsOutput(results=results)

    def _analyze_one(self, request: PoolAnalyticsRequest, *, lookback_days: int) -> PoolAnalyticsResult:
        try:
            series = self._price_series_port.get_price_series(
                pool_address=request.pool_address,
                network=request.network,
                lookback_days=lookback_days,
            )
            fee_apr = request.fee_apr
            if fee_apr is None:
                fee_apr = pool_fee_apr(fees_24h_usd=request.fees_24h_usd, tvl_usd=request.tvl_usd)
            analytics = build_pool_analytics(
                pool_address=request.pool_address,
                network=request.network,
                series=series,
                fee_apr=fee_apr,
                thresholds=self._thresholds,
            )
        except DomainError as exc:
            logger.warning(
                "build_pool_analytics: pool rejected pool=%s network=%s reason=%s",
                request.pool_address,
                request.network,
                exc,
            )
            return self._failed(request, exc)
        except Exception as exc:
            logger.exception(
                "build_pool_analytics: series lookup failed pool=%s network=%s",
                request.pool_address,
                request.network,
            )
            return self._failed(request, exc)

        stored = False
        store_error: Exception | None = None
        if self._store_port is not None:
            try:
                self._store_port.save(analytics)
                stored = True
            except Exception as exc:
                store_error = exc
                logger.exception(
                    "build_pool_analytics: store failed pool=%s network=%s",
                    request.pool_address,
                    request.network,
                )

        return PoolAnalyticsResult(
            pool_address=request.pool_address,
            network=request.network,
            analytics=analytics,
            stored=stored,
            error=str(store_error) if store_error is not None else None,
            error_type=type(store_error).__name__ if store_error is not None else None,
        )

    @staticmethod
    def _failed(request: PoolAnalyticsRequest, exc: Exception) -> PoolAnalyticsResult:
        return PoolAnalyticsResult(
            pool_address=request.pool_address,
            network=request.network,
            analytics=None,
            error=str(exc),
            error_type=type(exc).__name__,
        )
