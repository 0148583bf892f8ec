from __future__ import annotations

import logging
from dataclasses import dataclass

from clm_core.application.dto.valuate_positions import (
    PositionValuationResult,
    ValuatePositionsInput,
    ValuatePositionsOutput,
)
from clm_core.application.ports.pool_state_port import PoolStatePort
from clm_core.application.ports.position_discovery_port import PositionDiscoveryPort
from clm_core.application.ports.token_price_port import TokenPricePort
from clm_core.core.config import Settings
from clm_core.domain.entities.data_quality import DataQualityThresholds
from clm_core.domain.entities.position import PoolState, Position, TokenUsdPrices
from clm_core.domain.entities.price_convention import ProtocolPriceConvention
from clm_core.domain.exceptions import DomainError, InvalidPoolState, InvalidPositionData
from clm_core.domain.services.position_valuation import valuate
from clm_core.domain.services.tick_math import require_convention


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PoolSnapshot:
    pool_state: PoolState
    convention: ProtocolPriceConvention
    prices: TokenUsdPrices


class ValuatePositionsUseCase:
    def __init__(
        self,
        *,
        discovery_port: PositionDiscoveryPort,
        pool_state_port: PoolStatePort,
        token_price_port: TokenPricePort,
        thresholds: DataQualityThresholds | None = None,
    ):
        self._discovery_port = discovery_port
        self._pool_state_port = pool_state_port
        self._token_price_port = token_price_port
        self._thresholds = thresholds or DataQualityThresholds()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        discovery_port: PositionDiscoveryPort,
        pool_state_port: PoolStatePort,
        token_price_port: TokenPricePort,
    ) -> ValuatePositionsUseCase:
        return cls(
            discovery_port=discovery_port,
            pool_state_port=pool_state_port,
            token_price_port=token_price_port,
            thresholds=settings.thresholds(),
        )

    def execute(self, command: ValuatePositionsInput) -> ValuatePositionsOutput:
        logger.info(
            "valuate_positions: start wallet=%s network=%s",
            command.wallet_address,
            command.network,
        )
        if not command.wallet_address or not command.network:
            raise InvalidPositionData("wallet_address and network are required.")

        positions = self._discovery_port.list_positions(
            wallet_address=command.wallet_address,
            network=command.network,
        )

        snapshots: dict[str, _PoolSnapshot] = {}
        failures: dict[str, Exception] = {}
        for pool_id in dict.fromkeys(position.pool_id for position in positions):
            try:
                snapshots[pool_id] = self._load_pool_snapshot(pool_id)
            except DomainError as exc:
                logger.warning("valuate_positions: pool rejected pool_id=%s reason=%s", pool_id, exc)
                failures[pool_id] = exc
            except Exception as exc:
                logger.exception("valuate_positions: pool snapshot failed pool_id=%s", pool_id)
                failures[pool_id] = exc

        results = [
            self._valuate_one(
                position=position,
                snapshot=snapshots.get(position.pool_id),
                failure=failures.get(position.pool_id),
                command=command,
            )
            for position in positions
        ]

        data_sources = sorted({position.data_source for position in positions})
        if len(data_sources) > 1:
            logger.warning(
                "valuate_positions: mixed data sources wallet=%s sources=%s",
                command.wallet_address,
                ",".join(data_sources),
            )
        logger.info(
            "valuate_positions: done wallet=%s positions=%s failed=%s",
            command.wallet_address,
            len(results),
            sum(1 for row in results if row.valuation is None),
        )
        return ValuatePositionsOutput(
            wallet_address=command.wallet_address,
            network=command.network,
            results=results,
            data_sources=data_sources,
        )

    def _load_pool_snapshot(self, pool_id: str) -> _PoolSnapshot:
        pool_state = self._pool_state_port.get_pool_state(pool_id=pool_id)
        if pool_state is None:
            raise InvalidPoolState(f"Pool state not found for {pool_id}.")
        convention = require_convention(self._pool_state_port.get_price_convention(pool_id=pool_id))
        try:
            prices = self._token_price_port.get_usd_prices(pool_id=pool_id)
        except Exception:
            logger.exception("valuate_positions: price lookup failed pool_id=%s", pool_id)
            prices = TokenUsdPrices(token0_usd=None, token1_usd=None)
        return _PoolSnapshot(pool_state=pool_state, convention=convention, prices=prices)

    def _valuate_one(
        self,
        *,
        position: Position,
        snapshot: _PoolSnapshot | None,
        failure: Exception | None,
        command: ValuatePositionsInput,
    ) -> PositionValuationResult:
        if snapshot is None:
            return PositionValuationResult(
                position_id=position.position_id,
                pool_id=position.pool_id,
                valuation=None,
                error=str(failure) if failure is not None else "Pool snapshot unavailable.",
                error_type=type(failure).__name__ if failure is not None else InvalidPoolState.__name__,
            )
        try:
            valuation = valuate(
                position=position,
                pool_state=snapshot.pool_state,
                convention=snapshot.convention,
                prices=snapshot.prices,
                reported_tvl_usd=command.reported_tvl_usd.get(position.position_id),
                thresholds=self._thresholds,
            )
        except DomainError as exc:
            logger.warning(
                "valuate_positions: position rejected position_id=%s pool_id=%s reason=%s",
                position.position_id,
                position.pool_id,
                exc,
            )
            return PositionValuationResult(
                position_id=position.position_id,
                pool_id=position.pool_id,
                valuation=None,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        except Exception as exc:
            logger.exception(
                "valuate_positions: valuation failed position_id=%s pool_id=%s",
                position.position_id,
                position.pool_id,
            )
            return PositionValuationResult(
                position_id=position.position_id,
                pool_id=position.pool_id,
                valuation=None,
                error=str(exc),
                error_type=type(exc).__name__,
            )
        return PositionValuationResult(
            position_id=position.position_id,
            pool_id=position.pool_id,
            valuation=valuation,
        )
