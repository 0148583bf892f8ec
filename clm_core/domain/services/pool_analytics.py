from __future__ import annotations

from decimal import Decimal

from clm_core.domain.entities.data_quality import DataQualityThresholds
from clm_core.domain.entities.pool_analytics import INSUFFICIENT_HISTORY, PoolAnalytics, PriceSeries
from clm_core.domain.services.data_quality import check_fee_apr
from clm_core.domain.services.impermanent_loss import realized_impermanent_loss
from clm_core.domain.services.risk_scoring import score
from clm_core.domain.services.volatility import VOLATILITY_WINDOWS, volatility_profile


def build_pool_analytics(
    *,
    pool_address: str,
    network: str,
    series: PriceSeries,
    fee_apr: Decimal | None,
    thresholds: DataQualityThresholds | None = None,
) -> PoolAnalytics:
    limits = thresholds or DataQualityThresholds()
    points = series.points
    profile = volatility_profile(points)
    risk = score(fee_apr=fee_apr, volatility_30d=profile.volatility_30d)

    window_30d = VOLATILITY_WINDOWS["30d"]
    realized_il = realized_impermanent_loss(points, window_days=window_30d)
    null_reasons = dict(profile.null_reasons)
    if realized_il is None:
        null_reasons["realized_il_30d"] = INSUFFICIENT_HISTORY

    return PoolAnalytics(
        pool_address=pool_address,
        network=network,
        fee_apr=fee_apr,
        volatility_1d=profile.volatility_1d,
        volatility_7d=profile.volatility_7d,
        volatility_30d=profile.volatility_30d,
        fvr=risk.fvr,
        il_risk_score=risk.il_risk_score,
        recommendation=risk.recommendation,
        expected_il_30d=risk.expected_il_30d,
        breakeven_fee_apr=risk.breakeven_fee_apr,
        realized_il_30d=realized_il,
        data_points_count=len(points),
        oldest_timestamp=points[0].timestamp if points else None,
        newest_timestamp=points[-1].timestamp if points else None,
        source=series.data_source,
        warnings=tuple(check_fee_apr(fee_apr=fee_apr, thresholds=limits)),
        null_reasons=null_reasons,
    )
