from __future__ import annotations

from decimal import Decimal, localcontext

from clm_core.domain.entities.pool_analytics import (
    ATTRACTIVE,
    FAIR,
    INSUFFICIENT_DATA,
    OVERPRICED,
    RiskScore,
)
from clm_core.domain.services.tick_math import DECIMAL_PRECISION


FVR_ATTRACTIVE = Decimal("1.0")
FVR_FAIR = Decimal("0.6")
IL_RISK_STEPS = (
    (Decimal("0.2"), 1),
    (Decimal("0.4"), 3),
    (Decimal("0.6"), 5),
    (Decimal("0.8"), 7),
    (Decimal("1.0"), 9),
)
IL_RISK_MAX = 10
MONTHS_PER_YEAR = Decimal("12")


def classify_fvr(fvr: Decimal) -> str:
    if fvr >= FVR_ATTRACTIVE:
        return ATTRACTIVE
    if fvr >= FVR_FAIR:
        return FAIR
    return OVERPRICED


def il_risk_score(volatility_30d: Decimal | None) -> int:
    # Policy buckets on annualized 30d volatility, not a model of IL.
    vol = volatility_30d if volatility_30d is not None else Decimal("0")
    for upper, score_value in IL_RISK_STEPS:
        if vol < upper:
            return score_value
    return IL_RISK_MAX


def expected_il_30d(volatility_30d: Decimal | None) -> Decimal:
    """Approximate 30-day impermanent loss as sigma^2 / 8.

    Small-movement approximation for a full-range position. It is not exact
    for concentrated ranges, where IL grows with the range's leverage.
    """
    if volatility_30d is None or volatility_30d <= 0:
        return Decimal("0")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return volatility_30d**2 / Decimal("8")


def breakeven_fee_apr(fee_apr: Decimal | None, expected_il: Decimal) -> Decimal:
    """Fee APR plus the 30-day IL approximation annualized by 12 (approximate)."""
    base = fee_apr if fee_apr is not None and fee_apr > 0 else Decimal("0")
    return base + expected_il * MONTHS_PER_YEAR


def score(*, fee_apr: Decimal | None, volatility_30d: Decimal | None) -> RiskScore:
    expected_il = expected_il_30d(volatility_30d)
    risk = il_risk_score(volatility_30d)
    breakeven = breakeven_fee_apr(fee_apr, expected_il)

    if (
        volatility_30d is None
        or volatility_30d <= 0
        or fee_apr is None
        or fee_apr <= 0
    ):
        return RiskScore(
            fvr=None,
            il_risk_score=risk,
            recommendation=INSUFFICIENT_DATA,
            expected_il_30d=expected_il,
            breakeven_fee_apr=breakeven,
        )

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        fvr = fee_apr / volatility_30d

    return RiskScore(
        fvr=fvr,
        il_risk_score=risk,
        recommendation=classify_fvr(fvr),
        expected_il_30d=expected_il,
        breakeven_fee_apr=breakeven,
    )


def pool_fee_apr(*, fees_24h_usd: Decimal | None, tvl_usd: Decimal | None) -> Decimal | None:
    if fees_24h_usd is None or tvl_usd is None or tvl_usd <= 0:
        return None
    return (fees_24h_usd / tvl_usd) * Decimal("365") * Decimal("100")
