from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from clm_core.domain.entities.data_quality import (
    HIGH_APR,
    IMPLAUSIBLE_APR,
    NARROW_RANGE,
    PRICE_OUT_OF_BAND,
    TICK_PRICE_MISMATCH,
    TVL_MISMATCH,
    WIDE_RANGE,
    DataQualityThresholds,
    DataQualityWarning,
)


WRAPPED_PREFIXES = ("CB", "W")


def check_price_range(
    *,
    price_lower: Decimal,
    price_upper: Decimal,
    thresholds: DataQualityThresholds,
) -> list[DataQualityWarning]:
    if price_lower <= 0 or price_upper <= 0:
        return []
    ratio = price_upper / price_lower
    context = {"price_lower": str(price_lower), "price_upper": str(price_upper), "ratio": str(ratio)}
    if ratio > thresholds.wide_range_ratio:
        return [
            DataQualityWarning(
                code=WIDE_RANGE,
                message=f"Very wide price range: {ratio:.2f}x.",
                context=context,
            )
        ]
    if ratio < thresholds.narrow_range_ratio:
        return [
            DataQualityWarning(
                code=NARROW_RANGE,
                message=f"Very narrow price range: {ratio:.4f}x.",
                context=context,
            )
        ]
    return []


def check_tvl_discrepancy(
    *,
    computed_tvl_usd: Decimal | None,
    reported_tvl_usd: Decimal | None,
    thresholds: DataQualityThresholds,
) -> list[DataQualityWarning]:
    if computed_tvl_usd is None or reported_tvl_usd is None or reported_tvl_usd <= 0:
        return []
    difference = abs(computed_tvl_usd - reported_tvl_usd) / reported_tvl_usd
    if difference <= thresholds.tvl_mismatch_ratio:
        return []
    return [
        DataQualityWarning(
            code=TVL_MISMATCH,
            message=(
                f"Large TVL discrepancy: computed ${computed_tvl_usd:.2f} "
                f"vs reported ${reported_tvl_usd:.2f}; review manually."
            ),
            context={
                "computed_tvl_usd": str(computed_tvl_usd),
                "reported_tvl_usd": str(reported_tvl_usd),
                "difference": str(difference),
            },
        )
    ]


def resolve_band_symbol(symbol: str, bands: Mapping[str, tuple[Decimal, Decimal]]) -> str | None:
    key = symbol.strip().upper()
    if key in bands:
        return key
    for prefix in WRAPPED_PREFIXES:
        if key.startswith(prefix) and key[len(prefix):] in bands:
            return key[len(prefix):]
    return None


def check_token_price(
    *,
    symbol: str | None,
    price_usd: Decimal | None,
    thresholds: DataQualityThresholds,
) -> list[DataQualityWarning]:
    if not symbol or price_usd is None:
        return []
    band_key = resolve_band_symbol(symbol, thresholds.price_sanity_bands)
    if band_key is None:
        return []
    low, high = thresholds.price_sanity_bands[band_key]
    if low <= price_usd <= high:
        return []
    return [
        DataQualityWarning(
            code=PRICE_OUT_OF_BAND,
            message=f"{symbol} price ${price_usd} outside expected range ${low}-${high}.",
            context={"symbol": symbol, "price_usd": str(price_usd), "low": str(low), "high": str(high)},
        )
    ]


def check_fee_apr(
    *,
    fee_apr: Decimal | None,
    thresholds: DataQualityThresholds,
) -> list[DataQualityWarning]:
    if fee_apr is None:
        return []
    if fee_apr > thresholds.max_plausible_fee_apr:
        return [
            DataQualityWarning(
                code=IMPLAUSIBLE_APR,
                message=f"Unrealistic APR: {fee_apr}% (over {thresholds.max_plausible_fee_apr}%).",
                context={"fee_apr": str(fee_apr)},
            )
        ]
    if fee_apr > thresholds.high_fee_apr:
        return [
            DataQualityWarning(
                code=HIGH_APR,
                message=f"High APR: {fee_apr}% (max expected: {thresholds.high_fee_apr}%).",
                context={"fee_apr": str(fee_apr)},
            )
        ]
    return []


def check_tick_consistency(
    *,
    current_tick: int,
    sqrt_price_tick: int,
    tick_spacing: int,
) -> list[DataQualityWarning]:
    tolerance = max(1, tick_spacing)
    if abs(current_tick - sqrt_price_tick) <= tolerance:
        return []
    return [
        DataQualityWarning(
            code=TICK_PRICE_MISMATCH,
            message=(
                f"Current tick {current_tick} disagrees with sqrt price tick {sqrt_price_tick}."
            ),
            context={"current_tick": str(current_tick), "sqrt_price_tick": str(sqrt_price_tick)},
        )
    ]
