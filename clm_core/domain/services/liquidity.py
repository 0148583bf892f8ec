from __future__ import annotations

from decimal import Decimal, localcontext

from clm_core.domain.entities.price_convention import ProtocolPriceConvention
from clm_core.domain.exceptions import InvalidPositionData, InvalidTickRange
from clm_core.domain.services.tick_math import (
    DECIMAL_PRECISION,
    require_convention,
    sqrt_price_fixed_to_sqrt_price,
    tick_to_sqrt_price,
)


ZERO = Decimal("0")


def validate_tick_range(tick_lower: int, tick_upper: int) -> None:
    if tick_lower >= tick_upper:
        raise InvalidTickRange(f"tick_lower ({tick_lower}) must be lower than tick_upper ({tick_upper}).")


def to_token_units(raw_amount: Decimal | int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(raw_amount) / (Decimal(10) ** decimals)


def decompose_raw(
    *,
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    current_sqrt_price: int | None,
    convention: ProtocolPriceConvention,
) -> tuple[Decimal, Decimal]:
    require_convention(convention)
    validate_tick_range(tick_lower, tick_upper)
    if liquidity < 0:
        raise InvalidPositionData("liquidity must be >= 0.")
    if liquidity == 0:
        return ZERO, ZERO

    sqrt_lower = tick_to_sqrt_price(tick_lower, convention)
    sqrt_upper = tick_to_sqrt_price(tick_upper, convention)

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        big_l = Decimal(liquidity)

        if current_tick < tick_lower:
            amount0 = big_l * (Decimal(1) / sqrt_lower - Decimal(1) / sqrt_upper)
            amount1 = ZERO
        elif current_tick >= tick_upper:
            amount0 = ZERO
            amount1 = big_l * (sqrt_upper - sqrt_lower)
        else:
            sqrt_current = _current_sqrt_price(
                current_tick=current_tick,
                current_sqrt_price=current_sqrt_price,
                convention=convention,
            )
            sqrt_current = min(max(sqrt_current, sqrt_lower), sqrt_upper)
            amount0 = big_l * (Decimal(1) / sqrt_current - Decimal(1) / sqrt_upper)
            amount1 = big_l * (sqrt_current - sqrt_lower)

        return max(amount0, ZERO), max(amount1, ZERO)


def decompose(
    *,
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    current_sqrt_price: int | None,
    convention: ProtocolPriceConvention,
) -> tuple[Decimal, Decimal]:
    amount0_raw, amount1_raw = decompose_raw(
        liquidity=liquidity,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        current_tick=current_tick,
        current_sqrt_price=current_sqrt_price,
        convention=convention,
    )
    return (
        to_token_units(amount0_raw, convention.token0_decimals),
        to_token_units(amount1_raw, convention.token1_decimals),
    )


def range_width_ratio(tick_lower: int, tick_upper: int, convention: ProtocolPriceConvention) -> Decimal:
    require_convention(convention)
    validate_tick_range(tick_lower, tick_upper)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return convention.log_base ** (tick_upper - tick_lower)


def _current_sqrt_price(
    *,
    current_tick: int,
    current_sqrt_price: int | None,
    convention: ProtocolPriceConvention,
) -> Decimal:
    if current_sqrt_price is not None and current_sqrt_price > 0:
        return sqrt_price_fixed_to_sqrt_price(current_sqrt_price, convention)
    return tick_to_sqrt_price(current_tick, convention)
