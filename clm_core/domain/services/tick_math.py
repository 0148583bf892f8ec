from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext

from clm_core.domain.entities.price_convention import ProtocolPriceConvention
from clm_core.domain.exceptions import InvalidPoolState, InvalidPriceConvention, InvalidTickRange


DECIMAL_PRECISION = 60
INT32_MAX = 2**31 - 1
UINT32_MODULUS = 2**32
MAX_TOKEN_DECIMALS = 255
TICK_SNAP_TOLERANCE = Decimal("1e-9")


def require_convention(convention: ProtocolPriceConvention | None) -> ProtocolPriceConvention:
    if convention is None:
        raise InvalidPriceConvention("Price convention not resolved for pool.")
    protocol = convention.protocol
    if not isinstance(convention.log_base, Decimal) or convention.log_base <= 1:
        raise InvalidPriceConvention(f"log_base unresolved for {protocol}.")
    bits = convention.sqrt_price_fixed_point_bits
    if not _is_plain_int(bits) or bits <= 0:
        raise InvalidPriceConvention(f"sqrt_price_fixed_point_bits unresolved for {protocol}.")
    if not _is_plain_int(convention.max_tick) or convention.max_tick <= 0:
        raise InvalidPriceConvention(f"max_tick unresolved for {protocol}.")
    for field_name, value in (
        ("token0_decimals", convention.token0_decimals),
        ("token1_decimals", convention.token1_decimals),
    ):
        if not _is_plain_int(value) or value < 0 or value > MAX_TOKEN_DECIMALS:
            raise InvalidPriceConvention(f"{field_name} unresolved for {protocol}.")
    return convention


def normalize_tick(raw_tick: int | str, *, max_tick: int) -> int:
    try:
        tick = int(raw_tick)
    except (TypeError, ValueError) as exc:
        raise InvalidTickRange(f"Tick {raw_tick!r} is not an integer.") from exc

    if -max_tick <= tick <= max_tick:
        return tick
    if INT32_MAX < tick < UINT32_MODULUS:
        signed = tick - UINT32_MODULUS
        if abs(signed) <= max_tick:
            return signed
    raise InvalidTickRange(f"Tick {raw_tick} outside [-{max_tick}, {max_tick}].")


def check_tick_bounds(tick: int, convention: ProtocolPriceConvention) -> int:
    require_convention(convention)
    if abs(tick) > convention.max_tick:
        raise InvalidTickRange(
            f"Tick {tick} outside [-{convention.max_tick}, {convention.max_tick}] for {convention.protocol}."
        )
    return tick


def decimal_adjustment(convention: ProtocolPriceConvention) -> Decimal:
    require_convention(convention)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(10) ** convention.decimals_delta


def tick_to_sqrt_price(tick: int, convention: ProtocolPriceConvention) -> Decimal:
    check_tick_bounds(tick, convention)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return (convention.log_base**tick).sqrt()


def tick_to_sqrt_price_fixed(tick: int, convention: ProtocolPriceConvention) -> int:
    sqrt_price = tick_to_sqrt_price(tick, convention)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        scaled = sqrt_price * (Decimal(2) ** convention.sqrt_price_fixed_point_bits)
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def sqrt_price_fixed_to_sqrt_price(sqrt_price_raw: int, convention: ProtocolPriceConvention) -> Decimal:
    require_convention(convention)
    if sqrt_price_raw is None or sqrt_price_raw <= 0:
        raise InvalidPoolState("sqrt price must be a positive fixed-point integer.")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(sqrt_price_raw) / (Decimal(2) ** convention.sqrt_price_fixed_point_bits)


def tick_to_price(tick: int, convention: ProtocolPriceConvention) -> Decimal:
    check_tick_bounds(tick, convention)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        price = (convention.log_base**tick) * decimal_adjustment(convention)
        if convention.invert_pair:
            return Decimal(1) / price
        return price


def sqrt_price_to_price(sqrt_price_raw: int, convention: ProtocolPriceConvention) -> Decimal:
    sqrt_price = sqrt_price_fixed_to_sqrt_price(sqrt_price_raw, convention)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        price = sqrt_price * sqrt_price * decimal_adjustment(convention)
        if convention.invert_pair:
            return Decimal(1) / price
        return price


def price_to_tick(price: Decimal, convention: ProtocolPriceConvention) -> int:
    require_convention(convention)
    if price <= 0:
        raise ValueError("price must be positive.")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        value = Decimal(price)
        if convention.invert_pair:
            value = Decimal(1) / value
        raw_price = value / decimal_adjustment(convention)
        return _snap_to_tick(raw_price.ln() / convention.log_base.ln())


def sqrt_price_to_tick(sqrt_price_raw: int, convention: ProtocolPriceConvention) -> int:
    sqrt_price = sqrt_price_fixed_to_sqrt_price(sqrt_price_raw, convention)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        try:
            value = (Decimal(2) * sqrt_price.ln()) / convention.log_base.ln()
        except InvalidOperation as exc:
            raise InvalidPoolState("sqrt price cannot be mapped to a tick.") from exc
        return _snap_to_tick(value)


def _snap_to_tick(value: Decimal) -> int:
    nearest = value.to_integral_value()
    if abs(value - nearest) <= TICK_SNAP_TOLERANCE:
        return int(nearest)
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def _is_plain_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
