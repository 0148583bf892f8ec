from __future__ import annotations

from decimal import Decimal, localcontext

from clm_core.domain.entities.data_quality import (
    PRICE_UNAVAILABLE,
    DataQualityThresholds,
    DataQualityWarning,
)
from clm_core.domain.entities.position import (
    PoolState,
    Position,
    PositionValuation,
    TokenUsdPrices,
)
from clm_core.domain.entities.price_convention import ProtocolPriceConvention
from clm_core.domain.exceptions import InvalidPoolState, PriceUnavailable
from clm_core.domain.services.data_quality import (
    check_price_range,
    check_tick_consistency,
    check_token_price,
    check_tvl_discrepancy,
)
from clm_core.domain.services.liquidity import decompose, to_token_units, validate_tick_range
from clm_core.domain.services.tick_math import (
    DECIMAL_PRECISION,
    require_convention,
    sqrt_price_to_price,
    sqrt_price_to_tick,
    tick_to_price,
)


def is_in_range(*, liquidity: int, tick_lower: int, tick_upper: int, current_tick: int) -> bool:
    if liquidity <= 0:
        return False
    return tick_lower <= current_tick < tick_upper


def require_usd_price(price: Decimal | None, *, token: str) -> Decimal:
    if not isinstance(price, Decimal) or not price.is_finite() or price <= 0:
        raise PriceUnavailable(f"USD price unavailable for {token}.")
    return price


def valuate(
    *,
    position: Position,
    pool_state: PoolState,
    convention: ProtocolPriceConvention,
    prices: TokenUsdPrices,
    reported_tvl_usd: Decimal | None = None,
    thresholds: DataQualityThresholds | None = None,
) -> PositionValuation:
    limits = thresholds or DataQualityThresholds()
    require_convention(convention)
    if position.pool_id != pool_state.pool_id:
        raise InvalidPoolState(
            f"Position {position.position_id} belongs to pool {position.pool_id}, "
            f"snapshot is for {pool_state.pool_id}."
        )

    tick_lower = position.tick_range.tick_lower
    tick_upper = position.tick_range.tick_upper
    validate_tick_range(tick_lower, tick_upper)

    bound_a = tick_to_price(tick_lower, convention)
    bound_b = tick_to_price(tick_upper, convention)
    price_lower, price_upper = min(bound_a, bound_b), max(bound_a, bound_b)

    warnings: list[DataQualityWarning] = []
    if pool_state.current_sqrt_price and pool_state.current_sqrt_price > 0:
        current_price = sqrt_price_to_price(pool_state.current_sqrt_price, convention)
        warnings.extend(
            check_tick_consistency(
                current_tick=pool_state.current_tick,
                sqrt_price_tick=sqrt_price_to_tick(pool_state.current_sqrt_price, convention),
                tick_spacing=pool_state.tick_spacing,
            )
        )
    else:
        current_price = tick_to_price(pool_state.current_tick, convention)

    amount0, amount1 = decompose(
        liquidity=position.liquidity,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        current_tick=pool_state.current_tick,
        current_sqrt_price=pool_state.current_sqrt_price,
        convention=convention,
    )
    in_range = is_in_range(
        liquidity=position.liquidity,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        current_tick=pool_state.current_tick,
    )

    fee0 = to_token_units(position.fee_owed0, convention.token0_decimals)
    fee1 = to_token_units(position.fee_owed1, convention.token1_decimals)

    unknown_usd_fields: list[str] = []
    price0 = _usd_price_or_none(prices.token0_usd, token=prices.token0_symbol or "token0")
    price1 = _usd_price_or_none(prices.token1_usd, token=prices.token1_symbol or "token1")

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        fee0_usd = fee0 * price0 if price0 is not None else None
        fee1_usd = fee1 * price1 if price1 is not None else None
        tvl_usd = (
            amount0 * price0 + amount1 * price1
            if price0 is not None and price1 is not None
            else None
        )

    if price0 is None:
        unknown_usd_fields.append("uncollected_fee0_usd")
    if price1 is None:
        unknown_usd_fields.append("uncollected_fee1_usd")
    if tvl_usd is None:
        unknown_usd_fields.append("tvl_usd")
    for label, symbol, value in (
        ("token0", prices.token0_symbol, price0),
        ("token1", prices.token1_symbol, price1),
    ):
        if value is None:
            warnings.append(
                DataQualityWarning(
                    code=PRICE_UNAVAILABLE,
                    message=f"USD price unavailable for {symbol or label}; USD fields reported as unknown.",
                    context={"token": label},
                )
            )

    warnings.extend(check_price_range(price_lower=price_lower, price_upper=price_upper, thresholds=limits))
    warnings.extend(check_token_price(symbol=prices.token0_symbol, price_usd=price0, thresholds=limits))
    warnings.extend(check_token_price(symbol=prices.token1_symbol, price_usd=price1, thresholds=limits))
    warnings.extend(
        check_tvl_discrepancy(
            computed_tvl_usd=tvl_usd,
            reported_tvl_usd=reported_tvl_usd,
            thresholds=limits,
        )
    )

    return PositionValuation(
        position_id=position.position_id,
        pool_id=position.pool_id,
        amount0=amount0,
        amount1=amount1,
        price_lower=price_lower,
        price_upper=price_upper,
        current_price=current_price,
        in_range=in_range,
        uncollected_fee0=fee0,
        uncollected_fee1=fee1,
        uncollected_fee0_usd=fee0_usd,
        uncollected_fee1_usd=fee1_usd,
        tvl_usd=tvl_usd,
        unknown_usd_fields=tuple(unknown_usd_fields),
        warnings=tuple(warnings),
        data_source=position.data_source,
    )


def _usd_price_or_none(price: Decimal | None, *, token: str) -> Decimal | None:
    try:
        return require_usd_price(price, token=token)
    except PriceUnavailable:
        return None
