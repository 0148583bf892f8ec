from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Sequence

from clm_core.domain.entities.pool_analytics import (
    INSUFFICIENT_HISTORY,
    PricePoint,
    VolatilityProfile,
)
from clm_core.domain.exceptions import InvalidPriceSeries
from clm_core.domain.services.tick_math import DECIMAL_PRECISION


ANNUALIZATION_DAYS = Decimal("365")
VOLATILITY_WINDOWS = {"1d": 1, "7d": 7, "30d": 30}


def validate_series(series: Sequence[PricePoint]) -> None:
    for previous, current in zip(series, series[1:]):
        if current.timestamp <= previous.timestamp:
            raise InvalidPriceSeries(
                f"Series must be strictly timestamp-ordered: {current.timestamp.isoformat()} "
                f"follows {previous.timestamp.isoformat()}."
            )


def log_returns(series: Sequence[PricePoint]) -> list[Decimal]:
    returns: list[Decimal] = []
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        for previous, current in zip(series, series[1:]):
            if previous.price <= 0 or current.price <= 0:
                continue
            returns.append((current.price / previous.price).ln())
    return returns


def volatility_from_returns(
    returns: Sequence[Decimal],
    *,
    window_days: int,
    points_count: int,
) -> Decimal | None:
    if window_days <= 0:
        raise ValueError("window_days must be a positive integer.")
    if points_count < window_days:
        return None

    window = list(returns[-window_days:])
    if not window:
        return Decimal("0")

    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        count = Decimal(len(window))
        mean = sum(window, Decimal("0")) / count
        variance = sum(((value - mean) ** 2 for value in window), Decimal("0")) / count
        return variance.sqrt() * ANNUALIZATION_DAYS.sqrt()


def compute_volatility(series: Sequence[PricePoint], window_days: int) -> Decimal | None:
    validate_series(series)
    return volatility_from_returns(
        log_returns(series),
        window_days=window_days,
        points_count=len(series),
    )


def volatility_profile(series: Sequence[PricePoint]) -> VolatilityProfile:
    validate_series(series)
    returns = log_returns(series)
    values: dict[str, Decimal | None] = {}
    null_reasons: dict[str, str] = {}
    for label, window_days in VOLATILITY_WINDOWS.items():
        value = volatility_from_returns(returns, window_days=window_days, points_count=len(series))
        values[label] = value
        if value is None:
            null_reasons[f"volatility_{label}"] = INSUFFICIENT_HISTORY

    return VolatilityProfile(
        volatility_1d=values["1d"],
        volatility_7d=values["7d"],
        volatility_30d=values["30d"],
        returns_count=len(returns),
        null_reasons=null_reasons,
    )
