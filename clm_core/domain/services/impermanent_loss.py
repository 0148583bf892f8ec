from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Sequence

from clm_core.domain.entities.pool_analytics import PricePoint
from clm_core.domain.services.tick_math import DECIMAL_PRECISION


def impermanent_loss(price_ratio: Decimal) -> Decimal:
    """Constant-product IL for a price move of ``price_ratio`` (P_end / P_start).

    Returns a value <= 0; ``-0.0572`` means the position is worth 5.72% less
    than holding the tokens.
    """
    if price_ratio <= 0:
        raise ValueError("price_ratio must be positive.")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return (Decimal(2) * price_ratio.sqrt()) / (Decimal(1) + price_ratio) - Decimal(1)


def realized_impermanent_loss(series: Sequence[PricePoint], *, window_days: int) -> Decimal | None:
    if window_days <= 0:
        raise ValueError("window_days must be a positive integer.")
    if len(series) < window_days + 1:
        return None
    window = series[-(window_days + 1):]
    start, end = window[0].price, window[-1].price
    if start <= 0 or end <= 0:
        return None
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return impermanent_loss(end / start)
