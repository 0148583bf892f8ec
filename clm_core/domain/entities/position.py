from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from clm_core.domain.entities.data_quality import DataQualityWarning


LIVE_SOURCE = "live"
STATIC_SOURCE = "static"


@dataclass(frozen=True)
class TickRange:
    tick_lower: int
    tick_upper: int


@dataclass(frozen=True)
class PoolState:
    pool_id: str
    tick_spacing: int
    current_tick: int
    current_sqrt_price: int
    total_liquidity: int


@dataclass(frozen=True)
class Position:
    position_id: str
    pool_id: str
    tick_range: TickRange
    liquidity: int
    fee_owed0: int = 0
    fee_owed1: int = 0
    data_source: str = LIVE_SOURCE


@dataclass(frozen=True)
class TokenUsdPrices:
    token0_usd: Decimal | None
    token1_usd: Decimal | None
    token0_symbol: str | None = None
    token1_symbol: str | None = None


@dataclass(frozen=True)
class PositionValuation:
    position_id: str
    pool_id: str
    amount0: Decimal
    amount1: Decimal
    price_lower: Decimal
    price_upper: Decimal
    current_price: Decimal
    in_range: bool
    uncollected_fee0: Decimal
    uncollected_fee1: Decimal
    uncollected_fee0_usd: Decimal | None
    uncollected_fee1_usd: Decimal | None
    tvl_usd: Decimal | None
    unknown_usd_fields: tuple[str, ...]
    warnings: tuple[DataQualityWarning, ...]
    data_source: str
