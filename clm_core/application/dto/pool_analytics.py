from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from clm_core.domain.entities.pool_analytics import PoolAnalytics


@dataclass(frozen=True)
class PoolAnalyticsRequest:
    pool_address: str
    network: str
    fee_apr: Decimal | None = None
    fees_24h_usd: Decimal | None = None
    tvl_usd: Decimal | None = None


@dataclass(frozen=True)
class BuildPoolAnalyticsInput:
    pools: list[PoolAnalyticsRequest]
    lookback_days: int | None = None


@dataclass(frozen=True)
class PoolAnalyticsResult:
    pool_address: str
    network: str
    analytics: PoolAnalytics | None
    stored: bool = False
    error: str | None = None
    error_type: str | None = None


@dataclass(frozen=True)
class BuildPoolAnalyticsOutput:
    results: list[PoolAnalyticsResult]
