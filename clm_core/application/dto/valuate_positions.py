from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from clm_core.domain.entities.position import PositionValuation


@dataclass(frozen=True)
class ValuatePositionsInput:
    wallet_address: str
    network: str
    reported_tvl_usd: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class PositionValuationResult:
    position_id: str
    pool_id: str
    valuation: PositionValuation | None
    error: str | None = None
    error_type: str | None = None


@dataclass(frozen=True)
class ValuatePositionsOutput:
    wallet_address: str
    network: str
    results: list[PositionValuationResult]
    data_sources: list[str]
