from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping

from clm_core.domain.entities.data_quality import DataQualityWarning


ATTRACTIVE = "attractive"
FAIR = "fair"
OVERPRICED = "overpriced"
INSUFFICIENT_DATA = "insufficient_data"

INSUFFICIENT_HISTORY = "insufficient_history"


@dataclass(frozen=True)
class PricePoint:
    timestamp: datetime
    price: Decimal
    volume_usd: Decimal | None = None


@dataclass(frozen=True)
class PriceSeries:
    points: tuple[PricePoint, ...]
    data_source: str


@dataclass(frozen=True)
class VolatilityProfile:
    volatility_1d: Decimal | None
    volatility_7d: Decimal | None
    volatility_30d: Decimal | None
    returns_count: int
    null_reasons: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RiskScore:
    fvr: Decimal | None
    il_risk_score: int
    recommendation: str
    expected_il_30d: Decimal
    breakeven_fee_apr: Decimal


@dataclass(frozen=True)
class PoolAnalytics:
    pool_address: str
    network: str
    fee_apr: Decimal | None
    volatility_1d: Decimal | None
    volatility_7d: Decimal | None
    volatility_30d: Decimal | None
    fvr: Decimal | None
    il_risk_score: int
    recommendation: str
    expected_il_30d: Decimal
    breakeven_fee_apr: Decimal
    realized_il_30d: Decimal | None
    data_points_count: int
    oldest_timestamp: datetime | None
    newest_timestamp: datetime | None
    source: str
    warnings: tuple[DataQualityWarning, ...] = ()
    null_reasons: Mapping[str, str] = field(default_factory=dict)
