from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping


WIDE_RANGE = "wide_range"
NARROW_RANGE = "narrow_range"
TVL_MISMATCH = "tvl_mismatch"
PRICE_OUT_OF_BAND = "price_out_of_band"
PRICE_UNAVAILABLE = "price_unavailable"
IMPLAUSIBLE_APR = "implausible_apr"
HIGH_APR = "high_apr"
TICK_PRICE_MISMATCH = "tick_price_mismatch"


# USD bands per token symbol. Wrapped/bridged variants resolve to the base symbol.
DEFAULT_PRICE_SANITY_BANDS: dict[str, tuple[Decimal, Decimal]] = {
    "BTC": (Decimal("15000"), Decimal("200000")),
    "ETH": (Decimal("800"), Decimal("20000")),
    "SOL": (Decimal("8"), Decimal("1000")),
    "SUI": (Decimal("0.2"), Decimal("50")),
    "ARB": (Decimal("0.3"), Decimal("10")),
    "MATIC": (Decimal("0.3"), Decimal("5")),
    "AVAX": (Decimal("8"), Decimal("200")),
    "AERO": (Decimal("0.1"), Decimal("50")),
    "USDC": (Decimal("0.95"), Decimal("1.05")),
    "USDT": (Decimal("0.95"), Decimal("1.05")),
    "DAI": (Decimal("0.95"), Decimal("1.05")),
}


@dataclass(frozen=True)
class DataQualityWarning:
    code: str
    message: str
    context: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DataQualityThresholds:
    tvl_mismatch_ratio: Decimal = Decimal("0.5")
    wide_range_ratio: Decimal = Decimal("100")
    narrow_range_ratio: Decimal = Decimal("1.01")
    max_plausible_fee_apr: Decimal = Decimal("1000")
    high_fee_apr: Decimal = Decimal("200")
    price_sanity_bands: Mapping[str, tuple[Decimal, Decimal]] = field(
        default_factory=lambda: dict(DEFAULT_PRICE_SANITY_BANDS)
    )
