from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv

from clm_core.domain.entities.data_quality import DEFAULT_PRICE_SANITY_BANDS, DataQualityThresholds


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _json(name: str) -> dict:
    value = _env(name)
    if not value:
        return {}
    return json.loads(value)


def _price_bands(overrides: dict) -> dict[str, tuple[Decimal, Decimal]]:
    bands = dict(DEFAULT_PRICE_SANITY_BANDS)
    for symbol, bounds in overrides.items():
        low, high = bounds
        bands[str(symbol).strip().upper()] = (Decimal(str(low)), Decimal(str(high)))
    return bands


@dataclass(frozen=True)
class Settings:
    tvl_mismatch_ratio: Decimal
    wide_range_ratio: Decimal
    narrow_range_ratio: Decimal
    max_plausible_fee_apr: Decimal
    high_fee_apr: Decimal
    price_sanity_bands: dict
    analytics_lookback_days: int
    static_positions_path: str

    def thresholds(self) -> DataQualityThresholds:
        return DataQualityThresholds(
            tvl_mismatch_ratio=self.tvl_mismatch_ratio,
            wide_range_ratio=self.wide_range_ratio,
            narrow_range_ratio=self.narrow_range_ratio,
            max_plausible_fee_apr=self.max_plausible_fee_apr,
            high_fee_apr=self.high_fee_apr,
            price_sanity_bands=self.price_sanity_bands,
        )


def get_settings() -> Settings:
    return Settings(
        tvl_mismatch_ratio=Decimal(_env("TVL_MISMATCH_RATIO", "0.5")),
        wide_range_ratio=Decimal(_env("WIDE_RANGE_RATIO", "100")),
        narrow_range_ratio=Decimal(_env("NARROW_RANGE_RATIO", "1.01")),
        max_plausible_fee_apr=Decimal(_env("MAX_PLAUSIBLE_FEE_APR", "1000")),
        high_fee_apr=Decimal(_env("HIGH_FEE_APR", "200")),
        price_sanity_bands=_price_bands(_json("PRICE_SANITY_BANDS")),
        analytics_lookback_days=int(_env("ANALYTICS_LOOKBACK_DAYS", "31")),
        static_positions_path=_env("STATIC_POSITIONS_PATH", ""),
    )
