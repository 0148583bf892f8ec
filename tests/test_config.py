from __future__ import annotations

from decimal import Decimal

from clm_core.core.config import get_settings


ENV_NAMES = (
    "TVL_MISMATCH_RATIO",
    "WIDE_RANGE_RATIO",
    "NARROW_RANGE_RATIO",
    "MAX_PLAUSIBLE_FEE_APR",
    "HIGH_FEE_APR",
    "PRICE_SANITY_BANDS",
    "ANALYTICS_LOOKBACK_DAYS",
    "STATIC_POSITIONS_PATH",
)


def _clear_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear_env(monkeypatch)

    settings = get_settings()

    assert settings.tvl_mismatch_ratio == Decimal("0.5")
    assert settings.wide_range_ratio == Decimal("100")
    assert settings.analytics_lookback_days == 31
    assert settings.static_positions_path == ""
    assert settings.price_sanity_bands["ETH"] == (Decimal("800"), Decimal("20000"))


def test_env_overrides_reach_thresholds(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("HIGH_FEE_APR", "150")
    monkeypatch.setenv("ANALYTICS_LOOKBACK_DAYS", "14")
    monkeypatch.setenv("PRICE_SANITY_BANDS", '{"eth": [1000, 5000], "HYPE": ["5", "80"]}')

    settings = get_settings()
    thresholds = settings.thresholds()

    assert settings.analytics_lookback_days == 14
    assert thresholds.high_fee_apr == Decimal("150")
    assert thresholds.price_sanity_bands["ETH"] == (Decimal("1000"), Decimal("5000"))
    assert thresholds.price_sanity_bands["HYPE"] == (Decimal("5"), Decimal("80"))
    assert thresholds.price_sanity_bands["BTC"] == (Decimal("15000"), Decimal("200000"))
