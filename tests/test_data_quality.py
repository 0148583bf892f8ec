from __future__ import annotations

from decimal import Decimal

from clm_core.domain.entities.data_quality import (
    HIGH_APR,
    IMPLAUSIBLE_APR,
    NARROW_RANGE,
    PRICE_OUT_OF_BAND,
    TICK_PRICE_MISMATCH,
    TVL_MISMATCH,
    WIDE_RANGE,
    DataQualityThresholds,
)
from clm_core.domain.services.data_quality import (
    check_fee_apr,
    check_price_range,
    check_tick_consistency,
    check_token_price,
    check_tvl_discrepancy,
    resolve_band_symbol,
)


LIMITS = DataQualityThresholds()


def _codes(warnings):
    return [warning.code for warning in warnings]


class TestPriceRange:
    def test_wide_narrow_and_normal_ranges(self):
        assert _codes(check_price_range(price_lower=Decimal("1"), price_upper=Decimal("1000"), thresholds=LIMITS)) == [
            WIDE_RANGE
        ]
        assert _codes(check_price_range(price_lower=Decimal("1"), price_upper=Decimal("1.005"), thresholds=LIMITS)) == [
            NARROW_RANGE
        ]
        assert check_price_range(price_lower=Decimal("1"), price_upper=Decimal("2"), thresholds=LIMITS) == []

    def test_thresholds_are_configurable(self):
        strict = DataQualityThresholds(wide_range_ratio=Decimal("1.5"))
        assert _codes(check_price_range(price_lower=Decimal("1"), price_upper=Decimal("2"), thresholds=strict)) == [
            WIDE_RANGE
        ]


class TestTvlDiscrepancy:
    def test_large_discrepancy_is_flagged(self):
        warnings = check_tvl_discrepancy(
            computed_tvl_usd=Decimal("300"),
            reported_tvl_usd=Decimal("100"),
            thresholds=LIMITS,
        )
        assert _codes(warnings) == [TVL_MISMATCH]
        assert warnings[0].context["difference"] == "2"

    def test_small_discrepancy_or_missing_report_passes(self):
        assert check_tvl_discrepancy(
            computed_tvl_usd=Decimal("120"), reported_tvl_usd=Decimal("100"), thresholds=LIMITS
        ) == []
        assert check_tvl_discrepancy(computed_tvl_usd=Decimal("120"), reported_tvl_usd=None, thresholds=LIMITS) == []
        assert check_tvl_discrepancy(computed_tvl_usd=None, reported_tvl_usd=Decimal("100"), thresholds=LIMITS) == []


class TestTokenPriceBands:
    def test_wrapped_symbols_resolve_to_base(self):
        bands = LIMITS.price_sanity_bands
        assert resolve_band_symbol("WETH", bands) == "ETH"
        assert resolve_band_symbol("cbBTC", bands) == "BTC"
        assert resolve_band_symbol("usdc", bands) == "USDC"
        assert resolve_band_symbol("PEPE", bands) is None

    def test_out_of_band_price_is_flagged(self):
        warnings = check_token_price(symbol="WBTC", price_usd=Decimal("5"), thresholds=LIMITS)
        assert _codes(warnings) == [PRICE_OUT_OF_BAND]

    def test_in_band_unknown_or_missing_price_passes(self):
        assert check_token_price(symbol="ETH", price_usd=Decimal("3000"), thresholds=LIMITS) == []
        assert check_token_price(symbol="PEPE", price_usd=Decimal("0.00001"), thresholds=LIMITS) == []
        assert check_token_price(symbol="ETH", price_usd=None, thresholds=LIMITS) == []
        assert check_token_price(symbol=None, price_usd=Decimal("1"), thresholds=LIMITS) == []


class TestFeeApr:
    def test_apr_levels(self):
        assert _codes(check_fee_apr(fee_apr=Decimal("1500"), thresholds=LIMITS)) == [IMPLAUSIBLE_APR]
        assert _codes(check_fee_apr(fee_apr=Decimal("250"), thresholds=LIMITS)) == [HIGH_APR]
        assert check_fee_apr(fee_apr=Decimal("50"), thresholds=LIMITS) == []
        assert check_fee_apr(fee_apr=None, thresholds=LIMITS) == []


class TestTickConsistency:
    def test_tolerance_is_one_tick_spacing(self):
        assert check_tick_consistency(current_tick=100, sqrt_price_tick=160, tick_spacing=60) == []
        assert _codes(check_tick_consistency(current_tick=100, sqrt_price_tick=161, tick_spacing=60)) == [
            TICK_PRICE_MISMATCH
        ]

    def test_zero_spacing_still_tolerates_one_tick(self):
        assert check_tick_consistency(current_tick=0, sqrt_price_tick=1, tick_spacing=0) == []
        assert _codes(check_tick_consistency(current_tick=0, sqrt_price_tick=2, tick_spacing=0)) == [
            TICK_PRICE_MISMATCH
        ]
