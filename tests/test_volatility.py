from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from clm_core.domain.entities.pool_analytics import INSUFFICIENT_HISTORY, PricePoint
from clm_core.domain.exceptions import InvalidPriceSeries
from clm_core.domain.services.volatility import (
    compute_volatility,
    log_returns,
    volatility_from_returns,
    volatility_profile,
)


def _series(prices):
    base = datetime(2026, 1, 1)
    return [
        PricePoint(timestamp=base + timedelta(days=i), price=Decimal(str(price)))
        for i, price in enumerate(prices)
    ]


class TestComputeVolatility:
    def test_flat_prices_have_zero_volatility(self):
        assert compute_volatility(_series([100] * 31), 30) == Decimal("0")

    def test_alternating_prices_match_closed_form(self):
        prices = [100 if i % 2 == 0 else 110 for i in range(31)]
        result = compute_volatility(_series(prices), 30)
        expected = Decimal("1.1").ln() * Decimal(365).sqrt()
        assert float(result) == pytest.approx(float(expected), rel=1e-9)

    def test_fewer_points_than_window_is_null(self):
        assert compute_volatility(_series([100, 101, 102, 103, 104]), 7) is None

    def test_single_point_one_day_window_is_zero(self):
        assert compute_volatility(_series([100]), 1) == Decimal("0")

    def test_result_is_non_negative(self):
        prices = [100, 103, 98, 97, 105, 110, 90, 95]
        result = compute_volatility(_series(prices), 7)
        assert result is not None
        assert result >= 0

    def test_only_trailing_window_is_used(self):
        calm_tail = [50, 80, 40, 90] + [100] * 8
        assert compute_volatility(_series(calm_tail), 7) == Decimal("0")

    def test_unordered_series_is_rejected(self):
        points = _series([100, 101, 102])
        with pytest.raises(InvalidPriceSeries):
            compute_volatility([points[0], points[2], points[1]], 1)

    def test_duplicate_timestamps_are_rejected(self):
        points = _series([100, 101])
        with pytest.raises(InvalidPriceSeries):
            compute_volatility([points[0], points[0]], 1)

    def test_non_positive_window_is_rejected(self):
        with pytest.raises(ValueError):
            volatility_from_returns([], window_days=0, points_count=10)


class TestLogReturns:
    def test_non_positive_prices_are_skipped(self):
        returns = log_returns(_series([100, 0, 100, 110]))
        assert len(returns) == 1
        assert float(returns[0]) == pytest.approx(float(Decimal("1.1").ln()))


class TestVolatilityProfile:
    def test_short_history_nulls_long_windows_with_reason(self):
        profile = volatility_profile(_series([100, 101, 99, 102, 100]))
        assert profile.volatility_1d is not None
        assert profile.volatility_7d is None
        assert profile.volatility_30d is None
        assert profile.returns_count == 4
        assert profile.null_reasons == {
            "volatility_7d": INSUFFICIENT_HISTORY,
            "volatility_30d": INSUFFICIENT_HISTORY,
        }

    def test_full_history_fills_every_window(self):
        profile = volatility_profile(_series([100 + (i % 3) for i in range(40)]))
        assert profile.volatility_30d is not None
        assert profile.null_reasons == {}
