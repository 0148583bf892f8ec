from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from clm_core.domain.entities.pool_analytics import PricePoint
from clm_core.domain.services.impermanent_loss import impermanent_loss, realized_impermanent_loss


def _series(prices):
    base = datetime(2026, 1, 1)
    return [
        PricePoint(timestamp=base + timedelta(days=i), price=Decimal(str(price)))
        for i, price in enumerate(prices)
    ]


class TestImpermanentLoss:
    def test_no_price_move_has_no_loss(self):
        assert impermanent_loss(Decimal("1")) == Decimal("0")

    def test_loss_is_symmetric_in_ratio(self):
        assert impermanent_loss(Decimal("4")) == Decimal("-0.2")
        assert impermanent_loss(Decimal("0.25")) == Decimal("-0.2")

    def test_non_positive_ratio_is_rejected(self):
        with pytest.raises(ValueError):
            impermanent_loss(Decimal("0"))


class TestRealizedImpermanentLoss:
    def test_uses_trailing_window_endpoints(self):
        prices = [1] + [100] * 30 + [400]
        assert realized_impermanent_loss(_series(prices), window_days=30) == Decimal("-0.2")

    def test_short_series_is_null(self):
        assert realized_impermanent_loss(_series([100] * 30), window_days=30) is None

    def test_non_positive_endpoint_is_null(self):
        assert realized_impermanent_loss(_series([0, 100]), window_days=1) is None
