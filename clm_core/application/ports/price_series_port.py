from __future__ import annotations

from typing import Protocol

from clm_core.domain.entities.pool_analytics import PriceSeries


class PriceSeriesPort(Protocol):
    def get_price_series(
        self,
        *,
        pool_address: str,
        network: str,
        lookback_days: int,
    ) -> PriceSeries:
        ...
