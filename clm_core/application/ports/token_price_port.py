from __future__ import annotations

from typing import Protocol

from clm_core.domain.entities.position import TokenUsdPrices


class TokenPricePort(Protocol):
    def get_usd_prices(self, *, pool_id: str) -> TokenUsdPrices:
        ...
