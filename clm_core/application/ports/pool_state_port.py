from __future__ import annotations

from typing import Protocol

from clm_core.domain.entities.position import PoolState
from clm_core.domain.entities.price_convention import ProtocolPriceConvention


class PoolStatePort(Protocol):
    def get_pool_state(self, *, pool_id: str) -> PoolState | None:
        ...

    def get_price_convention(self, *, pool_id: str) -> ProtocolPriceConvention | None:
        ...
