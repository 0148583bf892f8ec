from __future__ import annotations

from typing import Protocol

from clm_core.domain.entities.position import Position


class PositionDiscoveryPort(Protocol):
    def list_positions(self, *, wallet_address: str, network: str) -> list[Position]:
        ...
