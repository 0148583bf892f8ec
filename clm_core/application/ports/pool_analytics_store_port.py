from __future__ import annotations

from typing import Protocol

from clm_core.domain.entities.pool_analytics import PoolAnalytics


class PoolAnalyticsStorePort(Protocol):
    def save(self, analytics: PoolAnalytics) -> None:
        """Upsert keyed by (pool_address, network)."""
        ...
