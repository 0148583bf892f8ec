from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from clm_core.domain.entities.position import LIVE_SOURCE, PoolState, Position
from clm_core.domain.entities.price_convention import AERODROME_SLIPSTREAM, UNISWAP_V3
from clm_core.domain.exceptions import InvalidPoolState, InvalidPositionData
from clm_core.domain.services.tick_math import normalize_tick
from clm_core.infrastructure.adapters.base import ProtocolAdapter


class NonfungiblePositionPayload(BaseModel):
    """Result of NonfungiblePositionManager.positions(tokenId)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token_id: int = Field(alias="tokenId", ge=0)
    tick_lower: int = Field(alias="tickLower")
    tick_upper: int = Field(alias="tickUpper")
    liquidity: int = Field(ge=0)
    tokens_owed0: int = Field(default=0, alias="tokensOwed0", ge=0)
    tokens_owed1: int = Field(default=0, alias="tokensOwed1", ge=0)


class Slot0Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sqrt_price_x96: int = Field(alias="sqrtPriceX96", gt=0)
    tick: int
    tick_spacing: int = Field(alias="tickSpacing", gt=0)
    liquidity: int = Field(default=0, ge=0)


class UniswapV3PositionAdapter(ProtocolAdapter):
    protocols = (UNISWAP_V3, AERODROME_SLIPSTREAM)

    def __init__(self, *, protocol: str = UNISWAP_V3, data_source: str = LIVE_SOURCE):
        super().__init__(protocol=protocol, data_source=data_source)

    def to_position(self, payload: Mapping[str, Any], *, pool_address: str) -> Position:
        raw = self._parse(NonfungiblePositionPayload, payload, error=InvalidPositionData)
        return Position(
            position_id=str(raw.token_id),
            pool_id=pool_address.lower(),
            tick_range=self._tick_range(raw.tick_lower, raw.tick_upper),
            liquidity=raw.liquidity,
            fee_owed0=raw.tokens_owed0,
            fee_owed1=raw.tokens_owed1,
            data_source=self.data_source,
        )

    def to_pool_state(self, payload: Mapping[str, Any], *, pool_address: str) -> PoolState:
        raw = self._parse(Slot0Payload, payload, error=InvalidPoolState)
        return PoolState(
            pool_id=pool_address.lower(),
            tick_spacing=raw.tick_spacing,
            current_tick=normalize_tick(raw.tick, max_tick=self.max_tick),
            current_sqrt_price=raw.sqrt_price_x96,
            total_liquidity=raw.liquidity,
        )
