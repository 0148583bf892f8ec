from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from clm_core.domain.entities.position import LIVE_SOURCE, PoolState, Position
from clm_core.domain.entities.price_convention import ORCA_WHIRLPOOL
from clm_core.domain.exceptions import InvalidPoolState, InvalidPositionData
from clm_core.domain.services.tick_math import normalize_tick
from clm_core.infrastructure.adapters.base import ProtocolAdapter


class WhirlpoolPositionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    position_mint: str = Field(alias="positionMint", min_length=1)
    whirlpool: str = Field(min_length=1)
    tick_lower_index: int = Field(alias="tickLowerIndex")
    tick_upper_index: int = Field(alias="tickUpperIndex")
    liquidity: int = Field(ge=0)
    fee_owed_a: int = Field(default=0, alias="feeOwedA", ge=0)
    fee_owed_b: int = Field(default=0, alias="feeOwedB", ge=0)


class WhirlpoolPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    address: str = Field(min_length=1)
    sqrt_price: int = Field(alias="sqrtPrice", gt=0)
    tick_current_index: int = Field(alias="tickCurrentIndex")
    tick_spacing: int = Field(alias="tickSpacing", gt=0)
    liquidity: int = Field(default=0, ge=0)


class OrcaWhirlpoolAdapter(ProtocolAdapter):
    protocols = (ORCA_WHIRLPOOL,)

    def __init__(self, *, data_source: str = LIVE_SOURCE):
        super().__init__(protocol=ORCA_WHIRLPOOL, data_source=data_source)

    def to_position(self, payload: Mapping[str, Any]) -> Position:
        raw = self._parse(WhirlpoolPositionPayload, payload, error=InvalidPositionData)
        return Position(
            position_id=raw.position_mint,
            pool_id=raw.whirlpool,
            tick_range=self._tick_range(raw.tick_lower_index, raw.tick_upper_index),
            liquidity=raw.liquidity,
            fee_owed0=raw.fee_owed_a,
            fee_owed1=raw.fee_owed_b,
            data_source=self.data_source,
        )

    def to_pool_state(self, payload: Mapping[str, Any]) -> PoolState:
        raw = self._parse(WhirlpoolPayload, payload, error=InvalidPoolState)
        return PoolState(
            pool_id=raw.address,
            tick_spacing=raw.tick_spacing,
            current_tick=normalize_tick(raw.tick_current_index, max_tick=self.max_tick),
            current_sqrt_price=raw.sqrt_price,
            total_liquidity=raw.liquidity,
        )
