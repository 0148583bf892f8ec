from __future__ import annotations

from typing import Annotated, Any, Mapping

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from clm_core.domain.entities.position import LIVE_SOURCE, PoolState, Position
from clm_core.domain.entities.price_convention import CETUS
from clm_core.domain.exceptions import InvalidPoolState, InvalidPositionData
from clm_core.domain.services.tick_math import normalize_tick
from clm_core.infrastructure.adapters.base import ProtocolAdapter


def _unwrap_object_id(value: Any) -> Any:
    # Sui returns UID fields as {"id": "0x..."}.
    if isinstance(value, Mapping):
        return value.get("id")
    return value


SuiObjectId = Annotated[str, BeforeValidator(_unwrap_object_id)]


class I32Bits(BaseModel):
    bits: int = Field(ge=0)


class I32Field(BaseModel):
    fields: I32Bits


class CetusPositionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    position_id: SuiObjectId = Field(alias="id", min_length=1)
    pool: str = Field(min_length=1)
    liquidity: int = Field(ge=0)
    tick_lower_index: I32Field
    tick_upper_index: I32Field
    fee_owed_a: int = Field(default=0, ge=0)
    fee_owed_b: int = Field(default=0, ge=0)


class CetusPoolPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pool_id: SuiObjectId = Field(alias="id", min_length=1)
    current_sqrt_price: int = Field(gt=0)
    current_tick_index: I32Field
    tick_spacing: int = Field(gt=0)
    liquidity: int = Field(default=0, ge=0)


class CetusPositionAdapter(ProtocolAdapter):
    protocols = (CETUS,)

    def __init__(self, *, data_source: str = LIVE_SOURCE):
        super().__init__(protocol=CETUS, data_source=data_source)

    def to_position(self, payload: Mapping[str, Any]) -> Position:
        raw = self._parse(CetusPositionPayload, payload, error=InvalidPositionData)
        return Position(
            position_id=raw.position_id,
            pool_id=raw.pool,
            tick_range=self._tick_range(
                raw.tick_lower_index.fields.bits,
                raw.tick_upper_index.fields.bits,
            ),
            liquidity=raw.liquidity,
            fee_owed0=raw.fee_owed_a,
            fee_owed1=raw.fee_owed_b,
            data_source=self.data_source,
        )

    def to_pool_state(self, payload: Mapping[str, Any]) -> PoolState:
        raw = self._parse(CetusPoolPayload, payload, error=InvalidPoolState)
        return PoolState(
            pool_id=raw.pool_id,
            tick_spacing=raw.tick_spacing,
            current_tick=normalize_tick(raw.current_tick_index.fields.bits, max_tick=self.max_tick),
            current_sqrt_price=raw.current_sqrt_price,
            total_liquidity=raw.liquidity,
        )
