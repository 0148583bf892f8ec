from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from clm_core.core.config import Settings
from clm_core.domain.entities.position import STATIC_SOURCE, Position, TickRange
from clm_core.domain.exceptions import InvalidPositionData
from clm_core.domain.services.liquidity import validate_tick_range


logger = logging.getLogger(__name__)


class StaticPositionRecord(BaseModel):
    """Manually curated position used when no live discovery exists for a network."""

    model_config = ConfigDict(extra="ignore")

    wallet_address: str = Field(min_length=1)
    network: str = Field(min_length=1)
    position_id: str = Field(min_length=1)
    pool_id: str = Field(min_length=1)
    tick_lower: int
    tick_upper: int
    liquidity: int = Field(ge=0)
    fee_owed0: int = Field(default=0, ge=0)
    fee_owed1: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _ordered_ticks(self) -> "StaticPositionRecord":
        if self.tick_lower >= self.tick_upper:
            raise ValueError("tick_lower must be below tick_upper")
        return self

    def to_position(self) -> Position:
        validate_tick_range(self.tick_lower, self.tick_upper)
        return Position(
            position_id=self.position_id,
            pool_id=self.pool_id,
            tick_range=TickRange(tick_lower=self.tick_lower, tick_upper=self.tick_upper),
            liquidity=self.liquidity,
            fee_owed0=self.fee_owed0,
            fee_owed1=self.fee_owed1,
            data_source=STATIC_SOURCE,
        )


class StaticPositionProvider:
    def __init__(self, records: Iterable[StaticPositionRecord]):
        self._records = list(records)

    @classmethod
    def from_payload(cls, payload: list[dict]) -> "StaticPositionProvider":
        records = []
        for index, row in enumerate(payload):
            try:
                records.append(StaticPositionRecord.model_validate(row))
            except ValidationError as exc:
                raise InvalidPositionData(f"Static position #{index} is invalid: {exc.error_count()} error(s).") from exc
        return cls(records)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "StaticPositionProvider":
        with open(path, encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, list):
            raise InvalidPositionData(f"Static positions file {path} must hold a JSON list.")
        provider = cls.from_payload(payload)
        logger.info("static_positions: loaded path=%s records=%s", path, len(provider._records))
        return provider

    def list_positions(self, *, wallet_address: str, network: str) -> list[Position]:
        wallet = wallet_address.strip().lower()
        chain = network.strip().lower()
        positions = [
            record.to_position()
            for record in self._records
            if record.wallet_address.strip().lower() == wallet and record.network.strip().lower() == chain
        ]
        logger.info(
            "static_positions: list wallet=%s network=%s positions=%s",
            wallet,
            chain,
            len(positions),
        )
        return positions


def build_static_position_provider(settings: Settings) -> StaticPositionProvider | None:
    if not settings.static_positions_path:
        return None
    return StaticPositionProvider.from_json_file(settings.static_positions_path)
