from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from clm_core.domain.entities.position import LIVE_SOURCE, TickRange
from clm_core.domain.entities.price_convention import PROTOCOL_PARAMETERS, ProtocolPriceConvention
from clm_core.domain.exceptions import DomainError, InvalidPriceConvention
from clm_core.domain.services.liquidity import validate_tick_range
from clm_core.domain.services.tick_math import normalize_tick, require_convention


PayloadT = TypeVar("PayloadT", bound=BaseModel)


class ProtocolAdapter:
    """Maps one data source's raw layout onto the shared position/pool entities."""

    protocols: tuple[str, ...] = ()

    def __init__(self, *, protocol: str, data_source: str = LIVE_SOURCE):
        key = protocol.strip().lower()
        if key not in self.protocols:
            raise InvalidPriceConvention(f"{type(self).__name__} does not handle protocol {protocol}.")
        self.protocol = key
        self.data_source = data_source
        self.max_tick = PROTOCOL_PARAMETERS[key].max_tick

    def convention(
        self,
        *,
        token0_decimals: int | None,
        token1_decimals: int | None,
        invert_pair: bool = False,
    ) -> ProtocolPriceConvention:
        return require_convention(
            ProtocolPriceConvention.for_protocol(
                self.protocol,
                token0_decimals=token0_decimals,
                token1_decimals=token1_decimals,
                invert_pair=invert_pair,
            )
        )

    def _parse(
        self,
        model: type[PayloadT],
        payload: Mapping[str, Any],
        *,
        error: type[DomainError],
    ) -> PayloadT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            fields = ", ".join(".".join(str(part) for part in item["loc"]) for item in exc.errors())
            raise error(f"Invalid {self.protocol} {model.__name__} ({fields}).") from exc

    def _tick_range(self, raw_lower: int, raw_upper: int) -> TickRange:
        tick_lower = normalize_tick(raw_lower, max_tick=self.max_tick)
        tick_upper = normalize_tick(raw_upper, max_tick=self.max_tick)
        validate_tick_range(tick_lower, tick_upper)
        return TickRange(tick_lower=tick_lower, tick_upper=tick_upper)
