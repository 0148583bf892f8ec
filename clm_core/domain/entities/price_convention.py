from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from clm_core.domain.exceptions import InvalidPriceConvention


@dataclass(frozen=True)
class ProtocolParameters:
    log_base: Decimal
    sqrt_price_fixed_point_bits: int
    max_tick: int


UNISWAP_V3 = "uniswap_v3"
AERODROME_SLIPSTREAM = "aerodrome_slipstream"
ORCA_WHIRLPOOL = "orca_whirlpool"
CETUS = "cetus"

PROTOCOL_PARAMETERS: dict[str, ProtocolParameters] = {
    UNISWAP_V3: ProtocolParameters(
        log_base=Decimal("1.0001"),
        sqrt_price_fixed_point_bits=96,
        max_tick=887272,
    ),
    AERODROME_SLIPSTREAM: ProtocolParameters(
        log_base=Decimal("1.0001"),
        sqrt_price_fixed_point_bits=96,
        max_tick=887272,
    ),
    ORCA_WHIRLPOOL: ProtocolParameters(
        log_base=Decimal("1.0001"),
        sqrt_price_fixed_point_bits=64,
        max_tick=443636,
    ),
    CETUS: ProtocolParameters(
        log_base=Decimal("1.0001"),
        sqrt_price_fixed_point_bits=64,
        max_tick=443636,
    ),
}


@dataclass(frozen=True)
class ProtocolPriceConvention:
    protocol: str
    log_base: Decimal | None
    sqrt_price_fixed_point_bits: int | None
    token0_decimals: int | None
    token1_decimals: int | None
    invert_pair: bool = False
    max_tick: int | None = None

    @classmethod
    def for_protocol(
        cls,
        protocol: str,
        *,
        token0_decimals: int | None,
        token1_decimals: int | None,
        invert_pair: bool = False,
    ) -> ProtocolPriceConvention:
        params = PROTOCOL_PARAMETERS.get(protocol.strip().lower())
        if params is None:
            raise InvalidPriceConvention(f"Unknown protocol: {protocol}")
        return cls(
            protocol=protocol.strip().lower(),
            log_base=params.log_base,
            sqrt_price_fixed_point_bits=params.sqrt_price_fixed_point_bits,
            token0_decimals=token0_decimals,
            token1_decimals=token1_decimals,
            invert_pair=invert_pair,
            max_tick=params.max_tick,
        )

    @property
    def decimals_delta(self) -> int:
        if self.token0_decimals is None or self.token1_decimals is None:
            raise InvalidPriceConvention(f"Token decimals unresolved for {self.protocol}.")
        return self.token0_decimals - self.token1_decimals
