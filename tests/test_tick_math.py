from __future__ import annotations

from decimal import Decimal

import pytest

from clm_core.domain.entities.price_convention import (
    CETUS,
    ORCA_WHIRLPOOL,
    UNISWAP_V3,
    ProtocolPriceConvention,
)
from clm_core.domain.exceptions import InvalidPoolState, InvalidPriceConvention, InvalidTickRange
from clm_core.domain.services.tick_math import (
    check_tick_bounds,
    normalize_tick,
    price_to_tick,
    require_convention,
    sqrt_price_fixed_to_sqrt_price,
    sqrt_price_to_price,
    sqrt_price_to_tick,
    tick_to_price,
    tick_to_sqrt_price_fixed,
)


def _convention(protocol: str = UNISWAP_V3, *, token0_decimals=6, token1_decimals=6, invert_pair=False):
    return ProtocolPriceConvention.for_protocol(
        protocol,
        token0_decimals=token0_decimals,
        token1_decimals=token1_decimals,
        invert_pair=invert_pair,
    )


class TestTickPriceConversion:
    def test_tick_zero_with_equal_decimals_is_parity(self):
        assert tick_to_price(0, _convention()) == Decimal("1")

    @pytest.mark.parametrize("tick", [-443636, -200000, -69082, -1, 0, 1, 12345, 200000, 443636])
    def test_price_to_tick_recovers_tick(self, tick):
        convention = _convention(token0_decimals=6, token1_decimals=18)
        assert price_to_tick(tick_to_price(tick, convention), convention) == tick

    @pytest.mark.parametrize("tick", [-50000, 0, 47220])
    def test_inverted_pair_round_trip(self, tick):
        convention = _convention(token0_decimals=9, token1_decimals=6, invert_pair=True)
        assert price_to_tick(tick_to_price(tick, convention), convention) == tick

    def test_inverted_pair_is_reciprocal(self):
        straight = tick_to_price(1000, _convention(token0_decimals=9, token1_decimals=6))
        inverted = tick_to_price(1000, _convention(token0_decimals=9, token1_decimals=6, invert_pair=True))
        assert abs(straight * inverted - 1) < Decimal("1e-40")

    def test_decimals_off_by_one_changes_price_by_exactly_ten(self):
        price_6_9 = tick_to_price(47220, _convention(token0_decimals=6, token1_decimals=9))
        price_6_8 = tick_to_price(47220, _convention(token0_decimals=6, token1_decimals=8))
        assert abs(price_6_8 / price_6_9 - 10) < Decimal("1e-40")

    def test_price_to_tick_floors_between_ticks(self):
        convention = _convention()
        between = (tick_to_price(100, convention) + tick_to_price(101, convention)) / 2
        assert price_to_tick(between, convention) == 100

    def test_price_to_tick_rejects_non_positive_price(self):
        with pytest.raises(ValueError):
            price_to_tick(Decimal("0"), _convention())


class TestSqrtPriceConversion:
    def test_tick_zero_is_exactly_one_in_fixed_point(self):
        assert tick_to_sqrt_price_fixed(0, _convention(UNISWAP_V3)) == 2**96
        assert tick_to_sqrt_price_fixed(0, _convention(ORCA_WHIRLPOOL)) == 2**64

    @pytest.mark.parametrize("protocol", [UNISWAP_V3, ORCA_WHIRLPOOL, CETUS])
    @pytest.mark.parametrize("tick", [-50000, -1, 0, 12345])
    def test_sqrt_price_to_tick_recovers_tick(self, protocol, tick):
        convention = _convention(protocol)
        assert sqrt_price_to_tick(tick_to_sqrt_price_fixed(tick, convention), convention) == tick

    def test_sqrt_price_to_price_matches_tick_price(self):
        convention = _convention(token0_decimals=6, token1_decimals=8)
        from_sqrt = sqrt_price_to_price(tick_to_sqrt_price_fixed(55000, convention), convention)
        from_tick = tick_to_price(55000, convention)
        assert abs(from_sqrt / from_tick - 1) < Decimal("1e-20")

    def test_non_positive_sqrt_price_is_invalid_pool_state(self):
        with pytest.raises(InvalidPoolState):
            sqrt_price_fixed_to_sqrt_price(0, _convention())


class TestTickBounds:
    def test_two_complement_bits_recover_negative_tick(self):
        assert normalize_tick(2**32 - 100, max_tick=443636) == -100
        assert normalize_tick(4294967295, max_tick=443636) == -1

    def test_signed_and_string_ticks_pass_through(self):
        assert normalize_tick(-887272, max_tick=887272) == -887272
        assert normalize_tick("61560", max_tick=887272) == 61560

    def test_out_of_bounds_tick_is_rejected(self):
        with pytest.raises(InvalidTickRange):
            normalize_tick(500000, max_tick=443636)
        with pytest.raises(InvalidTickRange):
            normalize_tick("abc", max_tick=443636)

    def test_check_tick_bounds_uses_protocol_limit(self):
        assert check_tick_bounds(443636, _convention(ORCA_WHIRLPOOL)) == 443636
        with pytest.raises(InvalidTickRange):
            check_tick_bounds(443637, _convention(ORCA_WHIRLPOOL))
        with pytest.raises(InvalidTickRange):
            tick_to_price(887273, _convention(UNISWAP_V3))


class TestPriceConvention:
    def test_unknown_protocol_is_rejected(self):
        with pytest.raises(InvalidPriceConvention):
            ProtocolPriceConvention.for_protocol("sushiswap", token0_decimals=6, token1_decimals=6)

    def test_protocol_lookup_is_case_insensitive(self):
        convention = ProtocolPriceConvention.for_protocol(" Cetus ", token0_decimals=9, token1_decimals=6)
        assert convention.protocol == CETUS
        assert convention.sqrt_price_fixed_point_bits == 64

    def test_missing_decimals_fail_instead_of_defaulting(self):
        convention = _convention(token0_decimals=None)
        with pytest.raises(InvalidPriceConvention):
            require_convention(convention)
        with pytest.raises(InvalidPriceConvention):
            tick_to_price(0, convention)

    def test_missing_convention_is_rejected(self):
        with pytest.raises(InvalidPriceConvention):
            require_convention(None)

    def test_unresolved_log_base_is_rejected(self):
        convention = ProtocolPriceConvention(
            protocol="custom",
            log_base=None,
            sqrt_price_fixed_point_bits=96,
            token0_decimals=6,
            token1_decimals=6,
            max_tick=887272,
        )
        with pytest.raises(InvalidPriceConvention):
            require_convention(convention)

    def test_bool_decimals_are_rejected(self):
        with pytest.raises(InvalidPriceConvention):
            require_convention(_convention(token0_decimals=True))
