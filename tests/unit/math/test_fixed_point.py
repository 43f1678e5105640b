"""Tests for sqrt price conversion, percentages and token units."""

from decimal import Decimal

import pytest

from swap_engine.constants import Q96
from swap_engine.errors import InvalidInput
from swap_engine.math.fixed_point import (
    INFINITE_IMPACT,
    format_percent,
    format_units,
    parse_units,
    price_to_sqrt_price_x96,
    relative_change_percent,
    sqrt_price_x96_to_price,
)


class TestSqrtPriceConversion:
    """Tests for sqrt_price_x96_to_price."""

    def test_unit_price(self):
        """sqrtPrice = 2^96 is a price of exactly 1 in both directions."""
        assert sqrt_price_x96_to_price(Q96, 18, 18, zero_for_one=True) == 1
        assert sqrt_price_x96_to_price(Q96, 18, 18, zero_for_one=False) == 1

    def test_direction_inverts(self):
        """Selling token1 inverts the token1/token0 pool price."""
        sqrt = 2 * Q96  # raw price 4
        assert sqrt_price_x96_to_price(sqrt, 18, 18, zero_for_one=True) == 4
        assert sqrt_price_x96_to_price(sqrt, 18, 18, zero_for_one=False) == Decimal("0.25")

    def test_decimal_adjustment(self):
        """Raw price 1 between a 6- and an 18-decimal token is scaled by 10^12."""
        # One whole 18-decimal token buys 10^-12 whole 6-decimal tokens at raw price 1
        assert sqrt_price_x96_to_price(Q96, 18, 6, zero_for_one=True) == Decimal("1e12")
        assert sqrt_price_x96_to_price(Q96, 6, 18, zero_for_one=True) == Decimal("1e-12")

    def test_zero_sqrt_price(self):
        """Empty pool price is zero."""
        assert sqrt_price_x96_to_price(0, 18, 18, zero_for_one=True) == 0

    def test_price_to_sqrt_price(self):
        """price_to_sqrt_price_x96 inverts the conversion for perfect squares."""
        assert price_to_sqrt_price_x96(1) == Q96
        assert price_to_sqrt_price_x96(4) == 2 * Q96

    def test_price_to_sqrt_price_rejects_non_positive(self):
        """Zero price has no sqrt price."""
        with pytest.raises(InvalidInput):
            price_to_sqrt_price_x96(0)


class TestRelativeChange:
    """Tests for relative_change_percent."""

    def test_absolute_value(self):
        """Direction of the move does not matter."""
        assert relative_change_percent(Decimal(100), Decimal(99)) == 1
        assert relative_change_percent(Decimal(100), Decimal(101)) == 1

    def test_zero_reference_is_infinite(self):
        """Zero reference price yields infinite impact instead of dividing by zero."""
        assert relative_change_percent(Decimal(0), Decimal(1)) == INFINITE_IMPACT


class TestFormatPercent:
    """Tests for format_percent."""

    def test_rounds_half_up(self):
        """Two decimals, half up."""
        assert format_percent(Decimal("1.305")) == "1.31"
        assert format_percent(Decimal("1.3017")) == "1.30"
        assert format_percent(Decimal(0)) == "0.00"

    def test_infinity(self):
        """Infinite impact is rendered as text."""
        assert format_percent(INFINITE_IMPACT) == "Infinity"


class TestUnits:
    """Tests for parse_units / format_units."""

    def test_parse_units(self):
        """Human amounts scale by decimals exactly."""
        assert parse_units("1.5", 18) == 1_500_000_000_000_000_000
        assert parse_units("0.000001", 6) == 1
        assert parse_units("42", 0) == 42

    def test_parse_units_too_many_places(self):
        """More fractional digits than the token has are rejected."""
        with pytest.raises(InvalidInput, match="decimal places"):
            parse_units("0.0000001", 6)

    @pytest.mark.parametrize("text", ["abc", "-1", "NaN", "Infinity", ""])
    def test_parse_units_invalid(self, text):
        """Non-numeric, negative and non-finite amounts are rejected."""
        with pytest.raises(InvalidInput):
            parse_units(text, 18)

    def test_format_units(self):
        """Raw units render without trailing zeros."""
        assert format_units(1_500_000_000_000_000_000, 18) == "1.5"
        assert format_units(1, 6) == "0.000001"
        assert format_units(0, 18) == "0"
        assert format_units(2_000_000, 6) == "2"
