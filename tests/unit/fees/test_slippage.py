"""Tests for slippage tolerance and execution bounds."""

from decimal import Decimal

import pytest

from swap_engine.errors import InvalidInput
from swap_engine.fees.slippage import (
    is_high_slippage,
    minimum_received,
    parse_slippage,
    slippage_multiplier_bps,
    transaction_deadline,
)


class TestParseSlippage:
    """Tests for parse_slippage."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("0.5", Decimal("0.5")),
            (1, Decimal(1)),
            (0.1, Decimal("0.1")),
            (Decimal("99.99"), Decimal("99.99")),
        ],
    )
    def test_valid(self, value, expected):
        """Strings, ints, floats and Decimals are accepted."""
        assert parse_slippage(value) == expected

    @pytest.mark.parametrize("value", ["100", "150", "-1", "0.005", "NaN", "Infinity", "abc", True])
    def test_invalid(self, value):
        """Out-of-range, over-precise and non-numeric values are rejected."""
        with pytest.raises(InvalidInput):
            parse_slippage(value)

    def test_invalid_input_is_value_error(self):
        """InvalidInput can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_slippage("100")


class TestMinimumReceived:
    """Tests for minimum_received."""

    def test_reference_values(self):
        """floor((100 - s) * 100) basis points of the output, truncated."""
        assert slippage_multiplier_bps(Decimal("0.5")) == 9950
        assert minimum_received(19_743, "0.5") == 19_644
        assert minimum_received(1_000_000, "1") == 990_000

    def test_zero_slippage_identity(self):
        """0% slippage returns the output unchanged."""
        for amount in (1, 19_743, 10**30):
            assert minimum_received(amount, 0) == amount

    def test_monotonic_in_slippage(self):
        """Higher tolerance never raises the minimum."""
        output = 123_456_789
        tolerances = ["0", "0.01", "0.1", "0.5", "1", "5", "49.99", "99.99"]
        minimums = [minimum_received(output, t) for t in tolerances]
        assert minimums == sorted(minimums, reverse=True)

    def test_never_exceeds_output(self):
        """The minimum is at most the output."""
        assert minimum_received(7, "0.01") <= 7
        assert minimum_received(0, "0.5") == 0


class TestHighSlippage:
    """Tests for is_high_slippage."""

    def test_threshold_inclusive(self):
        """5% and above is flagged."""
        assert not is_high_slippage("4.99")
        assert is_high_slippage("5")
        assert is_high_slippage(20)

    def test_custom_threshold(self):
        """The threshold is configurable."""
        assert is_high_slippage("2", threshold=Decimal(2))


class TestTransactionDeadline:
    """Tests for transaction_deadline."""

    def test_adds_minutes(self):
        """Deadline is now + minutes * 60, floored to whole seconds."""
        assert transaction_deadline(1_700_000_000, 20) == 1_700_001_200
        assert transaction_deadline(1_700_000_000.9, 0.5) == 1_700_000_030

    @pytest.mark.parametrize("minutes", [0, -5, float("inf"), float("nan"), True])
    def test_invalid_minutes(self, minutes):
        """Deadlines must lie in the future."""
        with pytest.raises(InvalidInput):
            transaction_deadline(1_700_000_000, minutes)
