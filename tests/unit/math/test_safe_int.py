"""Tests for SafeInt safe arithmetic wrapper."""

import pytest

from swap_engine.safe_int import (
    UINT160_MAX,
    UINT256_MAX,
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint256Overflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_rejects_bool_and_float(self):
        """Booleans and floats are not amounts."""
        with pytest.raises(TypeError):
            SafeInt(True)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt

    def test_zero_constructor(self):
        """SafeInt.zero() creates zero value."""
        assert SafeInt.zero().value == 0


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add_and_mul(self):
        """Addition and multiplication accept ints on either side."""
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15
        assert (S(10) * 3).value == 30
        assert (3 * S(10)).value == 30

    def test_sub_underflow_raises(self):
        """Subtraction below zero raises Underflow."""
        with pytest.raises(Underflow):
            S(5) - 10
        with pytest.raises(Underflow):
            5 - S(10)

    def test_floordiv_truncates(self):
        """Division truncates instead of rounding."""
        assert (S(19_940_000_000_000) // 1_009_970_000).value == 19_743
        assert (S(7) // 2).value == 3

    def test_floordiv_truncates_toward_zero(self):
        """Negative quotients truncate toward zero like the EVM."""
        assert (S(-7) // 2).value == -3

    def test_division_by_zero_raises(self):
        """Division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            S(1) // 0
        with pytest.raises(DivisionByZero):
            1 // S(0)

    def test_errors_are_arithmetic_errors(self):
        """All SafeInt errors derive from ArithmeticError."""
        assert issubclass(SafeIntError, ArithmeticError)
        assert issubclass(DivisionByZero, SafeIntError)


class TestSafeIntNamedOperations:
    """Tests for mul_div and width checks."""

    def test_mul_div_single_truncation(self):
        """mul_div multiplies before dividing."""
        assert S(19_743).mul_div(9_950, 10_000).value == 19_644

    def test_mul_div_zero_denominator(self):
        """mul_div with zero denominator raises."""
        with pytest.raises(DivisionByZero):
            S(10).mul_div(3, 0)

    def test_to_uint256_bounds(self):
        """to_uint256 accepts [0, 2^256-1]."""
        assert S(UINT256_MAX).to_uint256() == UINT256_MAX
        with pytest.raises(Uint256Overflow):
            S(UINT256_MAX + 1).to_uint256()
        with pytest.raises(Uint256Overflow):
            S(-1).to_uint256()

    def test_to_uint160_bounds(self):
        """to_uint160 enforces sqrt price width."""
        assert S(UINT160_MAX).to_uint160() == UINT160_MAX
        with pytest.raises(Uint256Overflow):
            S(UINT160_MAX + 1).to_uint160()


class TestSafeIntComparison:
    """Tests for comparisons and conversions."""

    def test_compare_with_int(self):
        """SafeInt compares with ints and SafeInts."""
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(4) < 5
        assert S(6) >= S(6)

    def test_int_and_bool(self):
        """int() unwraps and zero is falsy."""
        assert int(S(7)) == 7
        assert not S(0)
