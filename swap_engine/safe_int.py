"""Checked integer arithmetic for token amounts.

Outputs, fees and minimum-received values are computed through SafeInt so
that on-chain integer semantics hold:
- Division truncates toward zero, never rounds
- A zero divisor raises DivisionByZero
- A subtraction that would go negative raises Underflow
- Results leave the wrapper through width-checked conversions

Usage pattern:
    from swap_engine.safe_int import S

    def amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
        with_fee = S(amount_in) * 997
        return (with_fee * reserve_out // (S(reserve_in) * 1000 + with_fee)).to_uint256()
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1
UINT160_MAX = 2**160 - 1


class SafeIntError(ArithmeticError):
    """Root of the checked-arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Divisor was zero."""

    pass


class Underflow(SafeIntError):
    """Difference would be negative."""

    pass


class Uint256Overflow(SafeIntError):
    """Value does not fit the requested unsigned width."""

    pass


def _tdiv(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _raw(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


class SafeInt:
    """Immutable int wrapper whose operators refuse invalid results."""

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt wraps int only, got {type(value).__name__}")

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"S({self._value})"

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _raw(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _raw(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return _checked_sub(self._value, _raw(other))

    def __rsub__(self, other: int) -> SafeInt:
        return _checked_sub(other, self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Quotient truncated toward zero.

        Raises:
            DivisionByZero: If other is zero
        """
        return _checked_div(self._value, _raw(other))

    def __rfloordiv__(self, other: int) -> SafeInt:
        return _checked_div(other, self._value)

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """self * numerator / denominator, truncated once at the end."""
        return (self * numerator) // denominator

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt | int):
            return self._value == _raw(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _raw(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _raw(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _raw(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _raw(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._value != 0

    def to_uint256(self) -> int:
        """Unwrap as an amount.

        Raises:
            Uint256Overflow: If the value is negative or above 2^256-1
        """
        return self._unsigned(UINT256_MAX, "uint256")

    def to_uint160(self) -> int:
        """Unwrap as a Q64.96 sqrt price."""
        return self._unsigned(UINT160_MAX, "uint160")

    def _unsigned(self, limit: int, name: str) -> int:
        if not 0 <= self._value <= limit:
            raise Uint256Overflow(f"{self._value} does not fit {name}")
        return self._value

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)


def _checked_sub(a: int, b: int) -> SafeInt:
    if a < b:
        raise Underflow(f"{a} - {b} is negative")
    return SafeInt(a - b)


def _checked_div(a: int, b: int) -> SafeInt:
    if b == 0:
        raise DivisionByZero(f"{a} // 0")
    return SafeInt(_tdiv(a, b))


S = SafeInt

__all__ = [
    "UINT256_MAX",
    "UINT160_MAX",
    "SafeInt",
    "S",
    "SafeIntError",
    "DivisionByZero",
    "Underflow",
    "Uint256Overflow",
]
