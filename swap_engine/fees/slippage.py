"""Slippage tolerance and execution bounds.

minimum_received = output * floor((100 - slippage) * 100) / 10000

Slippage is scaled by 100 before it touches the amount so that two decimal
places survive without any floating point in the amount math.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from swap_engine.constants import BPS_DENOMINATOR, HIGH_SLIPPAGE_PERCENT, SLIPPAGE_SCALE
from swap_engine.errors import InvalidInput
from swap_engine.safe_int import S

_MAX_SLIPPAGE = Decimal(100)
_MAX_PLACES = 2


def parse_slippage(value: Decimal | str | int | float) -> Decimal:
    """Validate a slippage tolerance given in percent (0.5 means 0.5%).

    Floats are converted through their shortest repr, so 0.1 stays 0.1.

    Raises:
        InvalidInput: If the value is not finite, outside [0, 100), or has
            more than two decimal places
    """
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid slippage: {value!r}")
    try:
        slippage = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as err:
        raise InvalidInput(f"Invalid slippage: {value!r}") from err

    if not slippage.is_finite():
        raise InvalidInput(f"Slippage must be finite: {value!r}")
    if slippage < 0 or slippage >= _MAX_SLIPPAGE:
        raise InvalidInput(f"Slippage must be in [0, 100): {value!r}")

    exponent = slippage.normalize().as_tuple().exponent
    if isinstance(exponent, int) and -exponent > _MAX_PLACES:
        raise InvalidInput(f"Slippage supports at most {_MAX_PLACES} decimal places: {value!r}")
    return slippage


def slippage_multiplier_bps(slippage: Decimal) -> int:
    """floor((100 - slippage) * 100), i.e. the kept share in basis points."""
    kept = (_MAX_SLIPPAGE - slippage) * SLIPPAGE_SCALE
    return int(kept.to_integral_value(rounding=ROUND_FLOOR))


def minimum_received(output_amount: int, slippage: Decimal | str | int | float) -> int:
    """Lowest acceptable output after applying the slippage tolerance.

    Args:
        output_amount: Quoted output in raw token units
        slippage: Tolerance in percent

    Returns:
        Minimum received in raw token units, truncated
    """
    tolerance = parse_slippage(slippage)
    return S(output_amount).mul_div(slippage_multiplier_bps(tolerance), BPS_DENOMINATOR).to_uint256()


def is_high_slippage(
    slippage: Decimal | str | int | float,
    threshold: Decimal = HIGH_SLIPPAGE_PERCENT,
) -> bool:
    """Advisory flag: tolerances at or above the threshold are risky."""
    return parse_slippage(slippage) >= threshold


def transaction_deadline(now: float, minutes: int | float) -> int:
    """Unix timestamp after which a swap built from the quote should revert.

    Raises:
        InvalidInput: If minutes is not a positive finite number
    """
    if isinstance(minutes, bool) or not math.isfinite(minutes) or minutes <= 0:
        raise InvalidInput(f"Deadline must be a positive number of minutes: {minutes!r}")
    return math.floor(now + minutes * 60)


__all__ = [
    "parse_slippage",
    "slippage_multiplier_bps",
    "minimum_received",
    "is_high_slippage",
    "transaction_deadline",
]
