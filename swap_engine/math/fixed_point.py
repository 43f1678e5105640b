"""Fixed-point helpers for sqrt prices, percentages and token units.

Amounts stay integers everywhere; prices and percentages are Decimals
evaluated under a 78-digit context so that comparisons in the selector are
exact enough for any uint256-sized input. Floats never appear here.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from swap_engine.constants import Q96
from swap_engine.errors import InvalidInput

# 78 digits of precision, enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)

INFINITE_IMPACT = Decimal("Infinity")

_Q192 = Decimal(Q96 * Q96)
_HUNDRED = Decimal(100)


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimals_in: int,
    decimals_out: int,
    *,
    zero_for_one: bool,
) -> Decimal:
    """Convert a Q64.96 sqrt price into a direction-normalized price.

    The raw pool price is (sqrtPrice / 2^96)^2, expressed as token1 per
    token0 in raw units. The result is the output-token price of one whole
    input token, so for a token1 -> token0 trade the raw price is inverted.

    Args:
        sqrt_price_x96: Pool sqrt price in Q64.96
        decimals_in: Decimals of the token being sold
        decimals_out: Decimals of the token being bought
        zero_for_one: True when the token being sold is token0

    Returns:
        Price of one input token in output tokens. Zero sqrt price gives 0.
    """
    if sqrt_price_x96 <= 0:
        return Decimal(0)

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        raw = Decimal(sqrt_price_x96 * sqrt_price_x96) / _Q192
        out_per_in = raw if zero_for_one else 1 / raw
        return out_per_in.scaleb(decimals_in - decimals_out)


def price_to_sqrt_price_x96(price: Decimal | int) -> int:
    """Convert a raw token1/token0 price to a Q64.96 sqrt price (truncated)."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = Decimal(price)
        if value <= 0:
            raise InvalidInput(f"Price must be positive: {price}")
        return int(value.sqrt() * Q96)


def relative_change_percent(before: Decimal, after: Decimal) -> Decimal:
    """Absolute relative change from before to after, in percent.

    A zero reference price yields INFINITE_IMPACT rather than dividing by zero.
    """
    if before == 0:
        return INFINITE_IMPACT
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return abs((after - before) / before * _HUNDRED)


def format_percent(value: Decimal, places: int = 2) -> str:
    """Human-readable percentage, e.g. Decimal('1.304') -> '1.30'."""
    if value.is_infinite():
        return "Infinity"
    quantum = Decimal(1).scaleb(-places)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return str(value.quantize(quantum, rounding=ROUND_HALF_UP))


def parse_units(text: str, decimals: int) -> int:
    """Parse a human amount such as "1.5" into raw token units.

    Raises:
        InvalidInput: If the text is not a finite non-negative number or has
            more fractional digits than the token supports
    """
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, AttributeError) as err:
        raise InvalidInput(f"Invalid amount: {text!r}") from err

    if not value.is_finite() or value < 0:
        raise InvalidInput(f"Invalid amount: {text!r}")

    exponent = value.normalize().as_tuple().exponent
    if isinstance(exponent, int) and -exponent > decimals:
        raise InvalidInput(f"Amount {text!r} has more than {decimals} decimal places")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return int(value.scaleb(decimals))


def format_units(amount: int, decimals: int) -> str:
    """Format raw token units as a plain decimal string without trailing zeros."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = Decimal(amount).scaleb(-decimals).normalize()
    text = f"{value:f}"
    return text if text != "-0" else "0"


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "INFINITE_IMPACT",
    "sqrt_price_x96_to_price",
    "price_to_sqrt_price_x96",
    "relative_change_percent",
    "format_percent",
    "parse_units",
    "format_units",
]
