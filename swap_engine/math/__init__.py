"""Fixed-point math for prices, percentages and token units."""

from swap_engine.math.fixed_point import (
    DECIMAL_HIGH_PREC_CONTEXT,
    INFINITE_IMPACT,
    format_percent,
    format_units,
    parse_units,
    price_to_sqrt_price_x96,
    relative_change_percent,
    sqrt_price_x96_to_price,
)

__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "INFINITE_IMPACT",
    "format_percent",
    "format_units",
    "parse_units",
    "price_to_sqrt_price_x96",
    "relative_change_percent",
    "sqrt_price_x96_to_price",
]
