"""Slippage tolerance and execution bounds."""

from swap_engine.fees.slippage import (
    is_high_slippage,
    minimum_received,
    parse_slippage,
    slippage_multiplier_bps,
    transaction_deadline,
)

__all__ = [
    "is_high_slippage",
    "minimum_received",
    "parse_slippage",
    "slippage_multiplier_bps",
    "transaction_deadline",
]
