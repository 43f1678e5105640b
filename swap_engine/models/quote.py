"""Quote result types."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from swap_engine.math.fixed_point import format_percent


class PoolVersion(str, Enum):
    """Which kind of venue a route goes through."""

    V2 = "v2"  # constant product
    V3 = "v3"  # concentrated liquidity
    WRAP = "wrap"  # native <-> wrapped native, 1:1 without a pool


@dataclass(frozen=True)
class Quote:
    """Final answer of one get_swap_quote call.

    Attributes:
        output_amount: Expected output in raw units of the output token
        minimum_received: Output after applying the slippage tolerance
        price_impact_percent: Absolute price impact as an exact Decimal percent
        fee_amount: LP fee charged, in raw units of the input token
        chosen_fee_tier: Fee tier of the winning pool (V3 units), None for wraps
        chosen_pool_version: Venue kind of the winning pool
        pool_address: Address of the winning pool, None for wraps
        high_slippage_warning: Advisory flag for slippage >= 5%
    """

    amount_in: int
    output_amount: int
    minimum_received: int
    price_impact_percent: Decimal
    fee_amount: int
    chosen_fee_tier: int | None
    chosen_pool_version: PoolVersion
    pool_address: str | None = None
    high_slippage_warning: bool = False

    @property
    def price_impact_display(self) -> str:
        """Price impact rounded to two decimals for display."""
        return format_percent(self.price_impact_percent)


__all__ = ["PoolVersion", "Quote"]
