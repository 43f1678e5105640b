"""Concentrated-liquidity quote calculator.

Output amounts come from the external single-pool quoter rather than local
tick math. This module only builds the request, derives price impact from
the pre- and post-swap sqrt prices, and reports the LP fee.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from swap_engine.amm.base import QuoteCandidate
from swap_engine.constants import V3_FEE_DENOMINATOR, V3_FEE_TIERS
from swap_engine.errors import InvalidInput
from swap_engine.math.fixed_point import (
    INFINITE_IMPACT,
    relative_change_percent,
    sqrt_price_x96_to_price,
)
from swap_engine.models.quote import PoolVersion
from swap_engine.models.token import Token
from swap_engine.pools.types import ConcentratedPool
from swap_engine.safe_int import S
from swap_engine.sources.types import PoolStateSource

logger = structlog.get_logger()


def price_impact(pool: ConcentratedPool, token_in: Token, sqrt_price_x96_after: int) -> Decimal:
    """Absolute relative change of the direction-normalized pool price.

    Args:
        pool: Pool snapshot taken before the swap
        token_in: Token being sold
        sqrt_price_x96_after: Sqrt price reported by the quoter after the swap

    Returns:
        Price impact in percent, Infinity for a pool without liquidity
    """
    if not pool.has_liquidity():
        return INFINITE_IMPACT

    zero_for_one = pool.zero_for_one(token_in)
    token_out = pool.get_token_out(token_in)

    before = sqrt_price_x96_to_price(
        pool.sqrt_price_x96, token_in.decimals, token_out.decimals, zero_for_one=zero_for_one
    )
    if sqrt_price_x96_after <= 0:
        return INFINITE_IMPACT
    after = sqrt_price_x96_to_price(
        sqrt_price_x96_after, token_in.decimals, token_out.decimals, zero_for_one=zero_for_one
    )
    return relative_change_percent(before, after)


def fee_amount(amount_in: int, fee: int) -> int:
    """LP fee of a fee tier applied to the input, truncated."""
    return S(amount_in).mul_div(fee, V3_FEE_DENOMINATOR).to_uint256()


class ConcentratedQuoteCalculator:
    """Quotes exact-input swaps through one concentrated-liquidity pool."""

    def __init__(self, source: PoolStateSource) -> None:
        """Initialize the calculator.

        Args:
            source: Capability that simulates single-pool swaps
        """
        self.source = source

    async def quote(self, pool: ConcentratedPool, token_in: Token, amount_in: int) -> QuoteCandidate:
        """Simulate the swap and derive impact and fee.

        Raises:
            InvalidInput: If the request cannot be well-formed
            ExternalQueryError: If the simulation fails or returns malformed data
        """
        if amount_in <= 0:
            raise InvalidInput(f"Amount must be positive: {amount_in}")
        if pool.fee not in V3_FEE_TIERS:
            raise InvalidInput(f"Unsupported fee tier: {pool.fee}")

        token_out = pool.get_token_out(token_in)
        swap = await self.source.simulate_exact_input_single(
            token_in.address, token_out.address, amount_in, pool.fee
        )
        impact = price_impact(pool, token_in, swap.sqrt_price_x96_after)

        logger.debug(
            "concentrated_quote",
            pool=pool.address,
            fee=pool.fee,
            amount_in=amount_in,
            amount_out=swap.amount_out,
            liquidity=pool.liquidity,
        )

        return QuoteCandidate(
            version=PoolVersion.V3,
            fee_tier=pool.fee,
            amount_in=amount_in,
            amount_out=swap.amount_out,
            price_impact=impact,
            fee_amount=fee_amount(amount_in, pool.fee),
            liquidity=pool.liquidity,
            pool=pool,
        )


__all__ = ["ConcentratedQuoteCalculator", "price_impact", "fee_amount"]
