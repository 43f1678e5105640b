"""Shared result type for the quote calculators."""

from dataclasses import dataclass
from decimal import Decimal

from swap_engine.models.quote import PoolVersion
from swap_engine.pools.types import AnyPool


@dataclass(frozen=True)
class QuoteCandidate:
    """Result of probing one pool for one input amount.

    Created per request and discarded after selection.

    Attributes:
        version: Venue kind of the probed pool
        fee_tier: Fee tier in hundredths of a bip (3000 for a 0.3% V2 pair)
        amount_in: Input amount that was quoted
        amount_out: Simulated output amount
        price_impact: Absolute price impact in percent, Infinity without liquidity
        fee_amount: LP fee charged on the input, in input token units
        liquidity: Liquidity snapshot used (active liquidity, or reserve_out for V2)
        pool: The pool snapshot used for the quote
    """

    version: PoolVersion
    fee_tier: int
    amount_in: int
    amount_out: int
    price_impact: Decimal
    fee_amount: int
    liquidity: int
    pool: AnyPool

    @property
    def is_viable(self) -> bool:
        """A candidate with no liquidity or no output can never be selected."""
        return self.liquidity > 0 and self.amount_out > 0 and self.price_impact.is_finite()


__all__ = ["QuoteCandidate"]
