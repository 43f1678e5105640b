"""Pool selection policy.

Safety first, efficiency second, then best price:
1. Keep candidates whose price impact is strictly below 1%.
2. Among those, prefer fee tiers <= 0.30% when any exist.
3. Pick the strictly greatest output; ties keep the earliest fee tier.
4. If nothing is below 1%, take the minimum price impact; among candidates
   tied at that minimum prefer fee tiers <= 0.30%.

The result depends only on the set of candidates: they are ordered by fee
tier enumeration before any rule is applied.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from swap_engine.amm.base import QuoteCandidate
from swap_engine.constants import LOW_FEE_TIER_CEILING, MAX_PREFERRED_PRICE_IMPACT, V3_FEE_TIERS


def enumeration_order(
    candidates: Iterable[QuoteCandidate],
    fee_tiers: Sequence[int] = V3_FEE_TIERS,
) -> list[QuoteCandidate]:
    """Sort candidates into fee-tier enumeration order.

    Tiers missing from the enumeration sort after it by fee; the pool
    address breaks any remaining tie so the order is total.
    """
    rank = {fee: i for i, fee in enumerate(fee_tiers)}

    def key(candidate: QuoteCandidate) -> tuple[int, int, str]:
        return (
            rank.get(candidate.fee_tier, len(rank)),
            candidate.fee_tier,
            candidate.pool.address,
        )

    return sorted(candidates, key=key)


def _first_greatest_output(candidates: list[QuoteCandidate]) -> QuoteCandidate:
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.amount_out > best.amount_out:
            best = candidate
    return best


def select_best_candidate(
    candidates: Iterable[QuoteCandidate],
    *,
    fee_tiers: Sequence[int] = V3_FEE_TIERS,
    max_price_impact: Decimal = MAX_PREFERRED_PRICE_IMPACT,
    low_fee_ceiling: int = LOW_FEE_TIER_CEILING,
) -> QuoteCandidate | None:
    """Apply the selection policy.

    Args:
        candidates: Quotes from the probed pools, in any order
        fee_tiers: Enumeration order used for tie-breaks
        max_price_impact: Impacts strictly below this (percent) are preferred
        low_fee_ceiling: Fee tiers at or below this are preferred

    Returns:
        The winning candidate, or None if no candidate is viable
    """
    ordered = enumeration_order((c for c in candidates if c.is_viable), fee_tiers)
    if not ordered:
        return None

    working = [c for c in ordered if c.price_impact < max_price_impact]
    if working:
        low_fee = [c for c in working if c.fee_tier <= low_fee_ceiling]
        if low_fee:
            working = low_fee
        return _first_greatest_output(working)

    min_impact = min(c.price_impact for c in ordered)
    tied = [c for c in ordered if c.price_impact == min_impact]
    low_fee_tied = [c for c in tied if c.fee_tier <= low_fee_ceiling]
    return (low_fee_tied or tied)[0]


__all__ = ["enumeration_order", "select_best_candidate"]
