"""Constant-product (x * y = k) quote calculator.

With a fee taken on the input side:
    amount_out = (amount_in * (1000 - fee) * reserve_out)
                 / (reserve_in * 1000 + amount_in * (1000 - fee))
"""

from __future__ import annotations

import decimal
from decimal import Decimal

import structlog

from swap_engine.amm.base import QuoteCandidate
from swap_engine.constants import V2_FEE_DENOMINATOR, V2_FEE_PER_MILLE, V2_FEE_TIER
from swap_engine.math.fixed_point import DECIMAL_HIGH_PREC_CONTEXT, INFINITE_IMPACT
from swap_engine.models.quote import PoolVersion
from swap_engine.models.token import Token
from swap_engine.pools.types import ConstantProductPool
from swap_engine.safe_int import S

logger = structlog.get_logger()


class ConstantProductCalculator:
    """Local math for constant-product pools.

    Unlike concentrated-liquidity pools, everything here is computed from a
    reserve snapshot without any external call.
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_per_mille: int = V2_FEE_PER_MILLE,
    ) -> int:
        """Calculate output amount using the constant product formula.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_per_mille: Fee numerator in parts per thousand (3 for 0.3%)

        Returns:
            Output token amount, 0 when either reserve is empty
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0

        amount_in_with_fee = S(amount_in) * (V2_FEE_DENOMINATOR - fee_per_mille)
        numerator = amount_in_with_fee * reserve_out
        denominator = S(reserve_in) * V2_FEE_DENOMINATOR + amount_in_with_fee

        return (numerator // denominator).to_uint256()

    def fee_amount(self, amount_in: int, fee_per_mille: int = V2_FEE_PER_MILLE) -> int:
        """LP fee charged on the input side, truncated."""
        return S(amount_in).mul_div(fee_per_mille, V2_FEE_DENOMINATOR).to_uint256()

    def price_impact(
        self,
        amount_in: int,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        decimals_in: int,
        decimals_out: int,
    ) -> Decimal:
        """Deviation of the execution price from the pre-trade spot price.

        Both prices are input-per-output in whole-token units:
        execution = amount_in / amount_out, spot = reserve_in / reserve_out.

        Returns:
            Absolute deviation in percent, or Infinity without liquidity
        """
        if reserve_in <= 0 or reserve_out <= 0 or amount_out <= 0:
            return INFINITE_IMPACT

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            scale = decimals_out - decimals_in
            spot = (Decimal(reserve_in) / Decimal(reserve_out)).scaleb(scale)
            execution = (Decimal(amount_in) / Decimal(amount_out)).scaleb(scale)
            return abs((execution - spot) / spot * 100)

    def quote(self, pool: ConstantProductPool, token_in: Token, amount_in: int) -> QuoteCandidate:
        """Quote an exact-input swap through one pair."""
        token_out = pool.get_token_out(token_in)
        reserve_in, reserve_out = pool.get_reserves(token_in)

        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out, pool.fee_per_mille)
        impact = self.price_impact(
            amount_in,
            amount_out,
            reserve_in,
            reserve_out,
            token_in.decimals,
            token_out.decimals,
        )

        logger.debug(
            "constant_product_quote",
            pool=pool.address,
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )

        return QuoteCandidate(
            version=PoolVersion.V2,
            fee_tier=pool.fee_per_mille * V2_FEE_TIER // V2_FEE_PER_MILLE,
            amount_in=amount_in,
            amount_out=amount_out,
            price_impact=impact,
            fee_amount=self.fee_amount(amount_in, pool.fee_per_mille),
            liquidity=reserve_out,
            pool=pool,
        )


# Singleton instance
constant_product = ConstantProductCalculator()

__all__ = ["ConstantProductCalculator", "constant_product"]
