"""Quote calculators for constant-product and concentrated-liquidity pools."""

from swap_engine.amm.base import QuoteCandidate
from swap_engine.amm.concentrated import ConcentratedQuoteCalculator
from swap_engine.amm.constant_product import ConstantProductCalculator, constant_product

__all__ = [
    "QuoteCandidate",
    "ConcentratedQuoteCalculator",
    "ConstantProductCalculator",
    "constant_product",
]
