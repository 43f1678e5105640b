"""Swap quote engine for constant-product and concentrated-liquidity pools."""

from swap_engine.routing.router import SwapRouter

__version__ = "0.1.0"
__all__ = ["SwapRouter", "__version__"]
