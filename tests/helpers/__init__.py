"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token and pool addresses
- factories: Candidate, clock and in-memory source factories
"""

from tests.helpers.constants import (
    DAI,
    DAI_TOKEN,
    NATIVE,
    NATIVE_TOKEN,
    ONE_TOKEN,
    USDC,
    USDC_TOKEN,
    V2_DAI_WETH,
    V3_DAI_WETH_POOLS,
    WETH,
    WETH_TOKEN,
)
from tests.helpers.factories import (
    FakeClock,
    make_candidate,
    make_dai_weth_source,
    sqrt_price_after,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "NATIVE",
    "WETH_TOKEN",
    "USDC_TOKEN",
    "DAI_TOKEN",
    "NATIVE_TOKEN",
    "V2_DAI_WETH",
    "V3_DAI_WETH_POOLS",
    "ONE_TOKEN",
    # Factories
    "FakeClock",
    "make_candidate",
    "make_dai_weth_source",
    "sqrt_price_after",
]
