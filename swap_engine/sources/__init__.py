"""External pool-state and quoting capabilities.

- types.py: PoolStateSource protocol and validated result models
- memory.py: InMemoryPoolStateSource for tests and offline quoting
- web3_source.py: Web3PoolStateSource backed by RPC calls
"""

from swap_engine.sources.memory import InMemoryPoolStateSource, simulate_single_range
from swap_engine.sources.types import (
    ConcentratedState,
    ConstantProductState,
    PoolStateSource,
    SimulatedSwap,
    validate_boundary,
)
from swap_engine.sources.web3_source import Web3PoolStateSource

__all__ = [
    "ConcentratedState",
    "ConstantProductState",
    "InMemoryPoolStateSource",
    "PoolStateSource",
    "SimulatedSwap",
    "Web3PoolStateSource",
    "simulate_single_range",
    "validate_boundary",
]
