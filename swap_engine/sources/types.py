"""Typed results of the external pool-state capabilities.

Raw contract call results are untyped tuples. They are validated here, at
the boundary, so that a missing or malformed field surfaces as an
ExternalQueryError for that one probe instead of leaking into the math.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from swap_engine.errors import ExternalQueryError
from swap_engine.models.types import Address, normalize_address

UINT112_MAX = 2**112 - 1
UINT128_MAX = 2**128 - 1
UINT160_MAX = 2**160 - 1
UINT256_MAX = 2**256 - 1
# Valid tick range of concentrated-liquidity pools
MIN_TICK = -887272
MAX_TICK = 887272


class ConstantProductState(BaseModel):
    """Reserve snapshot of a constant-product pair."""

    reserve0: int = Field(ge=0, le=UINT112_MAX)
    reserve1: int = Field(ge=0, le=UINT112_MAX)
    token0: Address

    model_config = {"frozen": True, "strict": True}

    @field_validator("token0")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return normalize_address(value)


class ConcentratedState(BaseModel):
    """Slot snapshot of a concentrated-liquidity pool."""

    sqrt_price_x96: int = Field(ge=0, le=UINT160_MAX)
    tick: int = Field(ge=MIN_TICK, le=MAX_TICK)
    liquidity: int = Field(ge=0, le=UINT128_MAX)

    model_config = {"frozen": True, "strict": True}


class SimulatedSwap(BaseModel):
    """Outcome of an exact-input single-pool swap simulation."""

    amount_out: int = Field(ge=0, le=UINT256_MAX)
    sqrt_price_x96_after: int = Field(ge=0, le=UINT160_MAX)

    model_config = {"frozen": True, "strict": True}


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_boundary(model: type[ModelT], data: Any, operation: str) -> ModelT:
    """Validate a raw capability result.

    Raises:
        ExternalQueryError: If any field is missing or out of range
    """
    try:
        return model.model_validate(data)
    except ValidationError as err:
        raise ExternalQueryError(operation, f"malformed result: {err.error_count()} error(s)") from err


class PoolStateSource(Protocol):
    """Protocol for the external pool-state and quoting capabilities.

    This allows swapping between the RPC-backed source and the in-memory
    source used for testing. All methods are coroutines; they are the only
    points where a quote computation suspends.
    """

    async def resolve_pool_address(
        self,
        token_a: str,
        token_b: str,
        fee: int | None = None,
    ) -> str | None:
        """Resolve the pool for a pair.

        Args:
            token_a: One token of the pair (any order)
            token_b: The other token of the pair
            fee: Concentrated-liquidity fee tier, or None for the constant-product pair

        Returns:
            Pool address, or None (or the zero address) if no pool exists
        """
        ...

    async def read_constant_product_state(self, pool_address: str) -> ConstantProductState:
        """Read live reserves of a constant-product pair."""
        ...

    async def read_concentrated_state(self, pool_address: str) -> ConcentratedState:
        """Read live sqrt price, tick and liquidity of a concentrated pool."""
        ...

    async def simulate_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
    ) -> SimulatedSwap:
        """Simulate an exact-input swap through one concentrated pool."""
        ...


__all__ = [
    "ConstantProductState",
    "ConcentratedState",
    "SimulatedSwap",
    "PoolStateSource",
    "validate_boundary",
]
