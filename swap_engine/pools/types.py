"""Pool snapshot dataclasses.

A snapshot is read once per quote and treated as immutable for the rest of
that computation; the live pool state is owned by the chain.
"""

from __future__ import annotations

from dataclasses import dataclass

from swap_engine.constants import (
    V2_FEE_DENOMINATOR,
    V2_FEE_PER_MILLE,
    V3_FEE_DENOMINATOR,
)
from swap_engine.models.token import Token


@dataclass(frozen=True)
class ConstantProductPool:
    """Represents a constant-product (x * y = k) pool."""

    address: str
    token0: Token
    token1: Token
    reserve0: int
    reserve1: int
    # Fee in parts per thousand (3 = 0.3%)
    fee_per_mille: int = V2_FEE_PER_MILLE

    @property
    def fee_multiplier(self) -> int:
        """Share of the input that reaches the curve (997 for 0.3%)."""
        return V2_FEE_DENOMINATOR - self.fee_per_mille

    def has_liquidity(self) -> bool:
        return self.reserve0 > 0 and self.reserve1 > 0

    def get_reserves(self, token_in: Token) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if token_in.address == self.token0.address:
            return self.reserve0, self.reserve1
        elif token_in.address == self.token1.address:
            return self.reserve1, self.reserve0
        else:
            raise ValueError(f"Token {token_in.address} not in pool {self.address}")

    def get_token_out(self, token_in: Token) -> Token:
        if token_in.address == self.token0.address:
            return self.token1
        elif token_in.address == self.token1.address:
            return self.token0
        else:
            raise ValueError(f"Token {token_in.address} not in pool {self.address}")


@dataclass(frozen=True)
class ConcentratedPool:
    """Represents a concentrated-liquidity pool at one fee tier.

    Only the slot state needed for price impact is kept; swap simulation is
    delegated to the quoter rather than done locally.
    """

    address: str
    token0: Token
    token1: Token
    fee: int  # Fee in hundredths of a bip (3000 = 0.3%)
    sqrt_price_x96: int  # Current sqrt(price) * 2^96
    liquidity: int  # Active liquidity at the current tick
    tick: int

    @property
    def fee_percent(self) -> float:
        """Fee as percentage (e.g., 0.3 for 0.3%), display only."""
        return self.fee / (V3_FEE_DENOMINATOR // 100)

    def has_liquidity(self) -> bool:
        return self.liquidity > 0

    def is_token0(self, token: Token) -> bool:
        """Check if token is token0 (determines swap direction)."""
        return token.address == self.token0.address

    def zero_for_one(self, token_in: Token) -> bool:
        """Swap direction: True when selling token0 for token1."""
        return self.is_token0(token_in)

    def get_token_out(self, token_in: Token) -> Token:
        if token_in.address == self.token0.address:
            return self.token1
        elif token_in.address == self.token1.address:
            return self.token0
        else:
            raise ValueError(f"Token {token_in.address} not in pool {self.address}")


AnyPool = ConstantProductPool | ConcentratedPool

__all__ = ["ConstantProductPool", "ConcentratedPool", "AnyPool"]
