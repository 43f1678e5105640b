"""Token value type."""

from pydantic import BaseModel, Field, field_validator

from swap_engine.models.types import normalize_address


class Token(BaseModel):
    """An ERC-20 token as seen by the quoting engine.

    Immutable once constructed. Addresses are stored lowercase so that
    equality, hashing and pool ordering are case-insensitive.
    """

    address: str = Field(description="Token address (0x + 40 hex chars)")
    symbol: str = ""
    # Some exotic tokens exceed 18 decimals; 77 is the most uint256 can hold
    decimals: int = Field(default=18, ge=0, le=77)

    model_config = {"frozen": True}

    @field_validator("address")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_address(value, validate=True)

    def sorts_before(self, other: "Token") -> bool:
        """True if this token is token0 of a pool with ``other``."""
        return self.address < other.address


def sort_tokens(token_a: Token, token_b: Token) -> tuple[Token, Token]:
    """Order two tokens as (token0, token1)."""
    return (token_a, token_b) if token_a.sorts_before(token_b) else (token_b, token_a)


__all__ = ["Token", "sort_tokens"]
