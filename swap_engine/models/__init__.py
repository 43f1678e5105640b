"""Value types shared across the engine."""

from swap_engine.models.quote import PoolVersion, Quote
from swap_engine.models.token import Token, sort_tokens
from swap_engine.models.types import (
    Address,
    Uint256,
    is_valid_address,
    normalize_address,
    sort_addresses,
)

__all__ = [
    "Address",
    "PoolVersion",
    "Quote",
    "Token",
    "Uint256",
    "is_valid_address",
    "normalize_address",
    "sort_addresses",
    "sort_tokens",
]
