"""Address and amount types shared by request and boundary models."""

import re
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

UINT256_MAX = 2**256 - 1

_ADDRESS_RE = re.compile(r"0x[0-9a-f]{40}")


def validate_uint256(value: Any) -> str:
    """Coerce an int or decimal string to a canonical uint256 decimal string.

    Raises:
        ValueError: If the value is not an integer in [0, 2^256-1]
    """
    if isinstance(value, bool) or not isinstance(value, int | str):
        raise ValueError(f"Uint256 must be an int or decimal string, got {type(value).__name__}")
    try:
        number = int(value)
    except ValueError as err:
        raise ValueError(f"Uint256 is not a decimal integer: {value!r}") from err
    if not 0 <= number <= UINT256_MAX:
        raise ValueError(f"Uint256 out of range: {value}")
    return str(number)


# 0x-prefixed, 40 hex digits, any casing
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Raw token amount carried as a decimal string on the wire
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an address and make sure it carries the 0x prefix.

    Raises:
        ValueError: If validate=True and the result is not a well-formed address
    """
    normalized = address.lower()
    if not normalized.startswith("0x"):
        normalized = f"0x{normalized}"
    if validate and not is_valid_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def is_valid_address(address: str) -> bool:
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address.lower()) is not None


def sort_addresses(token_a: str, token_b: str) -> tuple[str, str]:
    """Return the pair ordered as (token0, token1) by lowercase address."""
    a, b = normalize_address(token_a), normalize_address(token_b)
    return (a, b) if a < b else (b, a)


__all__ = [
    "Address",
    "Uint256",
    "UINT256_MAX",
    "validate_uint256",
    "normalize_address",
    "is_valid_address",
    "sort_addresses",
]
