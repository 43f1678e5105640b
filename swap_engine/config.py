"""Engine configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from swap_engine.constants import (
    HIGH_SLIPPAGE_PERCENT,
    LOW_FEE_TIER_CEILING,
    MAX_PREFERRED_PRICE_IMPACT,
    ROUTE_CACHE_TTL_SECONDS,
    V3_FEE_TIERS,
)
from swap_engine.models.types import normalize_address

ENV_PREFIX = "SWAP_ENGINE_"


def _parse_wrap_pairs(raw: str) -> frozenset[frozenset[str]]:
    """Parse "native:wrapped,native2:wrapped2" into unordered address pairs."""
    pairs = set()
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        native, sep, wrapped = item.partition(":")
        if not sep:
            raise ValueError(f"Wrap pair must be 'native:wrapped', got {item!r}")
        pairs.add(
            frozenset(
                (
                    normalize_address(native.strip(), validate=True),
                    normalize_address(wrapped.strip(), validate=True),
                )
            )
        )
    return frozenset(pairs)


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for quoting and routing.

    Attributes:
        fee_tiers: Concentrated-liquidity fee tiers to probe, in tie-break order
        max_preferred_price_impact: Candidates strictly below this impact
            (percent) are preferred by the selector
        low_fee_tier_ceiling: Fee tiers at or below this are preferred
        route_cache_ttl_seconds: How long a winning route is reused
        high_slippage_percent: Slippage at or above this is flagged
        probe_timeout_seconds: Upper bound for one probe, None for no bound
        wrap_pairs: Native/wrapped pairs that convert 1:1 without a pool
        rpc_url: RPC endpoint for the web3-backed pool-state source
    """

    fee_tiers: tuple[int, ...] = V3_FEE_TIERS
    max_preferred_price_impact: Decimal = MAX_PREFERRED_PRICE_IMPACT
    low_fee_tier_ceiling: int = LOW_FEE_TIER_CEILING
    route_cache_ttl_seconds: float = ROUTE_CACHE_TTL_SECONDS
    high_slippage_percent: Decimal = HIGH_SLIPPAGE_PERCENT
    probe_timeout_seconds: float | None = 10.0
    wrap_pairs: frozenset[frozenset[str]] = field(default_factory=frozenset)
    rpc_url: str | None = None

    def __post_init__(self) -> None:
        unknown = [fee for fee in self.fee_tiers if fee not in V3_FEE_TIERS]
        if unknown:
            raise ValueError(f"Unsupported fee tiers: {unknown}")
        if self.route_cache_ttl_seconds < 0:
            raise ValueError("route_cache_ttl_seconds must be non-negative")
        if self.probe_timeout_seconds is not None and self.probe_timeout_seconds <= 0:
            raise ValueError("probe_timeout_seconds must be positive")

    def is_wrap_pair(self, token_a: str, token_b: str) -> bool:
        return frozenset((normalize_address(token_a), normalize_address(token_b))) in self.wrap_pairs

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a configuration from SWAP_ENGINE_* environment variables.

        Recognized variables:
        - SWAP_ENGINE_FEE_TIERS: comma-separated fee tiers (default: 100,500,3000,10000)
        - SWAP_ENGINE_ROUTE_CACHE_TTL: seconds (default: 20)
        - SWAP_ENGINE_PROBE_TIMEOUT: seconds, 0 disables (default: 10)
        - SWAP_ENGINE_HIGH_SLIPPAGE: percent (default: 5)
        - SWAP_ENGINE_WRAP_PAIRS: "native:wrapped" pairs, comma-separated
        - SWAP_ENGINE_RPC_URL: RPC endpoint
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if fee_tiers := env.get(f"{ENV_PREFIX}FEE_TIERS"):
            kwargs["fee_tiers"] = tuple(int(fee) for fee in fee_tiers.split(",") if fee.strip())
        if ttl := env.get(f"{ENV_PREFIX}ROUTE_CACHE_TTL"):
            kwargs["route_cache_ttl_seconds"] = float(ttl)
        if timeout := env.get(f"{ENV_PREFIX}PROBE_TIMEOUT"):
            kwargs["probe_timeout_seconds"] = float(timeout) or None
        if high := env.get(f"{ENV_PREFIX}HIGH_SLIPPAGE"):
            kwargs["high_slippage_percent"] = Decimal(high)
        if wrap := env.get(f"{ENV_PREFIX}WRAP_PAIRS"):
            kwargs["wrap_pairs"] = _parse_wrap_pairs(wrap)
        if rpc_url := env.get(f"{ENV_PREFIX}RPC_URL"):
            kwargs["rpc_url"] = rpc_url

        return cls(**kwargs)  # type: ignore[arg-type]


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()

__all__ = ["EngineConfig", "DEFAULT_ENGINE_CONFIG", "ENV_PREFIX"]
