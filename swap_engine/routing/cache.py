"""Short-TTL route cache.

Remembers which pool won the last full selection for a token pair, so that
repeat quotes within the TTL probe only that pool. Only the choice of pool
is cached; reserves, prices and output amounts are always read afresh.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from swap_engine.constants import ROUTE_CACHE_TTL_SECONDS
from swap_engine.errors import StaleCacheIgnored
from swap_engine.models.quote import PoolVersion
from swap_engine.models.types import normalize_address
from swap_engine.pools.types import AnyPool

logger = structlog.get_logger()

RouteKey = frozenset[str]


def route_key(token_a: str, token_b: str) -> RouteKey:
    """Unordered key: (A, B) and (B, A) share one entry."""
    return frozenset((normalize_address(token_a), normalize_address(token_b)))


@dataclass(frozen=True)
class RouteCacheEntry:
    """Winning route of a full selection."""

    version: PoolVersion
    fee_tier: int
    pool: AnyPool
    created_at: float


class RouteCache:
    """Per-pair route memory with a fixed TTL.

    Entries are replaced whole (last writer wins). Expired entries are dropped
    when read and swept on every write, so the map only holds pairs quoted
    within the TTL. Construct one instance per router; tests can inject a
    fake clock.

    Args:
        ttl_seconds: Lifetime of an entry from the moment it is written
        clock: Monotonic time source in seconds
    """

    def __init__(
        self,
        ttl_seconds: float = ROUTE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[RouteKey, RouteCacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, token_a: str, token_b: str) -> RouteCacheEntry | None:
        """Look up a fresh entry.

        Returns:
            The entry if it is younger than the TTL, None if there is none

        Raises:
            StaleCacheIgnored: If an entry exists but has expired (it is evicted)
        """
        key = route_key(token_a, token_b)
        entry = self._entries.get(key)
        if entry is None:
            return None

        age = self._clock() - entry.created_at
        if age >= self.ttl_seconds:
            del self._entries[key]
            raise StaleCacheIgnored(age)
        return entry

    def put(
        self,
        token_a: str,
        token_b: str,
        version: PoolVersion,
        fee_tier: int,
        pool: AnyPool,
    ) -> RouteCacheEntry:
        now = self._clock()
        self._evict_expired(now)
        entry = RouteCacheEntry(
            version=version,
            fee_tier=fee_tier,
            pool=pool,
            created_at=now,
        )
        self._entries[route_key(token_a, token_b)] = entry
        logger.debug(
            "route_cache_write",
            pool=pool.address,
            version=version.value,
            fee_tier=fee_tier,
        )
        return entry

    def invalidate(self, token_a: str, token_b: str) -> None:
        self._entries.pop(route_key(token_a, token_b), None)

    def clear(self) -> None:
        self._entries.clear()

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if now - e.created_at >= self.ttl_seconds]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("route_cache_evicted", count=len(expired))


__all__ = ["RouteCache", "RouteCacheEntry", "RouteKey", "route_key"]
