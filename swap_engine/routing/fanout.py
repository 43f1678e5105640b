"""Concurrent probe fan-out.

Probes run concurrently and are joined before anything is decided. Their
outcomes are then partitioned in one explicit step: values are kept,
ExternalQueryError drops that probe, and anything else is a bug and is
re-raised.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import structlog

from swap_engine.errors import ExternalQueryError

logger = structlog.get_logger()

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class FanOutResult(Generic[K, V]):
    """Partitioned outcome of a fan-out, in the order the keys were given."""

    succeeded: list[tuple[K, V]] = field(default_factory=list)
    failed: list[tuple[K, ExternalQueryError]] = field(default_factory=list)

    @property
    def values(self) -> list[V]:
        return [value for _, value in self.succeeded]


def partition_results(
    keys: list[K],
    results: list[V | BaseException],
) -> FanOutResult[K, V]:
    """Split gathered results into successes and dropped failures.

    Raises:
        BaseException: Any exception other than ExternalQueryError
    """
    outcome: FanOutResult[K, V] = FanOutResult()
    for key, result in zip(keys, results, strict=True):
        if isinstance(result, ExternalQueryError):
            outcome.failed.append((key, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcome.succeeded.append((key, result))
    return outcome


async def with_timeout(awaitable: Awaitable[V], timeout: float | None, operation: str) -> V:
    """Await with an upper bound; a timeout is reported as ExternalQueryError."""
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError as e:
        raise ExternalQueryError(operation, f"timed out after {timeout}s") from e


async def fan_out(
    keys: Iterable[K],
    probe: Callable[[K], Awaitable[V]],
    *,
    timeout: float | None = None,
    operation: str = "probe",
) -> FanOutResult[K, V]:
    """Run ``probe(key)`` for every key concurrently and partition the results.

    Args:
        keys: Probe keys (e.g., fee tiers), in enumeration order
        probe: Coroutine factory for one key
        timeout: Per-probe upper bound in seconds
        operation: Name used in logs and timeout errors

    Returns:
        FanOutResult with successes and dropped failures
    """
    key_list = list(keys)
    results = await asyncio.gather(
        *(with_timeout(probe(key), timeout, operation) for key in key_list),
        return_exceptions=True,
    )
    outcome = partition_results(key_list, results)
    for key, error in outcome.failed:
        logger.info("probe_dropped", operation=operation, key=key, error=str(error))
    return outcome


__all__ = ["FanOutResult", "fan_out", "partition_results", "with_timeout"]
