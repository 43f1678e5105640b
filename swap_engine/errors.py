"""Error classes for the quoting engine.

Only InvalidInput and NoLiquidityError ever reach the caller of
get_swap_quote. ExternalQueryError is absorbed per candidate by the router,
and StaleCacheIgnored never leaves the routing package.
"""


class SwapEngineError(Exception):
    """Base error for quoting and routing."""

    pass


class InvalidInput(SwapEngineError, ValueError):
    """Request rejected before any pool is probed.

    Raised for non-positive amounts, malformed or identical token
    identifiers, unsupported fee tiers and slippage outside [0, 100).
    """

    pass


class NoLiquidityError(SwapEngineError):
    """Every probed pool was absent, failed, or had no usable liquidity."""

    def __init__(self, token_in: str, token_out: str, detail: str | None = None) -> None:
        self.token_in = token_in
        self.token_out = token_out
        message = f"No liquidity for {token_in}/{token_out}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ExternalQueryError(SwapEngineError):
    """A single external read or simulation failed or returned malformed data."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class StaleCacheIgnored(SwapEngineError):
    """Cache entry exists but is older than the TTL."""

    def __init__(self, age_seconds: float) -> None:
        self.age_seconds = age_seconds
        super().__init__(f"Route cache entry is {age_seconds:.1f}s old")


__all__ = [
    "SwapEngineError",
    "InvalidInput",
    "NoLiquidityError",
    "ExternalQueryError",
    "StaleCacheIgnored",
]
