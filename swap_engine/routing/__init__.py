"""Pool routing and selection.

Module structure:
- router.py: SwapRouter, the quoting entry point
- fanout.py: Concurrent probe fan-out with an explicit partition step
- selector.py: Pool selection policy
- cache.py: Short-TTL route cache
"""

from swap_engine.routing.cache import RouteCache, RouteCacheEntry, route_key
from swap_engine.routing.fanout import FanOutResult, fan_out, partition_results, with_timeout
from swap_engine.routing.router import SwapRouter
from swap_engine.routing.selector import enumeration_order, select_best_candidate

__all__ = [
    "FanOutResult",
    "RouteCache",
    "RouteCacheEntry",
    "SwapRouter",
    "enumeration_order",
    "fan_out",
    "partition_results",
    "route_key",
    "select_best_candidate",
    "with_timeout",
]
