"""Pytest configuration and fixtures."""

import pytest

from swap_engine.config import EngineConfig
from swap_engine.routing.cache import RouteCache
from swap_engine.routing.router import SwapRouter
from swap_engine.sources.memory import InMemoryPoolStateSource
from tests.helpers import (
    DAI,
    NATIVE,
    V2_DAI_WETH,
    WETH,
    FakeClock,
    make_dai_weth_source,
)


@pytest.fixture
def clock() -> FakeClock:
    """A manually advanced clock."""
    return FakeClock()


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default configuration with ETH/WETH registered as a wrap pair."""
    return EngineConfig(wrap_pairs=frozenset({frozenset({NATIVE, WETH})}))


@pytest.fixture
def v3_source() -> InMemoryPoolStateSource:
    """DAI/WETH pools at all four fee tiers; 0.05% wins the default policy."""
    return make_dai_weth_source()


@pytest.fixture
def v2_source() -> InMemoryPoolStateSource:
    """Only a constant-product DAI/WETH pair with (1_000_000, 2_000_000) reserves."""
    source = InMemoryPoolStateSource()
    source.add_constant_product_pool(V2_DAI_WETH, DAI, WETH, 1_000_000, 2_000_000)
    return source


@pytest.fixture
def make_router(engine_config: EngineConfig, clock: FakeClock):
    """Build a router over a source with an isolated cache on the fake clock."""

    def _make(source: InMemoryPoolStateSource, config: EngineConfig | None = None) -> SwapRouter:
        config = config or engine_config
        cache = RouteCache(config.route_cache_ttl_seconds, clock=clock)
        return SwapRouter(source, config, cache=cache)

    return _make
