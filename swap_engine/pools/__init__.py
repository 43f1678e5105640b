"""Pool snapshot types."""

from swap_engine.pools.types import AnyPool, ConcentratedPool, ConstantProductPool

__all__ = ["AnyPool", "ConcentratedPool", "ConstantProductPool"]
