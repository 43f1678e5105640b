"""RPC-backed pool-state source.

Makes eth_call requests to the pair/pool factories, the pools themselves and
the QuoterV2 contract. Every failure is reported as ExternalQueryError so the
router can drop the affected candidate.
"""

from __future__ import annotations

from typing import Any

import structlog
from web3 import AsyncWeb3

from swap_engine.constants import (
    QUOTER_V2_ADDRESS,
    V2_FACTORY_ADDRESS,
    V3_FACTORY_ADDRESS,
    ZERO_ADDRESS,
)
from swap_engine.errors import ExternalQueryError
from swap_engine.models.types import normalize_address, sort_addresses
from swap_engine.sources.types import (
    ConcentratedState,
    ConstantProductState,
    SimulatedSwap,
    validate_boundary,
)

logger = structlog.get_logger()

# Minimal ABIs, just the functions we need
V2_FACTORY_ABI = [
    {
        "name": "getPair",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
        ],
        "outputs": [{"name": "pair", "type": "address"}],
    }
]

V2_PAIR_ABI = [
    {
        "name": "getReserves",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "reserve0", "type": "uint112"},
            {"name": "reserve1", "type": "uint112"},
            {"name": "blockTimestampLast", "type": "uint32"},
        ],
    },
    {
        "name": "token0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
]

V3_FACTORY_ABI = [
    {
        "name": "getPool",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
            {"name": "fee", "type": "uint24"},
        ],
        "outputs": [{"name": "pool", "type": "address"}],
    }
]

V3_POOL_ABI = [
    {
        "name": "slot0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "sqrtPriceX96", "type": "uint160"},
            {"name": "tick", "type": "int24"},
            {"name": "observationIndex", "type": "uint16"},
            {"name": "observationCardinality", "type": "uint16"},
            {"name": "observationCardinalityNext", "type": "uint16"},
            {"name": "feeProtocol", "type": "uint8"},
            {"name": "unlocked", "type": "bool"},
        ],
    },
    {
        "name": "liquidity",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint128"}],
    },
]

QUOTER_V2_ABI = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "tokenIn", "type": "address"},
                    {"name": "tokenOut", "type": "address"},
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "fee", "type": "uint24"},
                    {"name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksCrossed", "type": "uint32"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    }
]


def _item(result: Any, index: int) -> Any:
    """Positional field of a tuple result, None when missing."""
    try:
        return result[index]
    except (IndexError, KeyError, TypeError):
        return None


def _as_str(value: Any) -> Any:
    """Plain str for checksum address results (a str subclass)."""
    return str(value) if isinstance(value, str) else value


class Web3PoolStateSource:
    """Pool-state source that calls the contracts via RPC."""

    def __init__(
        self,
        rpc_url: str,
        *,
        v2_factory: str = V2_FACTORY_ADDRESS,
        v3_factory: str = V3_FACTORY_ADDRESS,
        quoter: str = QUOTER_V2_ADDRESS,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            rpc_url: HTTP RPC URL (e.g., "https://eth.llamarpc.com")
            v2_factory: Constant-product factory address
            v3_factory: Concentrated-liquidity factory address
            quoter: QuoterV2 contract address
            w3: Pre-built AsyncWeb3 instance (overrides rpc_url)
        """
        self.w3 = w3 if w3 is not None else AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self._v2_factory = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(v2_factory), abi=V2_FACTORY_ABI
        )
        self._v3_factory = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(v3_factory), abi=V3_FACTORY_ABI
        )
        self._quoter = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(quoter), abi=QUOTER_V2_ABI
        )

    async def _call(self, operation: str, fn: Any, **context: Any) -> Any:
        try:
            return await fn.call()
        except Exception as e:
            logger.warning(f"{operation}_failed", error=str(e), **context)
            raise ExternalQueryError(operation, str(e)) from e

    async def resolve_pool_address(
        self,
        token_a: str,
        token_b: str,
        fee: int | None = None,
    ) -> str | None:
        token0, token1 = (AsyncWeb3.to_checksum_address(t) for t in sort_addresses(token_a, token_b))
        if fee is None:
            fn = self._v2_factory.functions.getPair(token0, token1)
        else:
            fn = self._v3_factory.functions.getPool(token0, token1, fee)

        address = await self._call("resolve_pool_address", fn, token0=token0, token1=token1, fee=fee)
        if not isinstance(address, str):
            raise ExternalQueryError("resolve_pool_address", f"unexpected result {address!r}")
        address = normalize_address(address)
        return None if address == ZERO_ADDRESS else address

    async def read_constant_product_state(self, pool_address: str) -> ConstantProductState:
        pair = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(pool_address), abi=V2_PAIR_ABI
        )
        reserves = await self._call(
            "read_constant_product_state", pair.functions.getReserves(), pool=pool_address
        )
        token0 = await self._call(
            "read_constant_product_state", pair.functions.token0(), pool=pool_address
        )
        return validate_boundary(
            ConstantProductState,
            {"reserve0": _item(reserves, 0), "reserve1": _item(reserves, 1), "token0": _as_str(token0)},
            "read_constant_product_state",
        )

    async def read_concentrated_state(self, pool_address: str) -> ConcentratedState:
        pool = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(pool_address), abi=V3_POOL_ABI
        )
        slot0 = await self._call("read_concentrated_state", pool.functions.slot0(), pool=pool_address)
        liquidity = await self._call(
            "read_concentrated_state", pool.functions.liquidity(), pool=pool_address
        )
        return validate_boundary(
            ConcentratedState,
            {"sqrt_price_x96": _item(slot0, 0), "tick": _item(slot0, 1), "liquidity": liquidity},
            "read_concentrated_state",
        )

    async def simulate_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
    ) -> SimulatedSwap:
        params = (
            AsyncWeb3.to_checksum_address(token_in),
            AsyncWeb3.to_checksum_address(token_out),
            amount_in,
            fee,
            0,  # sqrtPriceLimitX96 = 0 means no limit
        )
        # Result is (amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate)
        result = await self._call(
            "simulate_exact_input_single",
            self._quoter.functions.quoteExactInputSingle(params),
            token_in=token_in,
            token_out=token_out,
            fee=fee,
            amount_in=amount_in,
        )
        return validate_boundary(
            SimulatedSwap,
            {"amount_out": _item(result, 0), "sqrt_price_x96_after": _item(result, 1)},
            "simulate_exact_input_single",
        )


__all__ = [
    "Web3PoolStateSource",
    "V2_FACTORY_ABI",
    "V2_PAIR_ABI",
    "V3_FACTORY_ABI",
    "V3_POOL_ABI",
    "QUOTER_V2_ABI",
]
