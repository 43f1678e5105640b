"""Tests for the RPC-backed pool-state source with a mocked web3 client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import AsyncWeb3

from swap_engine.constants import Q96, ZERO_ADDRESS
from swap_engine.errors import ExternalQueryError
from swap_engine.sources.web3_source import Web3PoolStateSource
from tests.helpers import DAI, V2_DAI_WETH, V3_DAI_WETH_POOLS, WETH


def make_source(results: dict[str, object]) -> Web3PoolStateSource:
    """Source whose contract functions return (or raise) the given results by name."""
    w3 = MagicMock()

    def contract(address, abi):
        mock = MagicMock()
        for name, value in results.items():
            call = getattr(mock.functions, name).return_value
            if isinstance(value, Exception):
                call.call = AsyncMock(side_effect=value)
            else:
                call.call = AsyncMock(return_value=value)
        return mock

    w3.eth.contract.side_effect = contract
    return Web3PoolStateSource("http://localhost:8545", w3=w3)


class TestResolvePoolAddress:
    """Tests for factory lookups."""

    def test_v3_pool(self):
        """getPool result is normalized to lowercase."""
        checksum = AsyncWeb3.to_checksum_address(V3_DAI_WETH_POOLS[500])
        source = make_source({"getPool": checksum})
        assert asyncio.run(source.resolve_pool_address(DAI, WETH, 500)) == V3_DAI_WETH_POOLS[500]

    def test_v2_pair(self):
        """A None fee queries the pair factory."""
        source = make_source({"getPair": AsyncWeb3.to_checksum_address(V2_DAI_WETH)})
        assert asyncio.run(source.resolve_pool_address(WETH, DAI)) == V2_DAI_WETH

    def test_zero_address_is_none(self):
        """The factories return the zero address for missing pools."""
        source = make_source({"getPool": ZERO_ADDRESS})
        assert asyncio.run(source.resolve_pool_address(DAI, WETH, 100)) is None

    def test_rpc_failure(self):
        """Transport errors become ExternalQueryError."""
        source = make_source({"getPool": ConnectionError("refused")})
        with pytest.raises(ExternalQueryError, match="refused"):
            asyncio.run(source.resolve_pool_address(DAI, WETH, 500))


class TestReadState:
    """Tests for pool state reads."""

    def test_constant_product_state(self):
        """getReserves and token0 are combined into one snapshot."""
        source = make_source(
            {
                "getReserves": [1_000_000, 2_000_000, 1_700_000_000],
                "token0": AsyncWeb3.to_checksum_address(DAI),
            }
        )
        state = asyncio.run(source.read_constant_product_state(V2_DAI_WETH))

        assert (state.reserve0, state.reserve1) == (1_000_000, 2_000_000)
        assert state.token0 == DAI

    def test_truncated_reserves(self):
        """A result missing reserve1 is malformed."""
        source = make_source({"getReserves": [1_000_000], "token0": AsyncWeb3.to_checksum_address(DAI)})
        with pytest.raises(ExternalQueryError, match="malformed"):
            asyncio.run(source.read_constant_product_state(V2_DAI_WETH))

    def test_concentrated_state(self):
        """slot0 and liquidity are combined into one snapshot."""
        source = make_source({"slot0": [Q96, -5, 0, 1, 1, 0, True], "liquidity": 10**20})
        state = asyncio.run(source.read_concentrated_state(V3_DAI_WETH_POOLS[3000]))

        assert state.sqrt_price_x96 == Q96
        assert state.tick == -5
        assert state.liquidity == 10**20

    def test_concentrated_liquidity_missing(self):
        """A None liquidity is malformed."""
        source = make_source({"slot0": [Q96, 0, 0, 1, 1, 0, True], "liquidity": None})
        with pytest.raises(ExternalQueryError):
            asyncio.run(source.read_concentrated_state(V3_DAI_WETH_POOLS[3000]))


class TestSimulate:
    """Tests for the QuoterV2 simulation."""

    def test_quote_exact_input_single(self):
        """amountOut and sqrtPriceX96After are extracted."""
        source = make_source({"quoteExactInputSingle": [995, Q96 - 1, 1, 90_000]})
        swap = asyncio.run(source.simulate_exact_input_single(DAI, WETH, 1000, 3000))

        assert swap.amount_out == 995
        assert swap.sqrt_price_x96_after == Q96 - 1

    def test_revert(self):
        """A reverting quote is a query failure for that tier only."""
        source = make_source({"quoteExactInputSingle": ValueError("execution reverted")})
        with pytest.raises(ExternalQueryError, match="simulate_exact_input_single"):
            asyncio.run(source.simulate_exact_input_single(DAI, WETH, 1000, 3000))
