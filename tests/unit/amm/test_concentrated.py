"""Tests for the concentrated-liquidity quote calculator."""

import asyncio
from decimal import Decimal

import pytest

from swap_engine.amm.concentrated import ConcentratedQuoteCalculator, fee_amount, price_impact
from swap_engine.constants import Q96
from swap_engine.errors import ExternalQueryError, InvalidInput
from swap_engine.math.fixed_point import INFINITE_IMPACT
from swap_engine.models.quote import PoolVersion
from swap_engine.pools.types import ConcentratedPool
from tests.helpers import (
    DAI,
    DAI_TOKEN,
    ONE_TOKEN,
    V3_DAI_WETH_POOLS,
    WETH,
    WETH_TOKEN,
    make_dai_weth_source,
    sqrt_price_after,
)


def make_pool(fee: int = 500, liquidity: int = 10**24) -> ConcentratedPool:
    return ConcentratedPool(
        address=V3_DAI_WETH_POOLS.get(fee, V3_DAI_WETH_POOLS[500]),
        token0=DAI_TOKEN,
        token1=WETH_TOKEN,
        fee=fee,
        sqrt_price_x96=Q96,
        liquidity=liquidity,
        tick=0,
    )


class TestPriceImpact:
    """Tests for price impact from pre/post sqrt prices."""

    def test_zero_for_one(self):
        """Sqrt price down 0.1% is a price move of about 0.2%."""
        impact = price_impact(make_pool(), DAI_TOKEN, sqrt_price_after(999))
        assert Decimal("0.19") < impact < Decimal("0.21")

    def test_one_for_zero(self):
        """Selling token1 measures the inverted price."""
        impact = price_impact(make_pool(), WETH_TOKEN, sqrt_price_after(1001))
        assert Decimal("0.19") < impact < Decimal("0.21")

    def test_unchanged_price(self):
        """No movement is zero impact."""
        assert price_impact(make_pool(), DAI_TOKEN, Q96) == 0

    def test_no_liquidity_is_infinite(self):
        """A pool without active liquidity reports infinite impact."""
        assert price_impact(make_pool(liquidity=0), DAI_TOKEN, Q96) == INFINITE_IMPACT

    def test_zero_after_price_is_infinite(self):
        """A zero post-swap sqrt price means the pool was drained."""
        assert price_impact(make_pool(), DAI_TOKEN, 0) == INFINITE_IMPACT


class TestFeeAmount:
    """Tests for the V3 fee amount."""

    @pytest.mark.parametrize(
        ("fee", "expected"),
        [(100, 10**14), (500, 5 * 10**14), (3000, 3 * 10**15), (10000, 10**16)],
    )
    def test_fee_tiers(self, fee, expected):
        """Fee is amount_in * fee / 1e6."""
        assert fee_amount(ONE_TOKEN, fee) == expected

    def test_truncates(self):
        """Fee is rounded down."""
        assert fee_amount(1999, 500) == 0


class TestConcentratedQuoteCalculator:
    """Tests for ConcentratedQuoteCalculator.quote."""

    def test_quote_uses_simulation(self):
        """Output comes from the quoter; impact from the sqrt prices."""
        source = make_dai_weth_source()
        calculator = ConcentratedQuoteCalculator(source)

        candidate = asyncio.run(calculator.quote(make_pool(500), DAI_TOKEN, ONE_TOKEN))

        assert candidate.version == PoolVersion.V3
        assert candidate.fee_tier == 500
        assert candidate.amount_out == ONE_TOKEN
        assert candidate.fee_amount == 5 * 10**14
        assert candidate.liquidity == 10**24
        assert Decimal("0.19") < candidate.price_impact < Decimal("0.21")
        assert source.calls == [("simulate_exact_input_single", DAI, WETH, ONE_TOKEN, 500)]

    def test_rejects_non_positive_amount(self):
        """Zero input is rejected before any external call."""
        source = make_dai_weth_source()
        calculator = ConcentratedQuoteCalculator(source)

        with pytest.raises(InvalidInput):
            asyncio.run(calculator.quote(make_pool(), DAI_TOKEN, 0))
        assert source.calls == []

    def test_rejects_unknown_fee_tier(self):
        """Fee tiers outside the enumeration are rejected."""
        calculator = ConcentratedQuoteCalculator(make_dai_weth_source())
        with pytest.raises(InvalidInput, match="fee tier"):
            asyncio.run(calculator.quote(make_pool(fee=250), DAI_TOKEN, ONE_TOKEN))

    def test_simulation_failure_propagates(self):
        """A failed simulation surfaces as ExternalQueryError for that pool."""
        source = make_dai_weth_source()
        source.failing.add(V3_DAI_WETH_POOLS[500])
        calculator = ConcentratedQuoteCalculator(source)

        with pytest.raises(ExternalQueryError):
            asyncio.run(calculator.quote(make_pool(500), DAI_TOKEN, ONE_TOKEN))
