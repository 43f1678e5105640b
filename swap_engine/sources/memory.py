"""In-memory pool-state source for tests and offline quoting.

Configure with pool snapshots, and track calls for assertions. Swaps are
simulated with single-range concentrated-liquidity math (no tick crossing),
which is exact for trades that stay inside the current tick range.
"""

from __future__ import annotations

from dataclasses import dataclass

from swap_engine.constants import Q96, V3_FEE_DENOMINATOR, ZERO_ADDRESS
from swap_engine.errors import ExternalQueryError
from swap_engine.models.types import normalize_address, sort_addresses
from swap_engine.safe_int import S
from swap_engine.sources.types import (
    ConcentratedState,
    ConstantProductState,
    SimulatedSwap,
)


@dataclass
class _ConcentratedEntry:
    address: str
    token0: str
    token1: str
    fee: int
    state: ConcentratedState
    # Fixed simulation result, overrides the single-range math when set
    fixed_swap: SimulatedSwap | None = None


def simulate_single_range(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    fee: int,
    *,
    zero_for_one: bool,
) -> SimulatedSwap:
    """Exact-input swap within the current liquidity range.

    Args:
        sqrt_price_x96: Current sqrt price in Q64.96
        liquidity: Active liquidity
        amount_in: Input amount, fee included
        fee: Fee tier in hundredths of a bip
        zero_for_one: True when selling token0

    Returns:
        SimulatedSwap with the output and the post-swap sqrt price
    """
    if liquidity <= 0 or amount_in <= 0 or sqrt_price_x96 <= 0:
        return SimulatedSwap(amount_out=0, sqrt_price_x96_after=sqrt_price_x96)

    net_in = S(amount_in).mul_div(V3_FEE_DENOMINATOR - fee, V3_FEE_DENOMINATOR)
    sqrt_cur = S(sqrt_price_x96)
    liq = S(liquidity)

    if zero_for_one:
        # Price moves down: sqrt_next = L * sqrtP / (L + net_in * sqrtP / Q96)
        numerator = liq * sqrt_cur * Q96
        denominator = liq * Q96 + net_in * sqrt_cur
        sqrt_next = numerator // denominator
        amount_out = liq.mul_div(sqrt_cur - sqrt_next, Q96)
    else:
        # Price moves up: sqrt_next = sqrtP + net_in * Q96 / L
        sqrt_next = sqrt_cur + net_in.mul_div(Q96, liq)
        amount_out = (liq * Q96).mul_div(sqrt_next - sqrt_cur, sqrt_next * sqrt_cur)

    return SimulatedSwap(
        amount_out=amount_out.to_uint256(),
        sqrt_price_x96_after=sqrt_next.to_uint160(),
    )


class InMemoryPoolStateSource:
    """Pool-state source backed by dictionaries.

    Every call is appended to ``calls`` as (operation, *args) so tests can
    assert how many external probes a quote performed. Addresses listed in
    ``failing`` raise ExternalQueryError on any read or simulation.
    """

    def __init__(self) -> None:
        self._v2_pairs: dict[tuple[str, str], str] = {}
        self._v2_states: dict[str, ConstantProductState] = {}
        self._v3_pools: dict[tuple[str, str, int], _ConcentratedEntry] = {}
        self._v3_by_address: dict[str, _ConcentratedEntry] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple] = []

    # --- Configuration ---

    def add_constant_product_pool(
        self,
        address: str,
        token_a: str,
        token_b: str,
        reserve_a: int,
        reserve_b: int,
    ) -> None:
        """Register a pair. Reserves are given in (token_a, token_b) order."""
        token0, token1 = sort_addresses(token_a, token_b)
        if token0 != normalize_address(token_a):
            reserve_a, reserve_b = reserve_b, reserve_a
        address = normalize_address(address)
        self._v2_pairs[(token0, token1)] = address
        self._v2_states[address] = ConstantProductState(
            reserve0=reserve_a, reserve1=reserve_b, token0=token0
        )

    def add_concentrated_pool(
        self,
        address: str,
        token_a: str,
        token_b: str,
        fee: int,
        sqrt_price_x96: int,
        liquidity: int,
        tick: int = 0,
        fixed_swap: SimulatedSwap | None = None,
    ) -> None:
        """Register a pool. sqrt_price_x96 is always token1 per token0."""
        token0, token1 = sort_addresses(token_a, token_b)
        entry = _ConcentratedEntry(
            address=normalize_address(address),
            token0=token0,
            token1=token1,
            fee=fee,
            state=ConcentratedState(sqrt_price_x96=sqrt_price_x96, tick=tick, liquidity=liquidity),
            fixed_swap=fixed_swap,
        )
        self._v3_pools[(token0, token1, fee)] = entry
        self._v3_by_address[entry.address] = entry

    def set_reserves(self, address: str, reserve0: int, reserve1: int) -> None:
        """Move a pair's reserves (token0/token1 order)."""
        address = normalize_address(address)
        current = self._v2_states[address]
        self._v2_states[address] = ConstantProductState(
            reserve0=reserve0, reserve1=reserve1, token0=current.token0
        )

    def probe_count(self, operation: str = "simulate_exact_input_single") -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    def _check_failing(self, operation: str, address: str) -> None:
        if address in self.failing:
            raise ExternalQueryError(operation, f"injected failure for {address}")

    # --- PoolStateSource ---

    async def resolve_pool_address(
        self,
        token_a: str,
        token_b: str,
        fee: int | None = None,
    ) -> str | None:
        self.calls.append(("resolve_pool_address", token_a, token_b, fee))
        token0, token1 = sort_addresses(token_a, token_b)
        if fee is None:
            return self._v2_pairs.get((token0, token1), ZERO_ADDRESS)
        entry = self._v3_pools.get((token0, token1, fee))
        return entry.address if entry is not None else ZERO_ADDRESS

    async def read_constant_product_state(self, pool_address: str) -> ConstantProductState:
        address = normalize_address(pool_address)
        self.calls.append(("read_constant_product_state", address))
        self._check_failing("read_constant_product_state", address)
        state = self._v2_states.get(address)
        if state is None:
            raise ExternalQueryError("read_constant_product_state", f"unknown pair {address}")
        return state

    async def read_concentrated_state(self, pool_address: str) -> ConcentratedState:
        address = normalize_address(pool_address)
        self.calls.append(("read_concentrated_state", address))
        self._check_failing("read_concentrated_state", address)
        entry = self._v3_by_address.get(address)
        if entry is None:
            raise ExternalQueryError("read_concentrated_state", f"unknown pool {address}")
        return entry.state

    async def simulate_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
    ) -> SimulatedSwap:
        self.calls.append(("simulate_exact_input_single", token_in, token_out, amount_in, fee))
        token0, token1 = sort_addresses(token_in, token_out)
        entry = self._v3_pools.get((token0, token1, fee))
        if entry is None:
            raise ExternalQueryError("simulate_exact_input_single", f"no pool for fee {fee}")
        self._check_failing("simulate_exact_input_single", entry.address)
        if entry.fixed_swap is not None:
            return entry.fixed_swap
        return simulate_single_range(
            entry.state.sqrt_price_x96,
            entry.state.liquidity,
            amount_in,
            fee,
            zero_for_one=normalize_address(token_in) == token0,
        )


__all__ = ["InMemoryPoolStateSource", "simulate_single_range"]
