"""Swap quoting and pool routing.

This module is the engine's entry point. For one request it:
- validates the request and short-circuits native/wrapped conversions
- reuses the cached route for the pair when it is still fresh
- otherwise resolves and probes every fee tier concurrently, drops failed
  probes, and applies the selection policy
- falls back to the constant-product pair when no concentrated pool exists
- applies the slippage tolerance to the winning output

Version routing is a binary preference: when any concentrated-liquidity pool
exists for the pair it is used, unless the caller pins a version.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from swap_engine.amm.base import QuoteCandidate
from swap_engine.amm.concentrated import ConcentratedQuoteCalculator
from swap_engine.amm.constant_product import ConstantProductCalculator, constant_product
from swap_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from swap_engine.constants import ZERO_ADDRESS
from swap_engine.errors import ExternalQueryError, InvalidInput, NoLiquidityError, StaleCacheIgnored
from swap_engine.fees.slippage import is_high_slippage, minimum_received, parse_slippage
from swap_engine.math.fixed_point import format_percent
from swap_engine.models.quote import PoolVersion, Quote
from swap_engine.models.token import Token, sort_tokens
from swap_engine.models.types import UINT256_MAX, normalize_address
from swap_engine.pools.types import ConcentratedPool, ConstantProductPool
from swap_engine.routing.cache import RouteCache, RouteCacheEntry
from swap_engine.routing.fanout import fan_out, with_timeout
from swap_engine.routing.selector import select_best_candidate
from swap_engine.sources.types import PoolStateSource

logger = structlog.get_logger()


def _is_absent(address: str | None) -> bool:
    return address is None or normalize_address(address) == ZERO_ADDRESS


class SwapRouter:
    """Produces one quote per request from the available pools.

    Args:
        source: External pool-state and quoting capability
        config: Engine configuration. Defaults to DEFAULT_ENGINE_CONFIG.
        cache: Route cache. If None, a private cache with the configured TTL
               is created.
        v2_calculator: Constant-product math. Defaults to the singleton.
    """

    def __init__(
        self,
        source: PoolStateSource,
        config: EngineConfig | None = None,
        cache: RouteCache | None = None,
        v2_calculator: ConstantProductCalculator | None = None,
    ) -> None:
        self.source = source
        self.config = config if config is not None else DEFAULT_ENGINE_CONFIG
        self.cache = cache if cache is not None else RouteCache(self.config.route_cache_ttl_seconds)
        self.v2 = v2_calculator if v2_calculator is not None else constant_product
        self.v3 = ConcentratedQuoteCalculator(source)

    # --- Public API ---

    async def get_swap_quote(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        slippage: Decimal | str | int | float,
        version_hint: PoolVersion | str | None = None,
        pinned_fee: int | None = None,
    ) -> Quote:
        """Quote an exact-input swap of ``amount_in`` raw units of ``token_in``.

        Args:
            token_in: Token being sold
            token_out: Token being bought
            amount_in: Input amount in raw units, must be positive
            slippage: Slippage tolerance in percent (0.5 means 0.5%)
            version_hint: Pin the route to V2 or V3
            pinned_fee: Probe only this concentrated-liquidity fee tier

        Returns:
            The quote for the selected route

        Raises:
            InvalidInput: If the request is malformed
            NoLiquidityError: If no pool can serve the trade
        """
        tolerance = parse_slippage(slippage)
        version = self._validate(token_in, token_out, amount_in, version_hint, pinned_fee)

        if self.config.is_wrap_pair(token_in.address, token_out.address):
            return self._wrap_quote(amount_in, tolerance)

        pinned = version is not None or pinned_fee is not None
        candidate = None
        if not pinned:
            candidate = await self._quote_from_cache(token_in, token_out, amount_in)

        if candidate is None:
            candidate = await self._route(token_in, token_out, amount_in, version, pinned_fee)
            if not pinned:
                self.cache.put(
                    token_in.address,
                    token_out.address,
                    candidate.version,
                    candidate.fee_tier,
                    candidate.pool,
                )

        quote = self._build_quote(candidate, tolerance)
        logger.info(
            "swap_quoted",
            token_in=token_in.symbol or token_in.address,
            token_out=token_out.symbol or token_out.address,
            amount_in=amount_in,
            amount_out=quote.output_amount,
            version=quote.chosen_pool_version.value,
            fee_tier=quote.chosen_fee_tier,
            price_impact=quote.price_impact_display,
        )
        return quote

    # --- Validation ---

    def _validate(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        version_hint: PoolVersion | str | None,
        pinned_fee: int | None,
    ) -> PoolVersion | None:
        if not isinstance(token_in, Token) or not isinstance(token_out, Token):
            raise InvalidInput("token_in and token_out must be Token instances")
        if token_in.address == token_out.address:
            raise InvalidInput(f"Cannot swap a token for itself: {token_in.address}")
        if isinstance(amount_in, bool) or not isinstance(amount_in, int):
            raise InvalidInput(f"Amount must be an integer, got {type(amount_in).__name__}")
        if amount_in <= 0:
            raise InvalidInput(f"Amount must be positive: {amount_in}")
        if amount_in > UINT256_MAX:
            raise InvalidInput(f"Amount does not fit uint256: {amount_in}")

        version: PoolVersion | None = None
        if version_hint is not None:
            try:
                version = PoolVersion(version_hint)
            except ValueError as err:
                raise InvalidInput(f"Unknown pool version: {version_hint!r}") from err
            if version == PoolVersion.WRAP:
                raise InvalidInput("Pool version can only be pinned to v2 or v3")

        if pinned_fee is not None:
            if pinned_fee not in self.config.fee_tiers:
                raise InvalidInput(f"Unsupported fee tier: {pinned_fee}")
            if version == PoolVersion.V2:
                raise InvalidInput("A fee tier can only be pinned for v3 routes")

        return version

    # --- Routing ---

    async def _route(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        version: PoolVersion | None,
        pinned_fee: int | None,
    ) -> QuoteCandidate:
        """Full selection: probe every eligible pool and pick one."""
        if version != PoolVersion.V2:
            fee_tiers = (pinned_fee,) if pinned_fee is not None else self.config.fee_tiers
            pools_found, candidates = await self._probe_concentrated(
                token_in, token_out, amount_in, fee_tiers
            )
            use_v3 = version == PoolVersion.V3 or pinned_fee is not None or pools_found
            if use_v3:
                winner = select_best_candidate(
                    candidates,
                    fee_tiers=self.config.fee_tiers,
                    max_price_impact=self.config.max_preferred_price_impact,
                    low_fee_ceiling=self.config.low_fee_tier_ceiling,
                )
                if winner is None:
                    raise NoLiquidityError(
                        token_in.address,
                        token_out.address,
                        f"{pools_found} concentrated pool(s), none usable",
                    )
                logger.info(
                    "route_selected",
                    version=winner.version.value,
                    fee_tier=winner.fee_tier,
                    pool=winner.pool.address,
                    candidates=len(candidates),
                    price_impact=format_percent(winner.price_impact),
                )
                return winner

        candidate = await self._probe_constant_product(token_in, token_out, amount_in)
        if candidate is None or not candidate.is_viable:
            raise NoLiquidityError(token_in.address, token_out.address)
        logger.info("route_selected", version=candidate.version.value, pool=candidate.pool.address)
        return candidate

    async def _probe_concentrated(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        fee_tiers: tuple[int, ...],
    ) -> tuple[int, list[QuoteCandidate]]:
        """Resolve and probe every fee tier concurrently.

        Returns:
            (number of pools that exist, viable candidates)
        """
        timeout = self.config.probe_timeout_seconds

        async def resolve(fee: int) -> str | None:
            return await self.source.resolve_pool_address(token_in.address, token_out.address, fee)

        resolved = await fan_out(fee_tiers, resolve, timeout=timeout, operation="resolve_pool_address")
        existing = [(fee, address) for fee, address in resolved.succeeded if not _is_absent(address)]
        if not existing:
            return 0, []

        addresses = dict(existing)

        async def probe(fee: int) -> QuoteCandidate:
            pool = await self._load_concentrated_pool(addresses[fee], token_in, token_out, fee)
            return await self.v3.quote(pool, token_in, amount_in)

        probed = await fan_out(addresses, probe, timeout=timeout, operation="concentrated_probe")
        viable = [c for c in probed.values if c.is_viable]
        for candidate in probed.values:
            if not candidate.is_viable:
                logger.info(
                    "candidate_without_liquidity",
                    fee_tier=candidate.fee_tier,
                    pool=candidate.pool.address,
                )
        return len(existing), viable

    async def _probe_constant_product(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
    ) -> QuoteCandidate | None:
        timeout = self.config.probe_timeout_seconds
        try:
            address = await with_timeout(
                self.source.resolve_pool_address(token_in.address, token_out.address, None),
                timeout,
                "resolve_pool_address",
            )
            if _is_absent(address):
                return None
            assert address is not None
            pool = await with_timeout(
                self._load_constant_product_pool(address, token_in, token_out),
                timeout,
                "read_constant_product_state",
            )
        except ExternalQueryError as e:
            logger.info("probe_dropped", operation="constant_product_probe", error=str(e))
            return None
        return self.v2.quote(pool, token_in, amount_in)

    # --- Route cache ---

    async def _quote_from_cache(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
    ) -> QuoteCandidate | None:
        """Probe only the cached pool. None means a full selection is needed."""
        try:
            entry = self.cache.get(token_in.address, token_out.address)
        except StaleCacheIgnored as stale:
            logger.debug("route_cache_stale", age_seconds=round(stale.age_seconds, 3))
            return None
        if entry is None:
            return None

        try:
            candidate = await with_timeout(
                self._probe_cached(entry, token_in, token_out, amount_in),
                self.config.probe_timeout_seconds,
                "cached_probe",
            )
        except ExternalQueryError as e:
            logger.info("route_cache_probe_failed", pool=entry.pool.address, error=str(e))
            self.cache.invalidate(token_in.address, token_out.address)
            return None

        if not candidate.is_viable:
            self.cache.invalidate(token_in.address, token_out.address)
            return None

        logger.debug("route_cache_hit", pool=entry.pool.address, fee_tier=entry.fee_tier)
        return candidate

    async def _probe_cached(
        self,
        entry: RouteCacheEntry,
        token_in: Token,
        token_out: Token,
        amount_in: int,
    ) -> QuoteCandidate:
        if entry.version == PoolVersion.V3:
            pool = await self._load_concentrated_pool(
                entry.pool.address, token_in, token_out, entry.fee_tier
            )
            return await self.v3.quote(pool, token_in, amount_in)
        v2_pool = await self._load_constant_product_pool(entry.pool.address, token_in, token_out)
        return self.v2.quote(v2_pool, token_in, amount_in)

    # --- Pool loading ---

    async def _load_concentrated_pool(
        self,
        address: str,
        token_in: Token,
        token_out: Token,
        fee: int,
    ) -> ConcentratedPool:
        state = await self.source.read_concentrated_state(address)
        token0, token1 = sort_tokens(token_in, token_out)
        return ConcentratedPool(
            address=normalize_address(address),
            token0=token0,
            token1=token1,
            fee=fee,
            sqrt_price_x96=state.sqrt_price_x96,
            liquidity=state.liquidity,
            tick=state.tick,
        )

    async def _load_constant_product_pool(
        self,
        address: str,
        token_in: Token,
        token_out: Token,
    ) -> ConstantProductPool:
        state = await self.source.read_constant_product_state(address)
        if state.token0 == token_in.address:
            token0, token1 = token_in, token_out
        elif state.token0 == token_out.address:
            token0, token1 = token_out, token_in
        else:
            raise ExternalQueryError(
                "read_constant_product_state",
                f"pair {address} token0 {state.token0} is not part of the trade",
            )
        return ConstantProductPool(
            address=normalize_address(address),
            token0=token0,
            token1=token1,
            reserve0=state.reserve0,
            reserve1=state.reserve1,
        )

    # --- Result building ---

    def _build_quote(self, candidate: QuoteCandidate, slippage: Decimal) -> Quote:
        return Quote(
            amount_in=candidate.amount_in,
            output_amount=candidate.amount_out,
            minimum_received=minimum_received(candidate.amount_out, slippage),
            price_impact_percent=candidate.price_impact,
            fee_amount=candidate.fee_amount,
            chosen_fee_tier=candidate.fee_tier,
            chosen_pool_version=candidate.version,
            pool_address=candidate.pool.address,
            high_slippage_warning=is_high_slippage(slippage, self.config.high_slippage_percent),
        )

    def _wrap_quote(self, amount_in: int, slippage: Decimal) -> Quote:
        """Native <-> wrapped native converts 1:1 with no fee and no pool."""
        logger.debug("wrap_quote", amount_in=amount_in)
        return Quote(
            amount_in=amount_in,
            output_amount=amount_in,
            minimum_received=amount_in,
            price_impact_percent=Decimal(0),
            fee_amount=0,
            chosen_fee_tier=None,
            chosen_pool_version=PoolVersion.WRAP,
            pool_address=None,
            high_slippage_warning=is_high_slippage(slippage, self.config.high_slippage_percent),
        )


__all__ = ["SwapRouter"]
