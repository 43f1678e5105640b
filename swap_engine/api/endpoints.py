"""API endpoints for the swap quote engine."""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator

from swap_engine.config import EngineConfig
from swap_engine.errors import InvalidInput, NoLiquidityError
from swap_engine.math.fixed_point import format_units, parse_units
from swap_engine.models.quote import PoolVersion, Quote
from swap_engine.models.token import Token
from swap_engine.models.types import Address, Uint256
from swap_engine.routing.router import SwapRouter
from swap_engine.sources.memory import InMemoryPoolStateSource
from swap_engine.sources.web3_source import Web3PoolStateSource

logger = structlog.get_logger()

router = APIRouter()

_default_router: SwapRouter | None = None


class QuoteRequest(BaseModel):
    """Exact-input quote request.

    The input amount is given either in raw units (amountIn) or in whole
    tokens (amountInUnits, e.g. "1.5"), never both.
    """

    token_in: Token = Field(alias="tokenIn")
    token_out: Token = Field(alias="tokenOut")
    amount_in: Uint256 | None = Field(
        default=None, alias="amountIn", description="Input amount in raw units"
    )
    amount_in_units: str | None = Field(
        default=None, alias="amountInUnits", description="Input amount in whole tokens"
    )
    slippage: str | int | float = Field(default="0.5", description="Tolerance in percent")
    version: PoolVersion | None = None
    fee: int | None = Field(default=None, description="Pin a concentrated-liquidity fee tier")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_single_amount(self) -> "QuoteRequest":
        if (self.amount_in is None) == (self.amount_in_units is None):
            raise ValueError("Exactly one of amountIn and amountInUnits is required")
        return self

    def raw_amount_in(self) -> int:
        """Input amount in raw units of token_in.

        Raises:
            InvalidInput: If amountInUnits does not parse at token_in's decimals
        """
        if self.amount_in is not None:
            return int(self.amount_in)
        return parse_units(self.amount_in_units, self.token_in.decimals)


class QuoteResponse(BaseModel):
    """Quote result. Amounts are raw-unit decimal strings, *Units fields whole tokens."""

    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    minimum_received: Uint256 = Field(alias="minimumReceived")
    amount_out_units: str = Field(alias="amountOutUnits", description="amountOut in whole tokens")
    minimum_received_units: str = Field(alias="minimumReceivedUnits")
    price_impact: str = Field(alias="priceImpact", description="Percent, two decimals")
    fee_amount: Uint256 = Field(alias="feeAmount")
    fee_tier: int | None = Field(default=None, alias="feeTier")
    version: PoolVersion
    pool: Address | None = None
    high_slippage_warning: bool = Field(default=False, alias="highSlippageWarning")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: Quote, token_out: Token) -> "QuoteResponse":
        return cls(
            amount_in=str(quote.amount_in),
            amount_out=str(quote.output_amount),
            minimum_received=str(quote.minimum_received),
            amount_out_units=format_units(quote.output_amount, token_out.decimals),
            minimum_received_units=format_units(quote.minimum_received, token_out.decimals),
            price_impact=quote.price_impact_display,
            fee_amount=str(quote.fee_amount),
            fee_tier=quote.chosen_fee_tier,
            version=quote.chosen_pool_version,
            pool=quote.pool_address,
            high_slippage_warning=quote.high_slippage_warning,
        )


def _create_default_router() -> SwapRouter:
    """Create the default router from SWAP_ENGINE_* environment variables.

    Pools are read over RPC when SWAP_ENGINE_RPC_URL is set. Without it the
    router has an empty in-memory source and every pair reports no liquidity.
    """
    config = EngineConfig.from_env()
    if config.rpc_url:
        logger.info("rpc_source_enabled", rpc_url=config.rpc_url[:50] + "...")
        return SwapRouter(Web3PoolStateSource(config.rpc_url), config)

    logger.info("rpc_source_disabled", reason="SWAP_ENGINE_RPC_URL not set")
    return SwapRouter(InMemoryPoolStateSource(), config)


def get_router() -> SwapRouter:
    """Dependency provider for the router instance.

    Override this in tests to inject a router over an in-memory source:
        app.dependency_overrides[get_router] = lambda: router

    Returns:
        The router to use for quoting. One instance is shared so that its
        route cache survives between requests.
    """
    global _default_router
    if _default_router is None:
        _default_router = _create_default_router()
    return _default_router


@router.post("/quote", response_model_by_alias=True)
async def quote(
    request: QuoteRequest,
    swap_router: SwapRouter = Depends(get_router),
) -> QuoteResponse:
    """Quote an exact-input swap.

    Error Handling:
        - Invalid request schema: Returns 422 Validation Error (Pydantic)
        - Rejected request (bad amount, tokens, slippage, fee tier): Returns 400
        - No pool can serve the trade: Returns 404
    """
    logger.info(
        "received_quote_request",
        token_in=request.token_in.address,
        token_out=request.token_out.address,
        amount_in=request.amount_in or request.amount_in_units,
        version=request.version.value if request.version else None,
        fee=request.fee,
    )

    try:
        result = await swap_router.get_swap_quote(
            request.token_in,
            request.token_out,
            request.raw_amount_in(),
            request.slippage,
            version_hint=request.version,
            pinned_fee=request.fee,
        )
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NoLiquidityError as e:
        logger.info("no_liquidity", token_in=e.token_in, token_out=e.token_out)
        raise HTTPException(status_code=404, detail=str(e)) from e

    return QuoteResponse.from_quote(result, request.token_out)


__all__ = ["QuoteRequest", "QuoteResponse", "get_router", "router"]
