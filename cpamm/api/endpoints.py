"""API endpoints for the AMM."""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Annotated, TypeVar

import structlog
from fastapi import APIRouter, Depends, Header, Query

from cpamm.amm import AutomatedMarketMaker, get_default_amm
from cpamm.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    PriceResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapRequest,
    SwapResponse,
)
from cpamm.models.pool import PoolState
from cpamm.pools import pool_state

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")

# Identity of the caller, supplied by the fronting gateway
Caller = Annotated[str, Header(alias="X-Caller", min_length=1)]


def get_amm() -> AutomatedMarketMaker:
    """Dependency provider for the AMM instance.

    Override this in tests to inject an AMM with a funded ledger:
        app.dependency_overrides[get_amm] = lambda: amm

    Returns:
        The AMM instance to serve.
    """
    return get_default_amm()


async def _run(func: Callable[..., T], *args: object) -> T:
    """Run a blocking AMM operation off the event loop.

    Operations take per-pool locks and call the ledger, so they must not
    block the loop.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args))


@router.post("/liquidity/add", response_model_by_alias=True)
async def add_liquidity(
    request: AddLiquidityRequest,
    caller: Caller,
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> AddLiquidityResponse:
    """Deposit a pair of assets and mint shares."""
    logger.info(
        "received_add_liquidity",
        caller=caller,
        asset_a=request.asset_a,
        asset_b=request.asset_b,
    )
    result = await _run(
        amm.add_liquidity,
        (request.asset_a, request.asset_b),
        int(request.amount_a_desired),
        int(request.amount_b_desired),
        int(request.amount_a_min),
        int(request.amount_b_min),
        caller,
        request.recipient or caller,
        request.deadline,
    )
    return AddLiquidityResponse(
        amount_a=str(result.amount_a),
        amount_b=str(result.amount_b),
        shares=str(result.shares),
    )


@router.post("/liquidity/remove", response_model_by_alias=True)
async def remove_liquidity(
    request: RemoveLiquidityRequest,
    caller: Caller,
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> RemoveLiquidityResponse:
    """Burn the caller's shares for a proportional slice of the reserves."""
    logger.info(
        "received_remove_liquidity",
        caller=caller,
        asset_a=request.asset_a,
        asset_b=request.asset_b,
        shares=request.shares,
    )
    result = await _run(
        amm.remove_liquidity,
        (request.asset_a, request.asset_b),
        int(request.shares),
        int(request.amount_a_min),
        int(request.amount_b_min),
        caller,
        request.recipient or caller,
        request.deadline,
    )
    return RemoveLiquidityResponse(amount_a=str(result.amount_a), amount_b=str(result.amount_b))


@router.post("/swap", response_model_by_alias=True)
async def swap(
    request: SwapRequest,
    caller: Caller,
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> SwapResponse:
    """Exact-input swap along a direct two-asset path."""
    logger.info("received_swap", caller=caller, path=request.path, amount_in=request.amount_in)
    amount_out = await _run(
        amm.swap_exact_tokens_for_tokens,
        int(request.amount_in),
        int(request.amount_out_min),
        request.path,
        caller,
        request.recipient or caller,
        request.deadline,
    )
    return SwapResponse(amount_in=request.amount_in, amount_out=str(amount_out))


def _read_pool(amm: AutomatedMarketMaker, asset_a: str, asset_b: str) -> PoolState:
    key = amm.resolve_pair(asset_a, asset_b)
    with amm.registry.view(key) as pool:
        return pool_state(pool)


@router.get("/pools/{asset_a}/{asset_b}", response_model_by_alias=True)
async def get_pool(
    asset_a: str,
    asset_b: str,
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> PoolState:
    """Current reserves and shares of a pool, in the pool's storage order."""
    return await _run(_read_pool, amm, asset_a, asset_b)


@router.get("/price/{asset_a}/{asset_b}", response_model_by_alias=True)
async def spot_price(
    asset_a: str,
    asset_b: str,
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> PriceResponse:
    """Spot price of asset_a in units of asset_b."""
    price = await _run(amm.spot_price, asset_a, asset_b)
    return PriceResponse(
        asset_a=asset_a,
        asset_b=asset_b,
        price=str(price),
        scale=str(amm.config.price_scale),
    )


@router.get("/quote/{asset_in}/{asset_out}", response_model_by_alias=True)
async def quote(
    asset_in: str,
    asset_out: str,
    amount_in: Annotated[int, Query(alias="amountIn")],
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> QuoteResponse:
    """Output of selling amountIn of asset_in at current reserves."""
    result = await _run(amm.quote, asset_in, asset_out, amount_in)
    return QuoteResponse(
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=str(result.amount_in),
        amount_out=str(result.amount_out),
    )


@router.get("/quote-in/{asset_in}/{asset_out}", response_model_by_alias=True)
async def quote_in(
    asset_in: str,
    asset_out: str,
    amount_out: Annotated[int, Query(alias="amountOut")],
    amm: AutomatedMarketMaker = Depends(get_amm),
) -> QuoteResponse:
    """Input of asset_in needed to receive exactly amountOut of asset_out."""
    result = await _run(amm.quote_in, asset_in, asset_out, amount_out)
    return QuoteResponse(
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=str(result.amount_in),
        amount_out=str(result.amount_out),
    )
