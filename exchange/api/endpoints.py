"""API endpoints for the exchange."""

import structlog
from fastapi import APIRouter, Depends

from exchange.exchange import CallContext, Exchange, get_default_exchange
from exchange.models import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    PoolState,
    QuoteRequest,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    ReservesResponse,
    SwapBaseForTradedRequest,
    SwapResponse,
    SwapTradedForBaseRequest,
)

logger = structlog.get_logger()

router = APIRouter()


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a prepared exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange
    """
    return get_default_exchange()


@router.get("/pool")
async def pool_state(exchange: Exchange = Depends(get_exchange)) -> PoolState:
    """Current pool record."""
    return PoolState.from_snapshot(exchange.snapshot())


@router.get("/pool/reserves")
async def reserves(exchange: Exchange = Depends(get_exchange)) -> ReservesResponse:
    """Custody balances as reported by the ledgers."""
    return ReservesResponse(
        base=str(exchange.base_reserve()),
        traded=str(exchange.traded_reserve()),
    )


@router.post("/liquidity/add")
async def add_liquidity(
    request: AddLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AddLiquidityResponse:
    """Deposit base and traded asset, minting shares to the sender.

    Mutating endpoints are async and never await, so the event loop runs
    them one at a time in arrival order.
    """
    ctx = CallContext(sender=request.sender, value=int(request.base_amount))
    shares_minted = exchange.add_liquidity(
        ctx,
        traded_amount=int(request.traded_amount),
        min_shares=int(request.min_shares),
    )
    return AddLiquidityResponse(
        shares_minted=str(shares_minted),
        pool=PoolState.from_snapshot(exchange.snapshot()),
    )


@router.post("/liquidity/remove")
async def remove_liquidity(
    request: RemoveLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> RemoveLiquidityResponse:
    """Burn shares and pay out both assets."""
    base_out, traded_out = exchange.remove_liquidity(
        CallContext(sender=request.sender),
        shares=int(request.shares),
        min_base=int(request.min_base),
        min_traded=int(request.min_traded),
    )
    return RemoveLiquidityResponse(
        base_out=str(base_out),
        traded_out=str(traded_out),
        pool=PoolState.from_snapshot(exchange.snapshot()),
    )


@router.post("/swap/base-for-traded")
async def swap_base_for_traded(
    request: SwapBaseForTradedRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    ctx = CallContext(sender=request.sender, value=int(request.base_amount))
    traded_out = exchange.swap_base_for_traded(ctx, min_traded_out=int(request.min_traded_out))
    return SwapResponse(amount_out=str(traded_out), pool=PoolState.from_snapshot(exchange.snapshot()))


@router.post("/swap/traded-for-base")
async def swap_traded_for_base(
    request: SwapTradedForBaseRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    base_out = exchange.swap_traded_for_base(
        CallContext(sender=request.sender),
        traded_amount_in=int(request.traded_amount),
        min_base_out=int(request.min_base_out),
    )
    return SwapResponse(amount_out=str(base_out), pool=PoolState.from_snapshot(exchange.snapshot()))


@router.post("/quote")
async def quote(request: QuoteRequest, exchange: Exchange = Depends(get_exchange)) -> QuoteResponse:
    """Price a swap against explicit reserves using the exchange's fee rate."""
    output = exchange.compute_output(
        int(request.input_amount),
        int(request.input_reserve),
        int(request.output_reserve),
    )
    return QuoteResponse(output_amount=str(output))
