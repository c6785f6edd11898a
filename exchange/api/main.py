"""FastAPI application for the exchange.

Note: Authentication of the sender field is not implemented at the
application level. It belongs to the gateway in front of this service.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import os

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from exchange.api.endpoints import get_exchange, router
from exchange.errors import (
    EmptyPool,
    ExchangeError,
    ExternalTransferFailure,
    PoolHalted,
    ReentrantCall,
)
from exchange.exchange import Exchange
from exchange.log_config import configure_logging
from exchange.models import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("EXCHANGE_HOST", "0.0.0.0")
PORT = int(os.environ.get("EXCHANGE_PORT", "8000"))
DEBUG = os.environ.get("EXCHANGE_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (64 KB); requests are small flat objects
MAX_REQUEST_SIZE = 64 * 1024

# HTTP status per error class; anything unlisted is a 400
ERROR_STATUS: dict[type[ExchangeError], int] = {
    EmptyPool: 409,
    ReentrantCall: 409,
    ExternalTransferFailure: 502,
    PoolHalted: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging in the worker that serves requests.

    Under reload mode uvicorn imports the app in a fresh process, so this
    cannot happen in run().
    """
    configure_logging(logging.DEBUG if DEBUG else logging.INFO)
    yield


app = FastAPI(
    title="Constant-Product Exchange",
    description="Two-asset constant-product liquidity pool",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(ExchangeError)
async def exchange_error_handler(request: Request, exc: ExchangeError) -> JSONResponse:
    """Map exchange errors to JSON error responses."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        400,
    )
    logger.info(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        status_code=status_code,
    )
    body = ErrorResponse(error=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health(exchange: Exchange = Depends(get_exchange)) -> dict[str, object]:
    """Health check endpoint. Reports whether the pool is halted."""
    return {"status": "halted" if exchange.halted else "ok", "halted": exchange.halted}


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - EXCHANGE_HOST: Host to bind to (default: 0.0.0.0)
    - EXCHANGE_PORT: Port to bind to (default: 8000)
    - EXCHANGE_DEBUG: Enable debug logging and reload mode (default: false)
    - EXCHANGE_FEE_BPS / EXCHANGE_CUSTODY: see ExchangeConfig.from_env
    """
    uvicorn.run(
        "exchange.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
