"""FastAPI application serving the AMM.

Note: Authentication is intentionally not implemented at the application
level. The caller identity arrives in the X-Caller header, which the
fronting gateway is expected to set after authenticating the request.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpamm import __version__
from cpamm.api.endpoints import router
from cpamm.errors import (
    AmmError,
    DeadlineExpired,
    EmptyPool,
    InsufficientLiquidity,
    InsufficientLiquidityMinted,
    InsufficientShares,
    InvalidReserves,
    PoolNotFound,
    SlippageExceeded,
    TransferFailed,
    UnsupportedPath,
    ValidationError,
)
from cpamm.models.api import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPAMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("CPAMM_PORT", "8000"))
DEBUG = os.environ.get("CPAMM_DEBUG", "false").lower() in ("true", "1", "yes")

# HTTP status per error class; the first matching base class wins
ERROR_STATUS: list[tuple[type[AmmError], int]] = [
    (ValidationError, 400),
    (UnsupportedPath, 400),
    (PoolNotFound, 404),
    (DeadlineExpired, 408),
    (SlippageExceeded, 409),
    (InsufficientShares, 409),
    (InsufficientLiquidity, 409),
    (InsufficientLiquidityMinted, 409),
    (EmptyPool, 409),
    (InvalidReserves, 409),
    (TransferFailed, 502),
]

app = FastAPI(
    title="cpamm",
    description="Constant-product automated market maker",
    version=__version__,
)


def status_for(error: AmmError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


@app.exception_handler(AmmError)
async def handle_amm_error(request: Request, exc: AmmError) -> JSONResponse:
    """Translate AMM errors into their stable error kind."""
    status = status_for(exc)
    if status >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.kind, detail=str(exc))
    else:
        logger.info("request_rejected", path=request.url.path, error=exc.kind, detail=str(exc))
    body = ErrorResponse(error=exc.kind, detail=str(exc))
    return JSONResponse(status_code=status, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the AMM API server.

    Configuration via environment variables:
    - CPAMM_HOST: Host to bind to (default: 0.0.0.0)
    - CPAMM_PORT: Port to bind to (default: 8000)
    - CPAMM_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "cpamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
