"""FastAPI application for the routing service.

Note: Rate limiting and response caching are not implemented here. They
belong to the infrastructure layer in front of the service.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dexroute import __version__
from dexroute.api.endpoints import get_service, router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEXROUTE_HOST", "0.0.0.0")
PORT = int(os.environ.get("DEXROUTE_PORT", "8000"))
DEBUG = os.environ.get("DEXROUTE_DEBUG", "false").lower() in ("true", "1", "yes")
# Background refresh of gas snapshots and venue metrics
BACKGROUND_REFRESH = os.environ.get("DEXROUTE_BACKGROUND_REFRESH", "true").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024


def configure_logging() -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ]
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    service = app.dependency_overrides.get(get_service, get_service)()
    if BACKGROUND_REFRESH:
        await service.start()
    try:
        yield
    finally:
        await service.stop()


app = FastAPI(
    title="DEX Route",
    description="Multi-venue trade routing and execution-cost estimation",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            size = int(content_length)
        except ValueError:
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length"})
        if size > MAX_REQUEST_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the routing API server.

    Configuration via environment variables:
    - DEXROUTE_HOST: Host to bind to (default: 0.0.0.0)
    - DEXROUTE_PORT: Port to bind to (default: 8000)
    - DEXROUTE_DEBUG: Enable debug/reload mode (default: false)
    - DEXROUTE_BACKGROUND_REFRESH: Poll gas and venue data (default: true)
    """
    configure_logging()
    uvicorn.run(
        "dexroute.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
