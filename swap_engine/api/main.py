"""FastAPI application for the swap quote engine."""

import os

import uvicorn
from fastapi import FastAPI

from swap_engine import __version__
from swap_engine.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("SWAP_ENGINE_HOST", "0.0.0.0")
PORT = int(os.environ.get("SWAP_ENGINE_PORT", "8000"))
DEBUG = os.environ.get("SWAP_ENGINE_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Swap Quote Engine",
    description="Exact-input swap quotes over constant-product and concentrated-liquidity pools",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the quote API server.

    Configuration via environment variables:
    - SWAP_ENGINE_HOST: Host to bind to (default: 0.0.0.0)
    - SWAP_ENGINE_PORT: Port to bind to (default: 8000)
    - SWAP_ENGINE_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "swap_engine.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
