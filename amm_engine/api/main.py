"""FastAPI application exposing read-only pool and route queries."""

import os

import uvicorn
from fastapi import FastAPI

from amm_engine import __version__
from amm_engine.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "127.0.0.1")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="AMM Engine",
    description="Pool pricing and best-route queries",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the query API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 127.0.0.1)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "amm_engine.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
