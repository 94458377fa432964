import logging

from fastapi import FastAPI

from repopool.api.pool import router as pool_router
from repopool.core.dependencies import get_repository_pool, reset
from repopool.domain.errors import NotSupportedError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Repository pool",
    version="0.1.0",
    description="Loads configured package repository indexes and serves lookups across them.",
)


@app.on_event("startup")
def startup_event() -> None:
    """
    Load the configured repositories so the first request does not pay for it.
    A pool with nothing usable is not fatal; requests report 503 until fixed.
    """
    pool = get_repository_pool()
    try:
        pool.ensure_initialized()
    except NotSupportedError as e:
        logger.warning(f"Repository pool not available: {e}")


@app.on_event("shutdown")
def shutdown_event() -> None:
    reset()


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


app.include_router(pool_router, tags=["pool"])


if __name__ == "__main__":
    """
    Allow running `python -m repopool.main` to start the Uvicorn development server.
    """
    import uvicorn

    uvicorn.run(
        "repopool.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
