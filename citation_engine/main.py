"""
FastAPI application entry point for the Citation Engine API.

Configures logging, CORS and the deferred scoring scheduler lifecycle, and
registers the source analytics router.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from citation_engine import __version__
from citation_engine.api import api_router
from citation_engine.core.runtime import close_scheduler, init_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Create the deferred scoring scheduler

    On shutdown:
        - Cancel in-flight scoring and release the scheduler
    """
    # Startup
    logger.info("Citation Engine API starting")
    await init_scheduler()

    yield

    # Shutdown
    logger.info("Citation Engine API shutting down")
    try:
        await close_scheduler()
    except Exception as e:
        logger.error(f"Error closing scoring scheduler: {e}", exc_info=True)


# Create FastAPI application
app = FastAPI(
    title="Citation Engine API",
    version=__version__,
    description=(
        "Scores, classifies and summarizes the citation sources that AI answer "
        "engines use when they mention a brand."
    ),
    lifespan=lifespan,
)

# The dashboard dev server calls the API directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {
        "name": "Citation Engine API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "citation_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
