"""
FastAPI application entry point for the Response Metrics API.

Configures logging and CORS, manages the database pool lifecycle and mounts
the dashboard and export routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from response_metrics import __version__
from response_metrics.api import api_router
from response_metrics.core.config import get_settings
from response_metrics.core.database import close_db, init_db


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the database pool on startup and close it on shutdown.

    A pool failure is logged but does not stop startup; endpoints then answer
    with 502 until the database is reachable.
    """
    logger.info("Response Metrics API starting")
    if settings.database_url:
        try:
            await init_db()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
    else:
        logger.warning("DATABASE_URL not set; database reads will fail")

    yield

    logger.info("Response Metrics API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


app = FastAPI(
    title="Response Metrics API",
    version=__version__,
    description=(
        "Read-only email first-response analytics: team KPIs, per-employee "
        "rollups, daily trends, breach heatmap and CSV exports."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring and load balancer health checks."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """API name, version and documentation links."""
    return {
        "name": "Response Metrics API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "response_metrics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
