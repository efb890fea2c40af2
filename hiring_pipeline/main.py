"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hiring_pipeline.core.config import settings
from hiring_pipeline.db.session import engine
from hiring_pipeline.errors import AppError, app_error_handler
from hiring_pipeline.routers import applications, health, opportunities, rewards

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    Configures logging on startup; the engine pool is released on shutdown.
    """
    configure_logging()
    logger.info("Starting %s...", settings.APP_NAME)
    if not settings.GEMINI_API_KEY and not settings.VERIFICATION_MOCK_PROVIDER:
        logger.warning("GEMINI_API_KEY is not set; evidence verification will fail until it is configured")

    yield

    await engine.dispose()
    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Hiring pipeline engine: configurable stages, evidence verification and rewards",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(opportunities.router)
app.include_router(applications.router)
app.include_router(rewards.router)
