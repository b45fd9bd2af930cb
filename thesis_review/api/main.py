"""
FastAPI application with assembled routers.

Initializes the FastAPI app with the stage, callback, job and health routers
and configures the uvicorn server.

Dependencies: fastapi, thesis_review.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from thesis_review.api.deps.dependencies import get_service_cache
from thesis_review.api.routers import callbacks_router, health_router, jobs_router, stages_router
from thesis_review.configs import get_settings
from thesis_review.observability.logger import configure_logging
from thesis_review.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger("uvicorn")

    # Startup
    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    if not cache.settings.queue.signing_enabled:
        logger.warning("No signing key configured; broker signatures are not verified")
    _ = cache.status_store
    _ = cache.queue
    _ = cache.verifier
    _ = cache.analysis_service
    logger.info("Service cache pre-warmed")

    yield

    # Shutdown
    await cache.close()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Thesis Review API",
        description="Multi-agent thesis evaluation pipeline driven by a message broker",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Stage paths must match the URLs the queue publishes to
    prefix = settings.queue.api_prefix
    app.include_router(health_router, prefix=prefix)
    app.include_router(stages_router, prefix=prefix)
    app.include_router(callbacks_router, prefix=prefix)
    app.include_router(jobs_router, prefix=prefix)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "thesis_review.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
