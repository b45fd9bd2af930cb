"""API routers."""

from thesis_review.api.routers.callbacks import router as callbacks_router
from thesis_review.api.routers.health import router as health_router
from thesis_review.api.routers.jobs import router as jobs_router
from thesis_review.api.routers.stages import router as stages_router

__all__ = ["callbacks_router", "health_router", "jobs_router", "stages_router"]
