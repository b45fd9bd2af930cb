"""
Health check API endpoints.

Routes: GET /health, GET /health/ready

Liveness never touches a backend. Readiness pings the status store, because
no stage can hand its result to the next one without it.

Dependencies: fastapi, thesis_review.api.deps
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from thesis_review.api.deps.dependencies import get_status_store
from thesis_review.boundary.cache.status_store import StatusStore
from thesis_review.core.pipeline.stages import stage_sequence
from thesis_review.models.job import Tier


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


class ReadinessResponse(BaseModel):
    """Readiness of the pipeline and the stage sequence each tier runs."""

    status: str
    status_store: bool
    tiers: dict[str, list[str]]


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(status_store: StatusStore = Depends(get_status_store)):
    """Readiness check; 503 while the status store is unreachable."""
    reachable = await status_store.ping()
    body = ReadinessResponse(
        status="ready" if reachable else "unavailable",
        status_store=reachable,
        tiers={tier.value: [stage.value for stage in stage_sequence(tier)] for tier in Tier},
    )
    return JSONResponse(status_code=200 if reachable else 503, content=body.model_dump())
