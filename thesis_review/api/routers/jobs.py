"""
Job API endpoints.

Routes: POST /analyses/start, GET /jobs/status

Dependencies: fastapi, thesis_review.application.services
System role: Analysis start and status polling HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from thesis_review.api.deps import get_analysis_service
from thesis_review.application.services.analysis_service import AnalysisService
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    InsufficientCreditsError,
    QueueUnavailableError,
    StoreError,
)

router = APIRouter(tags=["jobs"])


class StartAnalysisRequest(BaseModel):
    """Request body for starting an analysis of an uploaded file."""

    owner_id: str = Field(..., min_length=1)
    file_ref: str = Field(..., min_length=1, description="Storage reference of the upload")
    file_name: str = Field(..., min_length=1)
    char_count: int = Field(..., ge=0, description="Extracted-size estimate in characters")


class StartAnalysisResponse(BaseModel):
    """Response of a started analysis."""

    success: bool = True
    job_id: str
    tier: str
    credits_used: int
    new_balance: int
    estimated_pages: int
    total_steps: int


@router.post("/analyses/start", response_model=StartAnalysisResponse, status_code=202)
async def start_analysis(
    request: StartAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> StartAnalysisResponse:
    """
    Price, pay for and enqueue a thesis analysis.

    Raises:
        HTTPException(402): Balance does not cover the tier
        HTTPException(503): Record store or broker unavailable
    """
    try:
        started = await service.start_analysis(
            owner_id=request.owner_id,
            file_ref=request.file_ref,
            file_name=request.file_name,
            char_count=request.char_count,
        )
    except InsufficientCreditsError as e:
        raise HTTPException(
            status_code=402,
            detail={"error": e.message, "required": e.required, "balance": e.balance},
        )
    except (StoreError, QueueUnavailableError) as e:
        raise HTTPException(status_code=503, detail={"error": e.message})

    return StartAnalysisResponse(
        job_id=started.job_id,
        tier=started.tier,
        credits_used=started.credits_used,
        new_balance=started.new_balance,
        estimated_pages=started.estimated_pages,
        total_steps=started.total_steps,
    )


@router.get("/jobs/status")
async def get_job_status(
    job_id: str = Query(..., min_length=1),
    service: AnalysisService = Depends(get_analysis_service),
) -> dict:
    """
    Get job status and progress for frontend polling.

    Example Response:
        {
            "job_id": "550e8400-e29b-41d4-a716-446655440000",
            "status": "processing",
            "processing": {"step": 3, "totalSteps": 5, "stepName": "Deep Analysis",
                           "progress": 55, "status": "running",
                           "estimatedSecondsRemaining": 210},
            "is_completed": false,
            "is_failed": false,
            "overall_score": null,
            "analyzed_at": null
        }

    Raises:
        HTTPException(404): Job not found
    """
    try:
        return await service.get_job_status(job_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail={"error": e.message})
    except StoreError as e:
        raise HTTPException(status_code=503, detail={"error": e.message})
