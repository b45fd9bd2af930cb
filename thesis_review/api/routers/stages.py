"""
Stage API endpoints, invoked by the message broker.

Routes: POST /jobs/extract-text, POST /jobs/pre-analyze,
POST /jobs/deep-analyze, POST /jobs/cross-validate, POST /jobs/generate-report

Dependencies: fastapi, thesis_review.application.stages
System role: One HTTP entry point per pipeline stage
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from thesis_review.api.deps import (
    get_cross_validate_stage,
    get_deep_analyze_stage,
    get_extract_stage,
    get_generate_report_stage,
    get_pre_analyze_stage,
    get_signature_verifier,
)
from thesis_review.api.routers._delivery import deliver
from thesis_review.application.stages.base import StageHandler
from thesis_review.boundary.queue.signature import SignatureVerifier

router = APIRouter(prefix="/jobs", tags=["stages"])


@router.post("/extract-text")
async def extract_text(
    request: Request,
    handler: StageHandler = Depends(get_extract_stage),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """
    Fetch the uploaded file and extract its text and sections.

    Example Response:
        {"success": true, "job_id": "...", "word_count": 18234,
         "page_count": 42, "section_count": 6, "next_stage": "pre_analyze"}
    """
    return await deliver(request, handler, verifier)


@router.post("/pre-analyze")
async def pre_analyze(
    request: Request,
    handler: StageHandler = Depends(get_pre_analyze_stage),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """Assess structure and extract references."""
    return await deliver(request, handler, verifier)


@router.post("/deep-analyze")
async def deep_analyze(
    request: Request,
    handler: StageHandler = Depends(get_deep_analyze_stage),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """Run the scoring agents in parallel."""
    return await deliver(request, handler, verifier)


@router.post("/cross-validate")
async def cross_validate(
    request: Request,
    handler: StageHandler = Depends(get_cross_validate_stage),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """Calibrate the agent scores with an independent model."""
    return await deliver(request, handler, verifier)


@router.post("/generate-report")
async def generate_report(
    request: Request,
    handler: StageHandler = Depends(get_generate_report_stage),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """Aggregate the stage results into the final report and complete the job."""
    return await deliver(request, handler, verifier)
