"""
Broker callback endpoints.

Routes: POST /jobs/callback, POST /jobs/failure

Dependencies: fastapi, thesis_review.application.services
System role: Delivery reports from the message broker
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from thesis_review.api.deps import get_analysis_service, get_signature_verifier
from thesis_review.api.routers._delivery import error_response, read_signed_body
from thesis_review.application.services.analysis_service import AnalysisService
from thesis_review.boundary.queue.signature import SignatureVerifier
from thesis_review.core.exceptions import (
    JobPayloadError,
    QueueUnavailableError,
    SignatureVerificationError,
    StoreError,
)
from thesis_review.models.broker import BrokerCallback
from thesis_review.observability.log_utils import job_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["callbacks"])


def _parse_callback(body: bytes) -> BrokerCallback:
    try:
        return BrokerCallback.model_validate(json.loads(body))
    except (ValueError, ValidationError) as e:
        raise JobPayloadError("Invalid callback payload") from e


@router.post("/callback")
async def delivery_callback(
    request: Request,
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> JSONResponse:
    """Log a successful broker delivery."""
    try:
        callback = _parse_callback(await read_signed_body(request, verifier))
    except SignatureVerificationError as e:
        return error_response(401, e.message)
    except JobPayloadError as e:
        return error_response(400, e.message, retryable=False)

    payload = callback.original_payload() or {}
    logger.info(
        "delivery_callback - Message delivered",
        extra=job_context(
            payload.get("job_id"),
            message_id=callback.message_id,
            status_code=callback.status,
            url=callback.url,
        ),
    )
    return JSONResponse(status_code=200, content={"received": True})


@router.post("/failure")
async def failure_callback(
    request: Request,
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    service: AnalysisService = Depends(get_analysis_service),
) -> JSONResponse:
    """
    Fail and refund a job whose message exhausted its retries.

    Safe to receive more than once: the refund is claimed at most once.
    """
    try:
        callback = _parse_callback(await read_signed_body(request, verifier))
        await service.handle_broker_failure(callback)
    except SignatureVerificationError as e:
        return error_response(401, e.message)
    except JobPayloadError as e:
        logger.warning(f"failure_callback - {e.message}")
        return error_response(400, e.message, retryable=False)
    except (StoreError, QueueUnavailableError) as e:
        logger.error(f"failure_callback - Transient failure: {e.message}")
        return error_response(503, e.message)

    return JSONResponse(status_code=200, content={"received": True})
