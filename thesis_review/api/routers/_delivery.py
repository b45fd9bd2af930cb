"""
Shared handling of signed broker deliveries.

Reads the raw body, verifies the broker signature, decodes the Job and maps
pipeline exceptions to the status codes the broker's retry policy expects:
5xx is retried, 489 with ``Upstash-NonRetryable-Error`` is not.

Dependencies: fastapi, thesis_review.application, thesis_review.boundary.queue
System role: Inbound delivery guard for stage and callback endpoints
"""

import json
import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from thesis_review.application.stages.base import StageHandler
from thesis_review.boundary.queue.signature import SIGNATURE_HEADER, SignatureVerifier
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    JobPayloadError,
    PipelineFatalError,
    QueueUnavailableError,
    SignatureVerificationError,
    StoreError,
)
from thesis_review.models.job import Job
from thesis_review.observability.correlation import clear_correlation_id, set_correlation_id
from thesis_review.observability.log_utils import job_context, log_job_exception

logger = logging.getLogger(__name__)

NON_RETRYABLE_HEADER = "Upstash-NonRetryable-Error"
NON_RETRYABLE_STATUS = 489


def error_response(status_code: int, message: str, retryable: bool = True) -> JSONResponse:
    """Build an ``{error}`` response, flagged non-retryable for the broker if asked."""
    headers = None if retryable else {NON_RETRYABLE_HEADER: "true"}
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def read_signed_body(request: Request, verifier: SignatureVerifier) -> bytes:
    """
    Read the raw body and check its broker signature.

    Raises:
        SignatureVerificationError: Signature missing or invalid
    """
    body = await request.body()
    if not verifier.verify(request.headers.get(SIGNATURE_HEADER), body):
        raise SignatureVerificationError("Invalid signature")
    return body


def parse_job(body: bytes) -> Job:
    """
    Decode a Job from a request body.

    Raises:
        JobPayloadError: Body is not JSON or not a valid Job
    """
    try:
        payload: Any = json.loads(body)
    except ValueError as e:
        raise JobPayloadError("Request body is not valid JSON") from e
    if not isinstance(payload, dict):
        raise JobPayloadError("Request body must be a JSON object")
    try:
        return Job.model_validate(payload)
    except ValidationError as e:
        raise JobPayloadError(f"Invalid job payload: {e.error_count()} validation error(s)") from e


async def deliver(request: Request, handler: StageHandler, verifier: SignatureVerifier) -> JSONResponse:
    """
    Run one broker delivery of a stage.

    Args:
        request: Inbound request carrying the signed Job body
        handler: Stage to run
        verifier: Broker signature verifier

    Returns:
        JSONResponse: ``{success, job_id, ...}`` or ``{error}``
    """
    stage = handler.stage.value
    try:
        body = await read_signed_body(request, verifier)
        job = parse_job(body)
    except SignatureVerificationError as e:
        logger.warning(f"deliver - Rejected delivery: {e.message}", extra={"stage": stage})
        return error_response(401, e.message)
    except JobPayloadError as e:
        logger.warning(f"deliver - Bad payload: {e.message}", extra={"stage": stage})
        return error_response(400, e.message, retryable=False)

    set_correlation_id(job.job_id)
    try:
        outcome = await handler.handle(job)
        return JSONResponse(status_code=200, content=outcome.to_response())
    except PipelineFatalError as e:
        return error_response(NON_RETRYABLE_STATUS, e.message, retryable=False)
    except DocumentNotFoundError as e:
        logger.error(f"deliver - {e.message}", extra=job_context(job.job_id, stage))
        return error_response(404, e.message, retryable=False)
    except (StoreError, QueueUnavailableError) as e:
        logger.error(
            f"deliver - Transient failure, broker will retry: {e.message}",
            extra=job_context(job.job_id, stage, error_type=type(e).__name__),
        )
        return error_response(503, e.message)
    except Exception as e:
        log_job_exception(logger, "deliver - Unexpected stage failure", e, job.job_id, stage)
        return error_response(500, "Internal error")
    finally:
        clear_correlation_id()
