"""
FastAPI middleware for observability.

Request logging annotated with broker delivery metadata, and correlation ID
propagation. Broker deliveries carry ``Upstash-Message-Id`` and
``Upstash-Retried``; both are attached to the access log so a retried stage
can be told apart from its first attempt.

Dependencies: fastapi, starlette, thesis_review.observability
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from thesis_review.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
MESSAGE_ID_HEADER = "Upstash-Message-Id"
RETRIED_HEADER = "Upstash-Retried"


def delivery_fields(request: Request) -> dict:
    """Broker delivery metadata of a request (empty for direct client calls)."""
    fields = {}
    message_id = request.headers.get(MESSAGE_ID_HEADER)
    if message_id:
        fields["message_id"] = message_id
        retried = request.headers.get(RETRIED_HEADER, "0")
        fields["retried"] = int(retried) if retried.isdigit() else retried
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with timing and broker delivery metadata."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        context = {
            "method": request.method,
            "path": request.url.path,
            **delivery_fields(request),
        }

        try:
            response: Response = await call_next(request)
        except Exception as e:
            context["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.exception(
                f"{request.method} {request.url.path} - Unhandled exception",
                extra={**context, "error_type": type(e).__name__},
            )
            raise

        context["status_code"] = response.status_code
        context["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        # 489 is the broker's non-retryable failure code, logged like any 4xx.
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} - {response.status_code}", extra=context)
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Correlation ID per request, echoed back in the response headers."""

    async def dispatch(self, request: Request, call_next):
        """
        Inject correlation ID into request context.

        Stage endpoints replace it with the job ID once the body is decoded.

        Returns:
            Response: Response with correlation ID header
        """
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
