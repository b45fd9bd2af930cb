"""
Logging helpers for job-scoped structured logs.

Model output, broker error strings and stage summaries can be arbitrarily
large; these helpers shorten them before they reach ``extra=``.

Dependencies: logging (stdlib)
System role: Structured log context for pipeline invocations
"""

import logging
from typing import Any

MAX_LOG_VALUE_CHARS = 300


def safe_log_value(value: Any, max_length: int = MAX_LOG_VALUE_CHARS) -> Any:
    """
    Make a value safe to attach to a log record.

    Scalars pass through, collections collapse to their size and long
    strings are truncated.

    Args:
        value: Value to convert
        max_length: Maximum string length kept

    Returns:
        Any: A scalar suitable for a structured log field
    """
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (list, tuple, set)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    text = value if isinstance(value, str) else str(value)
    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars)"
    return text


def job_context(job_id: str | None, stage: str | None = None, **context: Any) -> dict[str, Any]:
    """
    Build the ``extra`` dict for a job-scoped log line.

    Args:
        job_id: Job the line belongs to (None when the payload was unreadable)
        stage: Pipeline stage value, if any
        **context: Additional fields

    Returns:
        dict: Safe structured context
    """
    extra: dict[str, Any] = {"job_id": job_id}
    if stage is not None:
        extra["stage"] = stage
    extra.update({key: safe_log_value(val) for key, val in context.items()})
    return extra


def log_job_exception(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    job_id: str | None,
    stage: str | None = None,
    **context: Any,
) -> None:
    """
    Log an unexpected exception with the job's context and traceback.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        job_id: Job the failure belongs to
        stage: Pipeline stage value, if any
        **context: Additional fields
    """
    extra = job_context(job_id, stage, **context)
    extra.update({"error_type": type(exc).__name__, "error_msg": safe_log_value(str(exc))})
    logger.exception(message, extra=extra)
