"""
Exception hierarchy for the thesis review pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Fatal business failures (``PipelineFatalError`` subclasses) fail the job and
refund credits. Infrastructure failures (store, queue) propagate so the
broker retries the invocation. Model-call failures are absorbed by callers.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ThesisReviewException(Exception):
    """Base exception for all thesis review errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class QueueUnavailableError(ThesisReviewException):
    """Raised when the broker cannot accept a message."""

    def __init__(
        self,
        message: str,
        destination: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize queue error.

        Args:
            message: Error message
            destination: URL the message was meant for
            details: Additional context
        """
        details = details or {}
        if destination:
            details["destination"] = destination
        super().__init__(message, details)


class SignatureVerificationError(ThesisReviewException):
    """Raised when an inbound request carries an invalid signature."""

    pass


class JobPayloadError(ThesisReviewException):
    """Raised when an inbound body cannot be decoded into a Job."""

    pass


class StoreError(ThesisReviewException):
    """Raised when the status/result store cannot be read or written."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store error.

        Args:
            message: Error message
            operation: Store operation that failed (get, set, cleanup)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class PipelineFatalError(ThesisReviewException):
    """Base exception for failures that end a job and refund its credits."""

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize fatal pipeline error.

        Args:
            message: Error message (shown to the user)
            job_id: ID of the failed job
            details: Additional context
        """
        details = details or {}
        if job_id:
            details["job_id"] = job_id
        super().__init__(message, details)


class MissingStepResultError(PipelineFatalError):
    """Raised when a required upstream step result is absent."""

    def __init__(self, job_id: str, step: int, details: dict[str, Any] | None = None) -> None:
        """
        Initialize missing step result error.

        Args:
            job_id: ID of the job
            step: Step number whose result is missing
            details: Additional context
        """
        details = details or {}
        details["step"] = step
        super().__init__(f"Result of step {step} not found", job_id, details)


class InsufficientContentError(PipelineFatalError):
    """Raised when the extracted text is too short to evaluate."""

    def __init__(
        self,
        job_id: str,
        char_count: int,
        minimum: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize insufficient content error.

        Args:
            job_id: ID of the job
            char_count: Number of characters extracted
            minimum: Minimum required characters
        """
        details = details or {}
        details.update({"char_count": char_count, "minimum": minimum})
        super().__init__(
            "Could not extract text from the document or the content is too short",
            job_id,
            details,
        )


class UnsupportedFormatError(PipelineFatalError):
    """Raised when the source file type has no text extractor."""

    def __init__(self, job_id: str, file_type: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["file_type"] = file_type
        super().__init__(f"Unsupported file format: {file_type}", job_id, details)


class LLMProviderError(ThesisReviewException):
    """Raised when a single model call fails (absorbed by callers)."""

    def __init__(
        self,
        message: str,
        model_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if model_id:
            details["model_id"] = model_id
        super().__init__(message, details)


class InsufficientCreditsError(ThesisReviewException):
    """Raised when the ledger refuses a debit at job start."""

    def __init__(
        self,
        owner_id: str,
        required: int,
        balance: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update({"owner_id": owner_id, "required": required, "balance": balance})
        super().__init__("Insufficient credits", details)
        self.required = required
        self.balance = balance


class DocumentNotFoundError(ThesisReviewException):
    """Raised when a primary document record cannot be found."""

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = job_id
        super().__init__(f"Document not found: {job_id}", details)
