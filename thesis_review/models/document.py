"""
Primary record snapshots.

Read-side views of the durable document row and the owner's credit account,
decoupled from the ORM so stage handlers never hold a database session.

Dependencies: pydantic
System role: Primary record store contracts
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from thesis_review.models.job import Tier


class DocumentStatus(str, Enum):
    """
    Client-facing document states.

    PROCESSING: Pipeline in flight
    ANALYZED: Final report written (terminal)
    FAILED: Pipeline failed and credits were returned (terminal)
    """

    PROCESSING = "processing"
    ANALYZED = "analyzed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentStatus.ANALYZED, DocumentStatus.FAILED)


class DocumentRecord(BaseModel):
    """Snapshot of a thesis document row."""

    model_config = ConfigDict(from_attributes=True)

    job_id: str
    owner_id: str
    file_name: str
    file_ref: str
    status: DocumentStatus
    analysis_type: Tier
    credits_used: int = 0
    credits_refunded: bool = False
    processing_status: dict[str, Any] = Field(default_factory=dict)
    overall_score: int | None = None
    analysis_result: dict[str, Any] | None = None
    analyzed_at: datetime | None = None
    error_message: str | None = None


class RefundClaim(BaseModel):
    """Credits returned for a failed document by a successful refund claim."""

    job_id: str
    owner_id: str
    amount: int


class DebitResult(BaseModel):
    """Outcome of a ledger debit."""

    success: bool
    new_balance: int
