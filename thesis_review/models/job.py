"""
Job and job status models.

The Job is the unit of work re-serialized into every queue message; the
JobStatus is the progress record overwritten in the status store at each
stage entry and exit.

Dependencies: pydantic
System role: Wire contract between stages and the status store
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Tier(str, Enum):
    """Service tier; fixes the pipeline length and which agents run."""

    BASIC = "basic"
    STANDARD = "standard"
    COMPREHENSIVE = "comprehensive"


class JobState(str, Enum):
    """
    Externally observed job states.

    PENDING: Enqueued, no stage has started yet
    RUNNING: A stage is processing the job
    COMPLETED: The current stage finished (terminal after the report stage)
    FAILED: Terminal; no further stage may transition the job
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class Job(BaseModel):
    """Queue message body carried from stage to stage."""

    job_id: str = Field(..., min_length=1, description="Primary document record ID")
    owner_id: str = Field(..., min_length=1, description="Owner whose credits were debited")
    source_file_ref: str = Field(..., description="Storage reference of the uploaded file")
    source_file_name: str = Field(..., description="Original filename")
    tier: Tier
    step: int = Field(default=1, ge=1, description="1-based position in this tier's sequence")
    total_steps: int = Field(..., ge=1)
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "job_id": "550e8400-e29b-41d4-a716-446655440000",
                "owner_id": "550e8400-e29b-41d4-a716-446655440001",
                "source_file_ref": "uploads/550e8400/thesis.pdf",
                "source_file_name": "thesis.pdf",
                "tier": "standard",
                "step": 1,
                "total_steps": 4,
            }
        }
    )

    def advance(self) -> "Job":
        """Return the message for the next hop (step incremented)."""
        return self.model_copy(update={"step": self.step + 1})


class JobStatus(BaseModel):
    """Progress record for one job, overwritten in place."""

    job_id: str
    step: int
    total_steps: int
    step_name: str
    status: JobState
    progress: int = Field(default=0, ge=0, le=100)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None

    @property
    def is_terminal_failure(self) -> bool:
        """Whether the job has failed (no further transition allowed)."""
        return self.status == JobState.FAILED
