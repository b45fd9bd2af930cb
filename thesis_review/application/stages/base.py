"""
Stage handler skeleton.

Every stage runs the same state machine: terminal-job guard, running
status in both stores, upstream result loading, stage work, result write,
completed status and the enqueue of the tier's next stage. Stages only
implement ``run`` (and optionally ``finalize`` for the terminal stage).

Dependencies: thesis_review.boundary, thesis_review.core.pipeline
System role: Shared orchestration for all pipeline stages
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from thesis_review.application.services.failure_handler import JobFailureHandler
from thesis_review.boundary.cache.status_store import StatusStore
from thesis_review.boundary.db.record_store import PrimaryRecordStore
from thesis_review.boundary.queue.base import JobQueue
from thesis_review.configs.pipeline import PipelineSettings
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    MissingStepResultError,
    PipelineFatalError,
)
from thesis_review.core.pipeline.stages import PipelineStage, get_stage, next_stage
from thesis_review.models.document import DocumentStatus
from thesis_review.models.job import Job, JobState, JobStatus, utc_now

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


@dataclass
class StageDependencies:
    """Collaborators shared by every stage handler."""

    status_store: StatusStore
    record_store: PrimaryRecordStore
    queue: JobQueue
    failure_handler: JobFailureHandler
    settings: PipelineSettings


@dataclass
class StageOutcome:
    """
    What a stage invocation did.

    Attributes:
        job_id: Job the invocation belonged to
        stage: Stage that ran
        summary: Stage-specific figures for the HTTP response
        next_stage: Stage enqueued next (None when terminal)
        message_id: Broker message ID of the next hop
        skipped: The job was already terminal; nothing was done
        reused: The stage's result already existed and was not recomputed
    """

    job_id: str
    stage: PipelineStage
    summary: dict[str, Any] = field(default_factory=dict)
    next_stage: PipelineStage | None = None
    message_id: str | None = None
    skipped: bool = False
    reused: bool = False

    def to_response(self) -> dict[str, Any]:
        response = {"success": True, "job_id": self.job_id, **self.summary}
        if self.next_stage is not None:
            response["next_stage"] = self.next_stage.value
        if self.skipped:
            response["skipped"] = True
        return response


class StageHandler(ABC):
    """
    Base class for pipeline stages.

    Subclasses set ``stage`` and ``result_model`` and implement ``run``.
    A stage whose ``result_model`` is None does not persist a step result.
    """

    stage: PipelineStage
    result_model: type[BaseModel] | None = None

    def __init__(self, deps: StageDependencies) -> None:
        self.deps = deps
        self.definition = get_stage(self.stage)

    @abstractmethod
    async def run(self, job: Job) -> BaseModel:
        """
        Stage-specific work.

        Raises:
            PipelineFatalError: Unrecoverable business failure
        """

    def summarize(self, result: BaseModel) -> dict[str, Any]:
        """Stage-specific figures for the response body."""
        return {}

    async def finalize(self, job: Job, result: BaseModel) -> None:
        """Terminal-stage completion; only the last stage of a tier needs it."""
        raise NotImplementedError(f"{self.stage.value} cannot end a pipeline")

    async def handle(self, job: Job) -> StageOutcome:
        """
        Run the stage for one delivery of ``job``.

        Safe to re-run: a terminal job is a no-op (apart from finishing an
        outstanding refund), an existing step result is reused, and the next
        hop is published with a deduplication ID.

        Raises:
            PipelineFatalError: After the job was failed and refunded
            StoreError, QueueUnavailableError: Transient; the broker retries
        """
        document = await self.deps.record_store.get_document(job.job_id)
        if document is None:
            raise DocumentNotFoundError(job.job_id)
        if document.status.is_terminal:
            owed = document.credits_used > 0 and not document.credits_refunded
            if document.status == DocumentStatus.FAILED and owed:
                # An earlier delivery failed the job but its refund did not commit.
                await self.deps.failure_handler.fail(
                    job, self.definition.name, document.error_message or "Analysis failed"
                )
            logger.info(
                "handle - Job already terminal, ignoring delivery",
                extra={"job_id": job.job_id, "stage": self.stage.value, "status": document.status.value},
            )
            return StageOutcome(job_id=job.job_id, stage=self.stage, skipped=True)

        started_at = utc_now()
        await self.update_status(job, JobState.RUNNING, progress=10, started_at=started_at)

        try:
            result, reused = await self._result_for(job)
            follow_up = next_stage(job.tier, self.stage)
            outcome = StageOutcome(
                job_id=job.job_id,
                stage=self.stage,
                summary=self.summarize(result),
                next_stage=follow_up,
                reused=reused,
            )

            if follow_up is None:
                await self.finalize(job, result)
            else:
                await self.update_status(
                    job,
                    JobState.COMPLETED,
                    progress=100,
                    started_at=started_at,
                    completed_at=utc_now(),
                )
                outcome.message_id = await self.deps.queue.enqueue(
                    get_stage(follow_up).path,
                    job.advance(),
                    deduplication_id=f"{job.job_id}-{follow_up.value}",
                    timeout_seconds=self.deps.settings.budget_seconds(follow_up),
                )
        except PipelineFatalError as e:
            logger.error(
                f"handle - Fatal stage failure: {e.message}",
                extra={"job_id": job.job_id, "stage": self.stage.value},
            )
            await self.deps.failure_handler.fail(job, self.definition.name, e.message)
            raise

        logger.info(
            "handle - Stage completed",
            extra={
                "job_id": job.job_id,
                "stage": self.stage.value,
                "next_stage": outcome.next_stage.value if outcome.next_stage else None,
                "reused": reused,
            },
        )
        return outcome

    async def _result_for(self, job: Job) -> tuple[BaseModel, bool]:
        step = self.definition.result_step
        if self.result_model is not None:
            existing = await self.deps.status_store.get_result(job.job_id, step, self.result_model)
            if existing is not None:
                logger.info(
                    "_result_for - Reusing stored step result",
                    extra={"job_id": job.job_id, "step": step},
                )
                return existing, True

        result = await self.run(job)
        if self.result_model is not None:
            await self.deps.status_store.set_result(job.job_id, step, result)
        return result, False

    async def require(self, job: Job, step: int, model: type[ResultT]) -> ResultT:
        """
        Load an upstream step result.

        Raises:
            MissingStepResultError: The result is absent (fatal)
        """
        result = await self.deps.status_store.get_result(job.job_id, step, model)
        if result is None:
            raise MissingStepResultError(job.job_id, step)
        return result

    async def update_status(
        self,
        job: Job,
        state: JobState,
        progress: int,
        step_name: str | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
    ) -> JobStatus:
        """Dual-write a progress record to the status store and the primary record."""
        status = JobStatus(
            job_id=job.job_id,
            step=job.step,
            total_steps=job.total_steps,
            step_name=step_name or self.definition.name,
            status=state,
            progress=progress,
            started_at=started_at,
            completed_at=completed_at,
        )
        await self.deps.status_store.set_status(job.job_id, status)
        await self.deps.record_store.update_progress(job.job_id, status)
        return status
