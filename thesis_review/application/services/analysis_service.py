"""
Analysis service.

Job-level operations outside the stage chain: starting an analysis (tier,
debit, primary record, first enqueue), answering status polls and handling
the broker's failure callback.

Dependencies: thesis_review.boundary, thesis_review.core.pipeline
System role: Pipeline entry point and job lifecycle orchestration
"""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from thesis_review.application.services.failure_handler import JobFailureHandler
from thesis_review.boundary.cache.status_store import StatusStore
from thesis_review.boundary.db.record_store import PrimaryRecordStore
from thesis_review.boundary.ledger.credit_ledger import CreditLedger
from thesis_review.boundary.queue.base import JobQueue
from thesis_review.configs.pipeline import PipelineSettings
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    InsufficientCreditsError,
    JobPayloadError,
    QueueUnavailableError,
    StoreError,
)
from thesis_review.core.pipeline.stages import (
    STAGE_DEFINITIONS,
    PipelineStage,
    estimate_page_count,
    get_stage,
    pricing_for_pages,
    stage_sequence,
    total_steps,
)
from thesis_review.models.broker import BrokerCallback
from thesis_review.models.document import DocumentStatus
from thesis_review.models.job import Job, JobState, JobStatus, Tier

logger = logging.getLogger(__name__)

FAILURE_STEP_NAME = "Error"
DEFAULT_FAILURE_MESSAGE = "Analysis failed"


@dataclass(frozen=True)
class StartedAnalysis:
    """Result of starting an analysis."""

    job_id: str
    tier: str
    credits_used: int
    new_balance: int
    estimated_pages: int
    total_steps: int
    message_id: str


class AnalysisService:
    """
    Job lifecycle orchestration.

    Usage:
        service = AnalysisService(status_store, record_store, ledger, queue, failure_handler, settings)
        started = await service.start_analysis(owner_id, file_ref, file_name, char_count)
    """

    def __init__(
        self,
        status_store: StatusStore,
        record_store: PrimaryRecordStore,
        ledger: CreditLedger,
        queue: JobQueue,
        failure_handler: JobFailureHandler,
        settings: PipelineSettings,
    ) -> None:
        self._status_store = status_store
        self._record_store = record_store
        self._ledger = ledger
        self._queue = queue
        self._failure_handler = failure_handler
        self._settings = settings

    async def start_analysis(
        self,
        owner_id: str,
        file_ref: str,
        file_name: str,
        char_count: int,
    ) -> StartedAnalysis:
        """
        Price, pay for and enqueue a new analysis.

        Args:
            owner_id: Paying owner
            file_ref: Storage reference of the uploaded file
            file_name: Original filename
            char_count: Character count used for the page estimate

        Returns:
            StartedAnalysis: Job id, tier and cost

        Raises:
            InsufficientCreditsError: Balance does not cover the tier
            StoreError: Record creation failed (credits were refunded)
            QueueUnavailableError: First stage could not be enqueued (job failed and refunded)
        """
        pages = max(1, estimate_page_count(char_count, self._settings.chars_per_page))
        pricing = pricing_for_pages(pages)

        debit = await self._ledger.debit(owner_id, pricing.credits, reason=f"{pricing.name}: {file_name}")
        if not debit.success:
            raise InsufficientCreditsError(owner_id, pricing.credits, debit.new_balance)

        try:
            document = await self._record_store.create_document(
                owner_id=owner_id,
                file_name=file_name,
                file_ref=file_ref,
                tier=pricing.tier,
                credits_used=pricing.credits,
            )
        except StoreError:
            await self._ledger.refund(
                owner_id,
                pricing.credits,
                reason=f"Refund, record creation failed: {file_name}",
            )
            raise

        job = Job(
            job_id=document.job_id,
            owner_id=owner_id,
            source_file_ref=file_ref,
            source_file_name=file_name,
            tier=pricing.tier,
            step=1,
            total_steps=total_steps(pricing.tier),
        )
        first = get_stage(PipelineStage.EXTRACT)
        pending = JobStatus(
            job_id=job.job_id,
            step=1,
            total_steps=job.total_steps,
            step_name=first.name,
            status=JobState.PENDING,
            progress=0,
        )
        await self._status_store.set_status(job.job_id, pending)
        await self._record_store.update_progress(job.job_id, pending)

        try:
            message_id = await self._queue.enqueue(
                first.path,
                job,
                deduplication_id=f"{job.job_id}-{first.stage.value}",
                timeout_seconds=self._settings.budget_seconds(first.stage),
            )
        except QueueUnavailableError as e:
            await self._failure_handler.fail(job, first.name, "Analysis could not be queued")
            logger.error(
                f"start_analysis - Enqueue failed: {e.message}",
                extra={"job_id": job.job_id},
            )
            raise

        logger.info(
            "start_analysis - Analysis started",
            extra={
                "job_id": job.job_id,
                "owner_id": owner_id,
                "tier": pricing.tier.value,
                "credits": pricing.credits,
                "message_id": message_id,
            },
        )
        return StartedAnalysis(
            job_id=job.job_id,
            tier=pricing.tier.value,
            credits_used=pricing.credits,
            new_balance=debit.new_balance,
            estimated_pages=pages,
            total_steps=job.total_steps,
            message_id=message_id,
        )

    async def get_job_status(self, job_id: str) -> dict:
        """
        Merge the primary record with the live status entry.

        Raises:
            DocumentNotFoundError: No primary record for ``job_id``
        """
        document = await self._record_store.get_document(job_id)
        if document is None:
            raise DocumentNotFoundError(job_id)

        processing = dict(document.processing_status)
        live = await self._status_store.get_status(job_id)
        if live is not None:
            processing.update(
                {
                    "step": live.step,
                    "totalSteps": live.total_steps,
                    "stepName": live.step_name,
                    "progress": live.progress,
                    "status": live.status.value,
                }
            )
            if live.error:
                processing["error"] = live.error

        if document.status == DocumentStatus.PROCESSING:
            processing["estimatedSecondsRemaining"] = self._remaining_seconds(
                document.analysis_type, processing.get("step", 1)
            )

        return {
            "job_id": document.job_id,
            "status": document.status.value,
            "processing": processing,
            "is_completed": document.status == DocumentStatus.ANALYZED,
            "is_failed": document.status == DocumentStatus.FAILED,
            "overall_score": document.overall_score,
            "analyzed_at": document.analyzed_at.isoformat() if document.analyzed_at else None,
        }

    @staticmethod
    def _remaining_seconds(tier: Tier, step: int) -> int:
        sequence = stage_sequence(tier)
        remaining = sequence[max(0, step - 1) :]
        return sum(STAGE_DEFINITIONS[stage].expected_seconds for stage in remaining)

    async def handle_broker_failure(self, callback: BrokerCallback) -> None:
        """
        Fail and refund the job whose message exhausted its retries.

        Raises:
            JobPayloadError: The callback does not carry a decodable Job
        """
        payload = callback.original_payload()
        if payload is None:
            raise JobPayloadError("Failure callback carries no original message body")
        try:
            job = Job.model_validate(payload)
        except ValidationError as e:
            raise JobPayloadError(f"Failure callback body is not a job: {e}") from e

        logger.error(
            "handle_broker_failure - Message exhausted retries",
            extra={
                "job_id": job.job_id,
                "step": job.step,
                "message_id": callback.message_id,
                "url": callback.url,
                "status_code": callback.status,
            },
        )
        await self._failure_handler.fail(
            job,
            FAILURE_STEP_NAME,
            callback.error or DEFAULT_FAILURE_MESSAGE,
        )
