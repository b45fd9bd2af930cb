"""
Job failure handling.

Marks a job failed in both stores and returns its credits. The refund is
claimed on the failed primary record in the same transaction as the balance
change, so re-delivered failures and the broker's failure callback refund
exactly once, and a failed refund is retried by the next delivery.

Dependencies: thesis_review.boundary
System role: Fatal-failure path of the pipeline
"""

import logging

from thesis_review.boundary.cache.status_store import StatusStore
from thesis_review.boundary.db.record_store import PrimaryRecordStore
from thesis_review.boundary.ledger.credit_ledger import CreditLedger
from thesis_review.models.document import DocumentStatus
from thesis_review.models.job import Job, JobState, JobStatus, utc_now

logger = logging.getLogger(__name__)


class JobFailureHandler:
    """Terminal failure transition plus at-most-once refund."""

    def __init__(
        self,
        status_store: StatusStore,
        record_store: PrimaryRecordStore,
        ledger: CreditLedger,
    ) -> None:
        self._status_store = status_store
        self._record_store = record_store
        self._ledger = ledger
    async def fail(self, job: Job, step_name: str, error: str) -> bool:
        """
        Fail a job and refund its credits.

        A job whose report was already written stays completed: a failure
        callback that arrives after the pipeline finished changes nothing.

        Args:
            job: Job being failed
            step_name: Display name of the stage that failed
            error: User-visible error message

        Returns:
            bool: True if credits were refunded by this call
        """
        status = JobStatus(
            job_id=job.job_id,
            step=job.step,
            total_steps=job.total_steps,
            step_name=step_name,
            status=JobState.FAILED,
            progress=0,
            completed_at=utc_now(),
            error=error,
        )
        if not await self._record_store.mark_failed(job.job_id, status):
            document = await self._record_store.get_document(job.job_id)
            if document is not None and document.status == DocumentStatus.ANALYZED:
                logger.warning(
                    "fail - Ignoring failure of a completed job",
                    extra={"job_id": job.job_id, "step": job.step, "error": error},
                )
                return False
        await self._status_store.set_status(job.job_id, status)

        claim = await self._ledger.refund_failed_analysis(
            job.job_id,
            reason=f"Refund for failed analysis: {job.job_id}",
        )
        if claim is None:
            logger.info(
                "fail - Refund already claimed or nothing to refund",
                extra={"job_id": job.job_id},
            )
            return False

        logger.warning(
            "fail - Job failed and credits refunded",
            extra={"job_id": job.job_id, "step": job.step, "amount": claim.amount, "error": error},
        )
        return True
