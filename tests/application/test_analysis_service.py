"""
Test suite for AnalysisService.

Covers starting an analysis (pricing, debit, first enqueue), status polls
and the broker failure callback.

System role: Verification of the job lifecycle entry points
"""

import base64
import json

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from thesis_review.boundary.db.CRUD import credit_transaction_crud
from thesis_review.boundary.db.models import CreditTransactionModel, TransactionType
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    InsufficientCreditsError,
    JobPayloadError,
    QueueUnavailableError,
    StoreError,
)
from thesis_review.models.broker import BrokerCallback
from thesis_review.models.document import DocumentStatus
from thesis_review.models.job import JobState, Tier


def _failure_callback(job, error: str | None = "HTTP 500 after 3 retries") -> BrokerCallback:
    body = base64.b64encode(job.model_dump_json().encode()).decode()
    return BrokerCallback.model_validate(
        {
            "sourceMessageId": "msg_1",
            "status": 500,
            "url": "https://example.com/api/jobs/deep-analyze",
            "sourceBody": body,
            "error": error,
        }
    )


async def _refund_count(session_factory) -> int:
    async with session_factory() as session:
        stmt = select(CreditTransactionModel).where(CreditTransactionModel.type == TransactionType.REFUND)
        return len((await session.execute(stmt)).scalars().all())

class TestStartAnalysis:
    """Test suite for AnalysisService.start_analysis."""

    @pytest.mark.asyncio
    async def test_start_should_debit_and_enqueue_extract(
        self, analysis_service, funded_owner, queue, status_store, record_store, ledger
    ) -> None:
        """Test a basic-tier start debits 10 credits and enqueues step 1."""
        # Act
        started = await analysis_service.start_analysis(
            owner_id=funded_owner,
            file_ref="uploads/thesis.txt",
            file_name="thesis.txt",
            char_count=5_000,
        )

        # Assert
        assert started.tier == "basic"
        assert started.credits_used == 10
        assert started.new_balance == 90
        assert started.estimated_pages == 2
        assert started.total_steps == 3
        assert await ledger.balance(funded_owner) == 90

        path, job = queue.messages[0]
        assert path == "/jobs/extract-text"
        assert job.job_id == started.job_id
        assert job.step == 1
        assert job.tier == Tier.BASIC
        assert queue.dedup_ids == {f"{started.job_id}-extract": started.message_id}

        status = await status_store.get_status(started.job_id)
        assert status.status == JobState.PENDING
        assert status.step_name == "Text Extraction"
        document = await record_store.get_document(started.job_id)
        assert document.status == DocumentStatus.PROCESSING
        assert document.processing_status["status"] == "pending"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "char_count,tier,credits",
        [
            (0, "basic", 10),
            (30 * 2750, "basic", 10),
            (30 * 2750 + 1, "standard", 25),
            (60 * 2750, "standard", 25),
            (60 * 2750 + 1, "comprehensive", 50),
        ],
    )
    async def test_start_should_price_by_estimated_pages(
        self, analysis_service, funded_owner, char_count, tier, credits
    ) -> None:
        started = await analysis_service.start_analysis(funded_owner, "uploads/t.txt", "t.txt", char_count)

        assert started.tier == tier
        assert started.credits_used == credits
        assert started.new_balance == 100 - credits

    @pytest.mark.asyncio
    async def test_start_should_reject_unfunded_owner(self, analysis_service, owner_id, queue) -> None:
        """Test an owner without a profile cannot start an analysis."""
        # Act & Assert
        with pytest.raises(InsufficientCreditsError) as exc_info:
            await analysis_service.start_analysis(owner_id, "uploads/t.txt", "t.txt", 5_000)

        assert exc_info.value.required == 10
        assert exc_info.value.balance == 0
        assert queue.messages == []

    @pytest.mark.asyncio
    async def test_start_should_fail_and_refund_when_queue_is_down(
        self, analysis_service, funded_owner, queue, ledger, record_store, status_store
    ) -> None:
        # Arrange
        queue.error = QueueUnavailableError("broker down", destination="/jobs/extract-text")

        # Act
        with pytest.raises(QueueUnavailableError):
            await analysis_service.start_analysis(funded_owner, "uploads/t.txt", "t.txt", 5_000)

        # Assert
        assert await ledger.balance(funded_owner) == 100
        statuses = list(status_store.statuses.values())
        assert len(statuses) == 1
        assert statuses[0].status == JobState.FAILED
        assert statuses[0].error == "Analysis could not be queued"
        document = await record_store.get_document(statuses[0].job_id)
        assert document.status == DocumentStatus.FAILED
        assert document.credits_refunded


class TestGetJobStatus:
    """Test suite for AnalysisService.get_job_status."""

    @pytest.mark.asyncio
    async def test_pending_job_should_report_eta(self, analysis_service, funded_owner) -> None:
        started = await analysis_service.start_analysis(funded_owner, "uploads/thesis.txt", "thesis.txt", 5_000)

        status = await analysis_service.get_job_status(started.job_id)

        assert status["status"] == "processing"
        assert status["processing"]["status"] == "pending"
        assert status["processing"]["totalSteps"] == 3
        assert status["processing"]["estimatedSecondsRemaining"] == 80
        assert not status["is_completed"]
        assert not status["is_failed"]

    @pytest.mark.asyncio
    async def test_completed_job_should_report_score(self, analysis_service, funded_owner, drain) -> None:
        # Arrange
        started = await analysis_service.start_analysis(funded_owner, "uploads/thesis.txt", "thesis.txt", 5_000)
        await drain()

        # Act
        status = await analysis_service.get_job_status(started.job_id)

        # Assert
        assert status["is_completed"]
        assert status["overall_score"] == 78
        assert status["analyzed_at"] is not None
        assert status["processing"]["progress"] == 100
        assert "estimatedSecondsRemaining" not in status["processing"]

    @pytest.mark.asyncio
    async def test_unknown_job_should_raise(self, analysis_service) -> None:
        with pytest.raises(DocumentNotFoundError):
            await analysis_service.get_job_status("00000000-0000-0000-0000-000000000000")


class TestHandleBrokerFailure:
    """Test suite for AnalysisService.handle_broker_failure."""

    @pytest.mark.asyncio
    async def test_exhausted_message_should_fail_and_refund(
        self, analysis_service, funded_owner, queue, ledger, status_store
    ) -> None:
        """Test the failure callback fails the job with the broker's error and refunds once."""
        # Arrange
        started = await analysis_service.start_analysis(funded_owner, "uploads/thesis.txt", "thesis.txt", 5_000)
        _, job = queue.pop()

        # Act
        await analysis_service.handle_broker_failure(_failure_callback(job))
        await analysis_service.handle_broker_failure(_failure_callback(job))

        # Assert
        status = await status_store.get_status(started.job_id)
        assert status.status == JobState.FAILED
        assert status.step_name == "Error"
        assert status.error == "HTTP 500 after 3 retries"
        assert await ledger.balance(funded_owner) == 100

    @pytest.mark.asyncio
    async def test_missing_error_should_use_default_message(
        self, analysis_service, funded_owner, queue, status_store
    ) -> None:
        started = await analysis_service.start_analysis(funded_owner, "uploads/thesis.txt", "thesis.txt", 5_000)
        _, job = queue.pop()

        await analysis_service.handle_broker_failure(_failure_callback(job, error=None))

        assert (await status_store.get_status(started.job_id)).error == "Analysis failed"

    @pytest.mark.asyncio
    async def test_callback_after_completion_should_change_nothing(
        self, analysis_service, funded_owner, queue, drain, ledger, status_store, record_store, session_factory
    ) -> None:
        """Test a late failure callback neither refunds nor fails a finished report."""
        # Arrange
        started = await analysis_service.start_analysis(funded_owner, "uploads/thesis.txt", "thesis.txt", 5_000)
        _, extract_job = queue.messages[0]
        await drain()

        # Act
        await analysis_service.handle_broker_failure(_failure_callback(extract_job))

        # Assert
        document = await record_store.get_document(started.job_id)
        assert document.status == DocumentStatus.ANALYZED
        assert not document.credits_refunded
        assert await ledger.balance(funded_owner) == 90
        assert await _refund_count(session_factory) == 0
        assert await status_store.get_status(started.job_id) is None
        assert all(entry.status != JobState.FAILED for entry in status_store.history)

    @pytest.mark.asyncio
    async def test_refund_lost_to_ledger_error_should_succeed_on_retry(
        self, analysis_service, funded_owner, queue, ledger, record_store, session_factory, monkeypatch
    ) -> None:
        """Test a refund whose ledger write failed is made by the next delivery."""
        # Arrange
        started = await analysis_service.start_analysis(funded_owner, "uploads/thesis.txt", "thesis.txt", 5_000)
        _, job = queue.pop()
        original_create = credit_transaction_crud.create
        attempts = []

        async def create_failing_once(session, **kwargs):
            attempts.append(kwargs)
            if len(attempts) == 1:
                raise OperationalError("INSERT INTO credit_transactions", {}, Exception("database is locked"))
            return await original_create(session, **kwargs)

        monkeypatch.setattr(credit_transaction_crud, "create", create_failing_once)

        # Act
        with pytest.raises(StoreError):
            await analysis_service.handle_broker_failure(_failure_callback(job))
        balance_after_error = await ledger.balance(funded_owner)
        await analysis_service.handle_broker_failure(_failure_callback(job))
        await analysis_service.handle_broker_failure(_failure_callback(job))

        # Assert
        document = await record_store.get_document(started.job_id)
        assert balance_after_error == 90
        assert await ledger.balance(funded_owner) == 100
        assert document.status == DocumentStatus.FAILED
        assert document.credits_refunded
        assert await _refund_count(session_factory) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"sourceMessageId": "msg_1"},
            {"sourceBody": base64.b64encode(json.dumps({"job_id": "x"}).encode()).decode()},
        ],
    )
    async def test_undecodable_callback_should_raise(self, analysis_service, payload) -> None:
        with pytest.raises(JobPayloadError):
            await analysis_service.handle_broker_failure(BrokerCallback.model_validate(payload))
