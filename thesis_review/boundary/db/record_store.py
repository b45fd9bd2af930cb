"""
Primary record store.

The durable, client-facing job row: progress snapshots, terminal status,
the final report, per-agent audit rows and the owner's usage counters.
Each operation runs in its own short transaction.

Dependencies: sqlalchemy, thesis_review.boundary.db.CRUD
System role: Authoritative job state for clients
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from thesis_review.boundary.db.CRUD import agent_result_crud, document_crud, profile_crud
from thesis_review.boundary.db.models import ThesisDocumentModel
from thesis_review.core.exceptions import StoreError
from thesis_review.models.document import DocumentRecord, DocumentStatus
from thesis_review.models.job import JobStatus, Tier
from thesis_review.models.report import FinalAnalysisResult
from thesis_review.models.results import AgentResult

logger = logging.getLogger(__name__)


def processing_snapshot(status: JobStatus) -> dict:
    """Progress snapshot stored on the document row (camelCase for the client)."""
    snapshot = {
        "step": status.step,
        "totalSteps": status.total_steps,
        "stepName": status.step_name,
        "progress": status.progress,
        "status": status.status.value,
    }
    if status.error:
        snapshot["error"] = status.error
    return snapshot


def _parse_id(job_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(job_id))
    except ValueError:
        return None


def _to_record(row: ThesisDocumentModel) -> DocumentRecord:
    return DocumentRecord(
        job_id=str(row.id),
        owner_id=row.owner_id,
        file_name=row.file_name,
        file_ref=row.file_ref,
        status=row.status,
        analysis_type=row.analysis_type,
        credits_used=row.credits_used,
        credits_refunded=row.credits_refunded,
        processing_status=row.processing_status or {},
        overall_score=row.overall_score,
        analysis_result=row.analysis_result,
        analyzed_at=row.analyzed_at,
        error_message=row.error_message,
    )


class PrimaryRecordStore(ABC):
    """Contract for the durable job/document store."""

    @abstractmethod
    async def create_document(
        self,
        owner_id: str,
        file_name: str,
        file_ref: str,
        tier: Tier,
        credits_used: int,
    ) -> DocumentRecord:
        """Create a processing document row; its id becomes the job id."""

    @abstractmethod
    async def get_document(self, job_id: str) -> DocumentRecord | None:
        """Load a document snapshot."""

    @abstractmethod
    async def update_progress(self, job_id: str, status: JobStatus) -> bool:
        """Write a progress snapshot; ignored once the document is terminal."""

    @abstractmethod
    async def mark_failed(self, job_id: str, status: JobStatus) -> bool:
        """Move a processing document to failed; False if already terminal."""

    @abstractmethod
    async def save_agent_results(
        self,
        job_id: str,
        results: list[AgentResult],
        model_ids: dict[str, str],
    ) -> int:
        """Replace the per-agent audit rows of a document."""

    @abstractmethod
    async def complete_analysis(
        self,
        job_id: str,
        result: FinalAnalysisResult,
        status: JobStatus,
    ) -> bool:
        """Write the final report and mark the document analyzed."""

    @abstractmethod
    async def record_owner_activity(self, owner_id: str) -> None:
        """Increment the owner's analysis counter and last-activity timestamp."""


class SqlRecordStore(PrimaryRecordStore):
    """SQLAlchemy implementation of the primary record store."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def create_document(
        self,
        owner_id: str,
        file_name: str,
        file_ref: str,
        tier: Tier,
        credits_used: int,
    ) -> DocumentRecord:
        try:
            async with self._session_factory() as session:
                row = await document_crud.create(
                    session,
                    owner_id=owner_id,
                    file_name=file_name,
                    file_ref=file_ref,
                    status=DocumentStatus.PROCESSING,
                    analysis_type=tier,
                    credits_used=credits_used,
                    credits_refunded=False,
                    processing_status={},
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create document: {e}", operation="create_document") from e

        logger.info(
            "create_document - Document created",
            extra={"job_id": str(row.id), "owner_id": owner_id, "tier": tier.value},
        )
        return _to_record(row)

    async def get_document(self, job_id: str) -> DocumentRecord | None:
        document_id = _parse_id(job_id)
        if document_id is None:
            return None
        try:
            async with self._session_factory() as session:
                row = await document_crud.get_by_id(session, document_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read document: {e}", operation="get_document") from e
        return _to_record(row) if row else None

    async def update_progress(self, job_id: str, status: JobStatus) -> bool:
        document_id = _parse_id(job_id)
        if document_id is None:
            return False
        try:
            async with self._session_factory() as session:
                row = await document_crud.update_if_processing(
                    session,
                    document_id,
                    processing_status=processing_snapshot(status),
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update progress: {e}", operation="update_progress") from e
        return row is not None

    async def mark_failed(self, job_id: str, status: JobStatus) -> bool:
        document_id = _parse_id(job_id)
        if document_id is None:
            return False
        try:
            async with self._session_factory() as session:
                row = await document_crud.update_if_processing(
                    session,
                    document_id,
                    status=DocumentStatus.FAILED,
                    processing_status=processing_snapshot(status),
                    error_message=status.error,
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to mark document failed: {e}", operation="mark_failed") from e

        if row is None:
            logger.info("mark_failed - Document already terminal", extra={"job_id": job_id})
        return row is not None

    async def save_agent_results(
        self,
        job_id: str,
        results: list[AgentResult],
        model_ids: dict[str, str],
    ) -> int:
        document_id = _parse_id(job_id)
        if document_id is None:
            return 0
        rows = [
            {
                "agent_id": result.agent_id,
                "model_used": model_ids.get(result.agent_id, result.model.value),
                "raw_response": result.raw_response,
                "parsed_score": result.score,
                "issues": [issue.model_dump() for issue in result.issues],
                "strengths": result.strengths,
                "processing_time_ms": result.processing_time_ms,
                "error": result.error,
            }
            for result in results
        ]
        try:
            async with self._session_factory() as session:
                written = await agent_result_crud.replace_for_document(session, document_id, rows)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to save agent results: {e}", operation="save_agent_results") from e
        return written

    async def complete_analysis(
        self,
        job_id: str,
        result: FinalAnalysisResult,
        status: JobStatus,
    ) -> bool:
        document_id = _parse_id(job_id)
        if document_id is None:
            return False
        try:
            async with self._session_factory() as session:
                row = await document_crud.update_if_processing(
                    session,
                    document_id,
                    status=DocumentStatus.ANALYZED,
                    analysis_result=result.to_record(),
                    overall_score=result.overall_score,
                    analyzed_at=datetime.now(timezone.utc),
                    processing_status=processing_snapshot(status),
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write report: {e}", operation="complete_analysis") from e
        return row is not None

    async def record_owner_activity(self, owner_id: str) -> None:
        try:
            async with self._session_factory() as session:
                await profile_crud.record_analysis(session, owner_id)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update owner counters: {e}", operation="record_owner_activity") from e
