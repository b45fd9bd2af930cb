"""
Thesis document ORM model.

The durable job header the client polls: status, tier, a progress snapshot
and, once the report stage finishes, the final analysis result.

Dependencies: sqlalchemy, thesis_review.boundary.db.base
System role: Primary record of an analysis job
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from thesis_review.boundary.db.base import Base, TimestampMixin, UUIDMixin
from thesis_review.models.document import DocumentStatus
from thesis_review.models.job import Tier


class ThesisDocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Thesis document row; its id is the pipeline job id.

    Attributes:
        owner_id: Owner whose credits paid for the analysis
        file_name: Original filename
        file_ref: Storage reference of the uploaded file
        status: PROCESSING until the report or a failure is written
        analysis_type: Tier computed at start
        credits_used: Amount debited at start
        credits_refunded: Set in the transaction that credits the refund
        processing_status: Latest progress snapshot (step, stepName, progress...)
        analysis_result: FinalAnalysisResult in camelCase JSON
        overall_score: Copy of the report's overall score for listing
        analyzed_at: When the report was written
        error_message: User-visible failure reason
    """

    __tablename__ = "thesis_documents"

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_ref: Mapped[str] = mapped_column(String(1024), nullable=False)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False),
        nullable=False,
        default=DocumentStatus.PROCESSING,
    )
    analysis_type: Mapped[Tier] = mapped_column(
        Enum(Tier, native_enum=False),
        nullable=False,
    )

    credits_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credits_refunded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    processing_status: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    analysis_result: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    overall_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    analyzed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
