"""
Agent audit ORM model.

One row per agent per document, kept for traceability of the scoring pass.
Not read by the pipeline itself.

Dependencies: sqlalchemy, thesis_review.boundary.db.base
System role: Per-agent audit trail
"""

import uuid

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from thesis_review.boundary.db.base import Base, TimestampMixin, UUIDMixin


class AgentResultModel(Base, UUIDMixin, TimestampMixin):
    """Raw and parsed output of one scoring agent."""

    __tablename__ = "agent_results"
    __table_args__ = (UniqueConstraint("document_id", "agent_id", name="uq_agent_result"),)

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("thesis_documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    agent_id: Mapped[str] = mapped_column(String(64), nullable=False)
    model_used: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_response: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    parsed_score: Mapped[int] = mapped_column(Integer, nullable=False)
    issues: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    strengths: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    processing_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
