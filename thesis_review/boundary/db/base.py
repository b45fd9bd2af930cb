"""
SQLAlchemy declarative base and column mixins shared by the record tables.

Dependencies: sqlalchemy
System role: Foundation for all primary record store models
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from thesis_review.models.job import utc_now


class Base(DeclarativeBase):
    """Declarative base; importing ``thesis_review.boundary.db.models`` registers every table."""


class UUIDMixin:
    """UUID v4 primary key; for documents it doubles as the job ID."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Timezone-aware ``created_at`` and ``updated_at`` columns."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
