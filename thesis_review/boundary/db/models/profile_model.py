"""
Profile and credit transaction ORM models.

Dependencies: sqlalchemy, thesis_review.boundary.db.base
System role: Credit balances, usage counters and the credit audit trail
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from thesis_review.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ProfileModel(Base, TimestampMixin):
    """
    Owner profile keyed by the external owner id.

    Attributes:
        id: Owner id from the auth provider
        credits: Current credit balance (never negative)
        thesis_analyses_count: Completed analyses
        last_activity_at: Last completed analysis
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thesis_analyses_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class TransactionType(str, enum.Enum):
    """Credit movement direction."""

    DEBIT = "debit"
    REFUND = "refund"


class CreditTransactionModel(Base, UUIDMixin, TimestampMixin):
    """One credit movement; amount is negative for debits."""

    __tablename__ = "credit_transactions"

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, native_enum=False),
        nullable=False,
    )
    reason: Mapped[str] = mapped_column(String(512), nullable=False)
    document_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
