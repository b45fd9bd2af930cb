"""
Credit ledger.

Debited once when an analysis starts and refunded at most once when the
pipeline fails. The refund claim on the document row commits together with
the balance change, so a failed refund can be retried. Every movement is written to the credit transaction log in
the same transaction as the balance change.

Dependencies: sqlalchemy, thesis_review.boundary.db.CRUD
System role: Credit accounting collaborator
"""

import logging
import uuid
from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thesis_review.boundary.db.CRUD import credit_transaction_crud, document_crud, profile_crud
from thesis_review.boundary.db.models import TransactionType
from thesis_review.core.exceptions import StoreError
from thesis_review.models.document import DebitResult, RefundClaim

logger = logging.getLogger(__name__)


class CreditLedger(ABC):
    """Contract for credit debits and refunds."""

    @abstractmethod
    async def debit(
        self,
        owner_id: str,
        amount: int,
        reason: str,
        document_id: str | None = None,
    ) -> DebitResult:
        """Take credits; ``success`` is False when the balance is insufficient."""

    @abstractmethod
    async def refund(
        self,
        owner_id: str,
        amount: int,
        reason: str,
        document_id: str | None = None,
    ) -> int:
        """Return credits; returns the new balance."""

    @abstractmethod
    async def refund_failed_analysis(self, job_id: str, reason: str) -> RefundClaim | None:
        """
        Return the credits of a failed analysis, at most once.

        Returns None when the document is not failed, was already refunded or
        cost nothing.
        """

    @abstractmethod
    async def balance(self, owner_id: str) -> int:
        """Current balance (0 for unknown owners)."""


class SqlCreditLedger(CreditLedger):
    """Ledger backed by the profiles and credit_transactions tables."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def debit(
        self,
        owner_id: str,
        amount: int,
        reason: str,
        document_id: str | None = None,
    ) -> DebitResult:
        try:
            async with self._session_factory() as session:
                new_balance = await profile_crud.debit(session, owner_id, amount)
                if new_balance is None:
                    profile = await profile_crud.get_by_id(session, owner_id)
                    await session.rollback()
                    return DebitResult(success=False, new_balance=profile.credits if profile else 0)

                await credit_transaction_crud.create(
                    session,
                    owner_id=owner_id,
                    amount=-amount,
                    type=TransactionType.DEBIT,
                    reason=reason,
                    document_id=document_id,
                    balance_after=new_balance,
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to debit credits: {e}", operation="debit") from e

        logger.info(
            "debit - Credits debited",
            extra={"owner_id": owner_id, "amount": amount, "new_balance": new_balance},
        )
        return DebitResult(success=True, new_balance=new_balance)

    async def _credit(
        self,
        session: AsyncSession,
        owner_id: str,
        amount: int,
        reason: str,
        document_id: str | None,
    ) -> int:
        new_balance = await profile_crud.credit(session, owner_id, amount)
        if new_balance is None:
            raise StoreError(
                f"Profile not found for refund: {owner_id}",
                operation="refund",
                details={"document_id": document_id},
            )

        await credit_transaction_crud.create(
            session,
            owner_id=owner_id,
            amount=amount,
            type=TransactionType.REFUND,
            reason=reason,
            document_id=document_id,
            balance_after=new_balance,
        )
        return new_balance

    async def refund(
        self,
        owner_id: str,
        amount: int,
        reason: str,
        document_id: str | None = None,
    ) -> int:
        try:
            async with self._session_factory() as session:
                new_balance = await self._credit(session, owner_id, amount, reason, document_id)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to refund credits: {e}", operation="refund") from e

        logger.info(
            "refund - Credits refunded",
            extra={"owner_id": owner_id, "amount": amount, "document_id": document_id},
        )
        return new_balance

    async def refund_failed_analysis(self, job_id: str, reason: str) -> RefundClaim | None:
        try:
            document_id = uuid.UUID(str(job_id))
        except ValueError:
            return None

        try:
            async with self._session_factory() as session:
                # Uncommitted until the balance and the log row are written.
                row = await document_crud.claim_refund(session, document_id)
                if row is None:
                    await session.rollback()
                    return None
                claim = RefundClaim(job_id=job_id, owner_id=row.owner_id, amount=row.credits_used)
                await self._credit(session, claim.owner_id, claim.amount, reason, job_id)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to refund credits: {e}", operation="refund") from e

        logger.info(
            "refund_failed_analysis - Credits refunded",
            extra={"job_id": job_id, "owner_id": claim.owner_id, "amount": claim.amount},
        )
        return claim

    async def balance(self, owner_id: str) -> int:
        try:
            async with self._session_factory() as session:
                profile = await profile_crud.get_by_id(session, owner_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read balance: {e}", operation="balance") from e
        return profile.credits if profile else 0
