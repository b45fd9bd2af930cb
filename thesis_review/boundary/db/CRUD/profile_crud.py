"""
Profile and credit transaction CRUD operations.

Dependencies: sqlalchemy, thesis_review.boundary.db
System role: Credit balance persistence
"""

from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_review.boundary.db.CRUD.base_crud import BaseCRUD
from thesis_review.boundary.db.models.profile_model import (
    CreditTransactionModel,
    ProfileModel,
)


class ProfileCRUD(BaseCRUD[ProfileModel]):
    """CRUD for profiles with conditional balance updates."""

    def __init__(self) -> None:
        super().__init__(ProfileModel)

    async def debit(self, session: AsyncSession, owner_id: str, amount: int) -> int | None:
        """
        Subtract credits if the balance covers the amount.

        Returns:
            New balance, or None if the profile is missing or underfunded
        """
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == owner_id, ProfileModel.credits >= amount)
            .values(credits=ProfileModel.credits - amount)
            .returning(ProfileModel.credits)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def credit(self, session: AsyncSession, owner_id: str, amount: int) -> int | None:
        """
        Add credits.

        Returns:
            New balance, or None if the profile is missing
        """
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == owner_id)
            .values(credits=ProfileModel.credits + amount)
            .returning(ProfileModel.credits)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def record_analysis(self, session: AsyncSession, owner_id: str) -> bool:
        """Increment the completed-analysis counter and touch last activity."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == owner_id)
            .values(
                thesis_analyses_count=ProfileModel.thesis_analyses_count + 1,
                last_activity_at=datetime.now(timezone.utc),
            )
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


profile_crud = ProfileCRUD()
credit_transaction_crud = BaseCRUD(CreditTransactionModel)
