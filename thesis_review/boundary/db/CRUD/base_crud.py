"""
Base CRUD operations for SQLAlchemy models.

Dependencies: sqlalchemy
System role: Foundation for the primary record store CRUD classes
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_review.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD for a model with an ``id`` primary key.

    Sessions are passed in; callers own the transaction boundary.
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """Insert a row and return it with generated defaults loaded."""
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: Any) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_where(self, session: AsyncSession, id: Any, *conditions, **values) -> ModelT | None:
        """
        Conditionally update one row.

        The row is only touched when every extra condition holds, which makes
        the update a compare-and-set.

        Args:
            session: Async database session
            id: Primary key
            *conditions: Additional WHERE clauses
            **values: Column values to set

        Returns:
            The updated row, or None if it is missing or a condition failed
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id, *conditions)
            .values(**values)
            .returning(self.model)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
