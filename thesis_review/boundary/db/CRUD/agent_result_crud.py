"""
Agent audit record CRUD operations.

Dependencies: sqlalchemy, thesis_review.boundary.db
System role: Per-agent audit persistence
"""

from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_review.boundary.db.CRUD.base_crud import BaseCRUD
from thesis_review.boundary.db.models.agent_result_model import AgentResultModel


class AgentResultCRUD(BaseCRUD[AgentResultModel]):
    """CRUD for agent audit rows."""

    def __init__(self) -> None:
        super().__init__(AgentResultModel)

    async def replace_for_document(
        self,
        session: AsyncSession,
        document_id: UUID,
        rows: list[dict],
    ) -> int:
        """
        Replace all audit rows of a document.

        Re-running the deep-analysis stage overwrites rather than duplicates.

        Returns:
            Number of rows written
        """
        await session.execute(
            delete(AgentResultModel).where(AgentResultModel.document_id == document_id)
        )
        session.add_all(AgentResultModel(document_id=document_id, **row) for row in rows)
        await session.flush()
        return len(rows)


agent_result_crud = AgentResultCRUD()
