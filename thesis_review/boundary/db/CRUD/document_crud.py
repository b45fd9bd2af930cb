"""
Thesis document CRUD operations.

Dependencies: sqlalchemy, thesis_review.boundary.db
System role: Primary record persistence
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from thesis_review.boundary.db.CRUD.base_crud import BaseCRUD
from thesis_review.boundary.db.models.document_model import ThesisDocumentModel
from thesis_review.models.document import DocumentStatus


class DocumentCRUD(BaseCRUD[ThesisDocumentModel]):
    """CRUD for thesis documents with guarded terminal transitions."""

    def __init__(self) -> None:
        super().__init__(ThesisDocumentModel)

    async def update_if_processing(
        self,
        session: AsyncSession,
        id: UUID,
        **kwargs,
    ) -> ThesisDocumentModel | None:
        """
        Update a document only while it is still processing.

        Returns:
            Updated instance, or None if missing or already terminal
        """
        return await self.update_where(
            session,
            id,
            ThesisDocumentModel.status == DocumentStatus.PROCESSING,
            **kwargs,
        )

    async def claim_refund(self, session: AsyncSession, id: UUID) -> ThesisDocumentModel | None:
        """
        Atomically mark a failed document's credits as refunded.

        The conditional update succeeds for at most one caller and never for
        a document that completed. The caller commits it together with the
        balance change.

        Returns:
            The document if this call won the claim, None otherwise
        """
        return await self.update_where(
            session,
            id,
            ThesisDocumentModel.status == DocumentStatus.FAILED,
            ThesisDocumentModel.credits_refunded.is_(False),
            ThesisDocumentModel.credits_used > 0,
            credits_refunded=True,
        )


document_crud = DocumentCRUD()
