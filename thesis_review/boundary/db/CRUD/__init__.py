"""CRUD operations for the primary record store."""

from thesis_review.boundary.db.CRUD.agent_result_crud import AgentResultCRUD, agent_result_crud
from thesis_review.boundary.db.CRUD.base_crud import BaseCRUD
from thesis_review.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from thesis_review.boundary.db.CRUD.profile_crud import (
    ProfileCRUD,
    credit_transaction_crud,
    profile_crud,
)

__all__ = [
    "AgentResultCRUD",
    "agent_result_crud",
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    "ProfileCRUD",
    "credit_transaction_crud",
    "profile_crud",
]
