"""ORM models; importing this package registers every table on Base.metadata."""

from thesis_review.boundary.db.models.agent_result_model import AgentResultModel
from thesis_review.boundary.db.models.document_model import ThesisDocumentModel
from thesis_review.boundary.db.models.profile_model import (
    CreditTransactionModel,
    ProfileModel,
    TransactionType,
)

__all__ = [
    "AgentResultModel",
    "ThesisDocumentModel",
    "CreditTransactionModel",
    "ProfileModel",
    "TransactionType",
]
