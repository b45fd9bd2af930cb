"""Credit ledger."""

from thesis_review.boundary.ledger.credit_ledger import CreditLedger, SqlCreditLedger

__all__ = ["CreditLedger", "SqlCreditLedger"]
