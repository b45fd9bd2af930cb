"""Primary record store: ORM models, CRUD and the store facade."""

from thesis_review.boundary.db.base import Base
from thesis_review.boundary.db.record_store import PrimaryRecordStore, SqlRecordStore

__all__ = ["Base", "PrimaryRecordStore", "SqlRecordStore"]
