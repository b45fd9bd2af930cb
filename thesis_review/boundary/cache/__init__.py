"""Status/result store."""

from thesis_review.boundary.cache.status_store import RedisStatusStore, StatusStore

__all__ = ["RedisStatusStore", "StatusStore"]
