"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides the cached factory used by the API dependencies and the stage
handlers.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import model_validator

from thesis_review.configs.base import BaseSettings
from thesis_review.configs.cache import CacheSettings
from thesis_review.configs.database import DatabaseSettings
from thesis_review.configs.llm import LLMSettings
from thesis_review.configs.pipeline import PipelineSettings
from thesis_review.configs.queue import QueueSettings
from thesis_review.configs.storage import StorageSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = DatabaseSettings()
    queue: QueueSettings = QueueSettings()
    cache: CacheSettings = CacheSettings()
    llm: LLMSettings = LLMSettings()
    pipeline: PipelineSettings = PipelineSettings()
    storage: StorageSettings = StorageSettings()

    @model_validator(mode="after")
    def _check_result_ttl(self) -> "Settings":
        """
        Reject a store TTL that a slow comprehensive job could outlive.

        Every stage may be delivered up to ``retries + 1`` times, so the
        intermediate results must survive that many full stage budgets.
        """
        attempts = self.queue.retries + 1
        worst_case = self.pipeline.worst_case_pipeline_seconds * attempts
        if self.cache.ttl_seconds <= worst_case:
            raise ValueError(
                f"REDIS_TTL_SECONDS={self.cache.ttl_seconds} must exceed the "
                f"worst-case pipeline duration ({worst_case}s)"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from thesis_review.configs import get_settings
        settings = get_settings()
    """
    return Settings()
