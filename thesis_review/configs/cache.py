"""
Status/result store configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Redis connection and TTL configuration for inter-stage state
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from thesis_review.configs.base import BaseSettings


class CacheSettings(BaseSettings):
    """Redis configuration for the status/result store."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REDIS_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    key_prefix: str = Field(default="job", description="Prefix for every job key")
    ttl_seconds: int = Field(
        default=3600,
        description="Expiry applied to every status and result entry",
    )
    socket_timeout_seconds: float = Field(default=5.0, description="Redis socket timeout")
