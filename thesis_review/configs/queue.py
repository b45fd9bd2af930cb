"""
Message queue configuration settings.

Covers the publish endpoint and token of the HTTP message broker, the
rotating signing-key pair used to authenticate inbound stage invocations,
and the public base URL the broker calls back into.

Dependencies: pydantic, pydantic_settings
System role: Job queue and signature verification configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from thesis_review.configs.base import BaseSettings


class QueueSettings(BaseSettings):
    """QStash-compatible broker configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QSTASH_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="https://qstash.upstash.io", description="Broker base URL")
    token: str = Field(default="", description="Bearer token for publishing")
    current_signing_key: str = Field(default="", description="Current signing key")
    next_signing_key: str = Field(default="", description="Next signing key (rotation)")

    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL of this service, used to build stage URLs",
    )
    api_prefix: str = Field(default="/api", description="Route prefix of the stage endpoints")
    retries: int = Field(default=3, description="Broker-level retry attempts per message")
    callback_path: str = Field(default="/jobs/callback", description="Completion callback path")
    failure_callback_path: str = Field(default="/jobs/failure", description="Failure callback path")
    request_timeout_seconds: float = Field(default=10.0, description="Publish HTTP timeout")
    signature_clock_tolerance_seconds: int = Field(
        default=0,
        description="Leeway applied to exp/nbf claims during signature verification",
    )

    @property
    def signing_enabled(self) -> bool:
        """Whether inbound requests must carry a valid signature."""
        return bool(self.current_signing_key)

    def endpoint_url(self, path: str) -> str:
        """
        Build an absolute URL for one of this service's endpoints.

        Args:
            path: Route path relative to the API prefix (e.g. "/jobs/extract-text")

        Returns:
            str: Absolute URL the broker can deliver to
        """
        return f"{self.public_base_url.rstrip('/')}{self.api_prefix}{path}"
