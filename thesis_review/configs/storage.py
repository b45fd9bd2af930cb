"""
Document storage configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Location of uploaded source files
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from thesis_review.configs.base import BaseSettings


class StorageSettings(BaseSettings):
    """S3 bucket holding uploaded documents."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="S3_",
        case_sensitive=False,
        extra="ignore",
    )

    documents_bucket: str = Field(default="thesis-review-uploads", description="Upload bucket")
    region: str = Field(default="eu-central-1", description="AWS region of the bucket")
