"""
Language model configuration settings.

Two model classes serve the scoring agents (a fast class for high-volume,
low-complexity calls and a strong class for per-agent reasoning) and a
third, independent provider serves cross-validation.

Dependencies: pydantic, pydantic_settings
System role: Model selection and generation parameters
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from thesis_review.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Model provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    fast_model_id: str = Field(default="gemini-2.5-flash", description="Fast model class")
    strong_model_id: str = Field(default="gemini-2.5-pro", description="Strong model class")
    validator_model_id: str = Field(
        default="anthropic.claude-sonnet-4-20250514-v1:0",
        description="Cross-validation model (Bedrock)",
    )
    bedrock_region: str = Field(default="us-east-1", description="AWS region for Bedrock")

    fast_temperature: float = Field(default=0.3, description="Fast model temperature")
    strong_temperature: float = Field(default=0.2, description="Strong model temperature")
    validator_temperature: float = Field(default=0.0, description="Validator temperature")

    fast_max_output_tokens: int = Field(default=8192, description="Fast model output cap")
    strong_max_output_tokens: int = Field(default=65536, description="Strong model output cap")
    validator_max_output_tokens: int = Field(default=8192, description="Validator output cap")

    call_timeout_seconds: float = Field(
        default=240.0,
        description="Wall-clock limit for a single model call",
    )
