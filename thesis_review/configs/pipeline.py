"""
Pipeline tuning settings.

Thresholds, text windows and per-stage budgets used by the stage handlers
and the report aggregator.

Dependencies: pydantic, pydantic_settings
System role: Business-rule configuration for the evaluation pipeline
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from thesis_review.configs.base import BaseSettings


class PipelineSettings(BaseSettings):
    """Evaluation pipeline configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Extraction
    min_text_chars: int = Field(default=100, description="Minimum extracted characters")
    chars_per_page: int = Field(default=2750, description="Characters per estimated page")

    # Text windows sent to models
    structure_prefix_chars: int = Field(default=50_000, description="Structure prompt prefix")
    references_suffix_chars: int = Field(default=30_000, description="Reference prompt suffix")
    structure_agent_chars: int = Field(default=80_000, description="Structure agent window")
    cross_validation_chars: int = Field(default=100_000, description="Validator text prefix")

    # Scoring
    neutral_agent_score: int = Field(default=50, description="Score for a degraded agent")
    fallback_structure_score: int = Field(default=70, description="Heuristic structure score")
    fallback_confidence: int = Field(default=70, description="Confidence on calibration fallback")
    recommendation_threshold: int = Field(default=70, description="Category score needing work")
    max_strengths: int = Field(default=10, description="Strengths kept in the report")
    max_recommendations: int = Field(default=5, description="Recommendations kept")
    max_immediate_actions: int = Field(default=5, description="Immediate actions kept")

    # Wall-clock budgets per stage invocation (seconds); sent to the broker as the delivery timeout
    extract_budget_seconds: int = Field(default=60)
    pre_analyze_budget_seconds: int = Field(default=60)
    deep_analyze_budget_seconds: int = Field(default=300)
    cross_validate_budget_seconds: int = Field(default=120)
    report_budget_seconds: int = Field(default=60)

    def budget_seconds(self, stage: str) -> int:
        """
        Wall-clock budget of one invocation of a stage.

        Args:
            stage: Pipeline stage value (``PipelineStage`` members compare equal)

        Raises:
            KeyError: Unknown stage
        """
        budgets = {
            "extract": self.extract_budget_seconds,
            "pre_analyze": self.pre_analyze_budget_seconds,
            "deep_analyze": self.deep_analyze_budget_seconds,
            "cross_validate": self.cross_validate_budget_seconds,
            "generate_report": self.report_budget_seconds,
        }
        return budgets[stage]

    @property
    def worst_case_pipeline_seconds(self) -> int:
        """Sum of all stage budgets, i.e. the longest comprehensive-tier run."""
        return (
            self.extract_budget_seconds
            + self.pre_analyze_budget_seconds
            + self.deep_analyze_budget_seconds
            + self.cross_validate_budget_seconds
            + self.report_budget_seconds
        )
