"""
Final analysis report model.

The terminal artifact written by the report stage to the primary record
store. Serialized with camelCase keys because the client reads it as-is.

Dependencies: pydantic
System role: Client-facing report contract
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from thesis_review.models.job import Tier, utc_now
from thesis_review.models.results import Issue


class ReportModel(BaseModel):
    """Base for report parts: camelCase on the wire, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Grade(ReportModel):
    """Letter grade band."""

    letter: str
    label: str
    color: str


class CategoryScore(ReportModel):
    """Score and feedback for one evaluation category."""

    score: int
    feedback: str = ""
    sub_scores: dict[str, float] | None = None


class IssueBuckets(ReportModel):
    """Issues bucketed strictly by severity."""

    critical: list[Issue] = Field(default_factory=list)
    major: list[Issue] = Field(default_factory=list)
    minor: list[Issue] = Field(default_factory=list)
    total: int = 0


class ReportMetadata(ReportModel):
    """Document facts echoed into the report."""

    word_count: int
    page_count: int
    language: str
    academic_level: str
    field_of_study: str
    reference_count: int
    recent_reference_count: int


class FinalAnalysisResult(ReportModel):
    """The complete, immutable analysis report."""

    overall_score: int = Field(ge=0, le=100)
    grade: Grade
    category_scores: dict[str, CategoryScore]
    issues: IssueBuckets
    strengths: list[str]
    recommendations: list[str] = Field(min_length=1)
    immediate_actions: list[str]
    metadata: ReportMetadata
    analysis_tier: Tier
    cross_validated: bool
    cross_validation_summary: str | None = None
    analyzed_at: datetime = Field(default_factory=utc_now)

    def to_record(self) -> dict:
        """JSON-ready dict for the primary record store."""
        return self.model_dump(mode="json", by_alias=True)
