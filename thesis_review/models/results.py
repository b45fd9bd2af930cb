"""
Step result models.

Payloads one stage hands to the next through the status/result store,
plus the value types produced by the scoring agents.

Dependencies: pydantic
System role: Inter-stage data contracts
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thesis_review.models.job import utc_now

Severity = Literal["critical", "major", "minor"]
SEVERITIES: tuple[str, ...] = ("critical", "major", "minor")


class ModelClass(str, Enum):
    """Language model classes available to the pipeline."""

    FAST = "fast"
    STRONG = "strong"
    VALIDATOR = "validator"


def clamp_score(value: Any, default: int = 0) -> int:
    """Coerce a model-provided score into an integer within 0-100."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return int(min(100, max(0, round(number))))


class Issue(BaseModel):
    """A single finding; immutable once produced."""

    model_config = ConfigDict(frozen=True)

    severity: Severity = "minor"
    category: str = ""
    description: str = ""
    location: str | None = None
    suggestion: str | None = None
    example: str | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> str:
        # Models occasionally answer "Critical" or "high"; anything unknown is minor.
        text = str(value or "").strip().lower()
        return text if text in SEVERITIES else "minor"


class Section(BaseModel):
    """A detected section heading."""

    type: str
    start_index: int
    title: str


class ExtractResult(BaseModel):
    """Step 1 output."""

    text: str
    word_count: int
    char_count: int
    estimated_page_count: int
    sections: list[Section] = Field(default_factory=list)
    extracted_at: datetime = Field(default_factory=utc_now)


class StructureAssessment(BaseModel):
    """Structural assessment returned by the pre-analysis model."""

    has_abstract: bool = False
    has_introduction: bool = False
    has_literature_review: bool = False
    has_methodology: bool = False
    has_results: bool = False
    has_discussion: bool = False
    has_conclusion: bool = False
    has_references: bool = False
    structure_score: int = 70
    structure_issues: list[str] = Field(default_factory=list)
    estimated_citation_count: int = 0
    citation_style: str = "Unknown"
    language: str = "tr"
    academic_level: str = "unknown"
    field_of_study: str = "Unknown"

    @field_validator("structure_score", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_score(value, default=70)


class ReferenceEntry(BaseModel):
    """One bibliography entry."""

    raw: str = ""
    type: str = "other"
    year: int | None = None
    is_recent: bool = False


class ReferenceSummary(BaseModel):
    """Reference-list extraction returned by the pre-analysis model."""

    references: list[ReferenceEntry] = Field(default_factory=list)
    total_count: int = 0
    recent_count: int = 0
    oldest_year: int | None = None
    newest_year: int | None = None
    type_distribution: dict[str, int] = Field(default_factory=dict)


class DocumentProfile(BaseModel):
    """Document-level metadata assembled during pre-analysis."""

    word_count: int
    estimated_pages: int
    section_count: int
    language: str
    academic_level: str
    field_of_study: str


class PreAnalyzeResult(BaseModel):
    """Step 2 output."""

    structure: StructureAssessment
    references: ReferenceSummary
    metadata: DocumentProfile
    structure_degraded: bool = False
    references_degraded: bool = False
    pre_analyzed_at: datetime = Field(default_factory=utc_now)


class AgentAssessment(BaseModel):
    """Structured output expected from one scoring agent."""

    score: int = 50
    sub_scores: dict[str, float] | None = None
    issues: list[Issue] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    feedback: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_score(value, default=50)


class AgentResult(BaseModel):
    """One agent's result for one job."""

    agent_id: str
    agent_name: str
    model: ModelClass
    weight: float
    score: int = Field(ge=0, le=100)
    sub_scores: dict[str, float] | None = None
    issues: list[Issue] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    feedback: str = ""
    raw_response: dict[str, Any] | None = None
    processing_time_ms: float | None = None
    error: str | None = None

    @property
    def degraded(self) -> bool:
        """Whether this result is a neutral stand-in for a failed agent."""
        return self.error is not None


class DeepAnalyzeResult(BaseModel):
    """Step 3 output; agent results in registry order."""

    agent_results: list[AgentResult]
    analyzed_at: datetime = Field(default_factory=utc_now)


class CategoryValidation(BaseModel):
    """The validator's verdict on one category."""

    original_score: int | None = None
    validator_score: int | None = None
    agreement: Literal["agree", "partial", "disagree"] = "partial"
    adjusted_score: int | None = None
    reason: str = ""

    @field_validator("original_score", "validator_score", "adjusted_score", mode="before")
    @classmethod
    def _clamp_optional(cls, value: Any) -> int | None:
        if value is None:
            return None
        return clamp_score(value)

    @field_validator("agreement", mode="before")
    @classmethod
    def _normalize_agreement(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in ("agree", "partial", "disagree") else "partial"


class OverstatedIssue(BaseModel):
    """An issue the validator considers exaggerated."""

    original_issue: str = ""
    reason: str = ""


class CrossValidation(BaseModel):
    """Structured output expected from the validator model."""

    validation_results: dict[str, CategoryValidation] = Field(default_factory=dict)
    missed_issues: list[Issue] = Field(default_factory=list)
    overestimated_issues: list[OverstatedIssue] = Field(default_factory=list)
    calibrated_overall_score: int | None = None
    confidence: int = 70
    summary: str = ""

    @field_validator("calibrated_overall_score", mode="before")
    @classmethod
    def _clamp_overall(cls, value: Any) -> int | None:
        if value is None:
            return None
        return clamp_score(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> int:
        return clamp_score(value, default=70)


class CalibratedScores(BaseModel):
    """Per-agent calibrated scores plus the final overall score."""

    categories: dict[str, int]
    overall: int


class CrossValidateResult(BaseModel):
    """Step 4 output."""

    cross_validation: CrossValidation
    calibrated_scores: CalibratedScores
    degraded: bool = False
    validated_at: datetime = Field(default_factory=utc_now)
