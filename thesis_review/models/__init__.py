"""
Pipeline data models.

Exports the Job wire contract, per-step result payloads and the final report.
"""

from thesis_review.models.broker import BrokerCallback
from thesis_review.models.document import (
    DebitResult,
    DocumentRecord,
    DocumentStatus,
    RefundClaim,
)
from thesis_review.models.job import Job, JobState, JobStatus, Tier, utc_now
from thesis_review.models.report import (
    CategoryScore,
    FinalAnalysisResult,
    Grade,
    IssueBuckets,
    ReportMetadata,
)
from thesis_review.models.results import (
    AgentAssessment,
    AgentResult,
    CalibratedScores,
    CategoryValidation,
    CrossValidateResult,
    CrossValidation,
    DeepAnalyzeResult,
    DocumentProfile,
    ExtractResult,
    Issue,
    ModelClass,
    PreAnalyzeResult,
    ReferenceSummary,
    Section,
    StructureAssessment,
)

__all__ = [
    "BrokerCallback",
    "DebitResult",
    "DocumentRecord",
    "DocumentStatus",
    "RefundClaim",
    "Job",
    "JobState",
    "JobStatus",
    "Tier",
    "utc_now",
    "AgentAssessment",
    "AgentResult",
    "CalibratedScores",
    "CategoryValidation",
    "CrossValidateResult",
    "CrossValidation",
    "DeepAnalyzeResult",
    "DocumentProfile",
    "ExtractResult",
    "Issue",
    "ModelClass",
    "PreAnalyzeResult",
    "ReferenceSummary",
    "Section",
    "StructureAssessment",
    "CategoryScore",
    "FinalAnalysisResult",
    "Grade",
    "IssueBuckets",
    "ReportMetadata",
]
