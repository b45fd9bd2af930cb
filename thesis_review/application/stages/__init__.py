"""Pipeline stage handlers."""

from thesis_review.application.stages.base import StageDependencies, StageHandler, StageOutcome
from thesis_review.application.stages.cross_validate import CrossValidateStage
from thesis_review.application.stages.deep_analyze import DeepAnalyzeStage
from thesis_review.application.stages.extract import ExtractStage
from thesis_review.application.stages.generate_report import GenerateReportStage
from thesis_review.application.stages.pre_analyze import PreAnalyzeStage

__all__ = [
    "StageDependencies",
    "StageHandler",
    "StageOutcome",
    "CrossValidateStage",
    "DeepAnalyzeStage",
    "ExtractStage",
    "GenerateReportStage",
    "PreAnalyzeStage",
]
