"""
Pre-analyze stage (step 2).

Two independent fast-model calls: a structural assessment over the start of
the text and a bibliography extraction over its end. Either call degrades to
a heuristic fallback built from the extract stage's section list.

Dependencies: thesis_review.boundary.llm, thesis_review.core.pipeline
System role: Second pipeline stage
"""

import asyncio
import logging

from pydantic import BaseModel

from thesis_review.application.stages.base import StageDependencies, StageHandler
from thesis_review.boundary.llm.client import LanguageModelClient
from thesis_review.core.agents.prompts import (
    reference_extraction_prompt,
    structure_assessment_prompt,
)
from thesis_review.core.exceptions import LLMProviderError
from thesis_review.core.pipeline.parse_result import Degraded, ParseResult, parse_model_output
from thesis_review.core.pipeline.stages import PipelineStage
from thesis_review.models.job import Job, utc_now
from thesis_review.models.results import (
    DocumentProfile,
    ExtractResult,
    ModelClass,
    PreAnalyzeResult,
    ReferenceSummary,
    Section,
    StructureAssessment,
)

logger = logging.getLogger(__name__)


def fallback_structure(sections: list[Section], structure_score: int = 70) -> StructureAssessment:
    """Structural assessment derived from detected sections alone."""
    found = {section.type for section in sections}
    return StructureAssessment(
        has_abstract="abstract" in found,
        has_introduction="introduction" in found,
        has_literature_review="literature_review" in found,
        has_methodology="methodology" in found,
        has_results="results" in found,
        has_discussion="discussion" in found,
        has_conclusion="conclusion" in found,
        has_references="references" in found,
        structure_score=structure_score,
    )


class PreAnalyzeStage(StageHandler):
    """Structural assessment and reference extraction."""

    stage = PipelineStage.PRE_ANALYZE
    result_model = PreAnalyzeResult

    def __init__(self, deps: StageDependencies, llm: LanguageModelClient) -> None:
        super().__init__(deps)
        self._llm = llm

    async def run(self, job: Job) -> PreAnalyzeResult:
        settings = self.deps.settings
        extract = await self.require(job, 1, ExtractResult)
        text = extract.text

        structure, references = await asyncio.gather(
            self._ask(
                structure_assessment_prompt(text[: settings.structure_prefix_chars]),
                StructureAssessment,
                lambda: fallback_structure(extract.sections, settings.fallback_structure_score),
            ),
            self._ask(
                reference_extraction_prompt(
                    text[-settings.references_suffix_chars :],
                    current_year=utc_now().year,
                ),
                ReferenceSummary,
                ReferenceSummary,
            ),
        )

        for name, parsed in (("structure", structure), ("references", references)):
            if isinstance(parsed, Degraded):
                logger.warning(
                    f"run - {name} assessment degraded to fallback",
                    extra={"job_id": job.job_id, "error": parsed.error},
                )

        assessment = structure.value
        return PreAnalyzeResult(
            structure=assessment,
            references=references.value,
            metadata=DocumentProfile(
                word_count=extract.word_count,
                estimated_pages=extract.estimated_page_count,
                section_count=len(extract.sections),
                language=assessment.language,
                academic_level=assessment.academic_level,
                field_of_study=assessment.field_of_study,
            ),
            structure_degraded=structure.degraded,
            references_degraded=references.degraded,
        )

    async def _ask(self, prompt: str, model: type[BaseModel], fallback) -> ParseResult:
        try:
            raw = await self._llm.generate(ModelClass.FAST, prompt)
        except LLMProviderError as e:
            return Degraded(fallback(), e.message)
        return parse_model_output(raw, model, fallback)

    def summarize(self, result: PreAnalyzeResult) -> dict:
        return {
            "structure_score": result.structure.structure_score,
            "reference_count": result.references.total_count,
            "language": result.structure.language,
        }
