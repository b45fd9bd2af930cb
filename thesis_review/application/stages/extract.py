"""
Extract stage (step 1).

Fetches the uploaded file, extracts its text, computes word/char/page counts
and detects section headings. Too little text is a fatal, user-correctable
failure.

Dependencies: thesis_review.boundary.storage, thesis_review.core.pipeline
System role: First pipeline stage
"""

import logging

from thesis_review.application.stages.base import StageDependencies, StageHandler
from thesis_review.boundary.storage.document_source import (
    DocumentSource,
    TextExtractor,
    file_extension,
)
from thesis_review.core.exceptions import (
    DocumentNotFoundError,
    InsufficientContentError,
    PipelineFatalError,
    UnsupportedFormatError,
)
from thesis_review.core.pipeline.sections import count_words, detect_sections
from thesis_review.core.pipeline.stages import PipelineStage, estimate_page_count
from thesis_review.models.job import Job
from thesis_review.models.results import ExtractResult

logger = logging.getLogger(__name__)


class ExtractStage(StageHandler):
    """Text extraction and section detection."""

    stage = PipelineStage.EXTRACT
    result_model = ExtractResult

    def __init__(
        self,
        deps: StageDependencies,
        source: DocumentSource,
        extractors: list[TextExtractor],
    ) -> None:
        super().__init__(deps)
        self._source = source
        self._extractors = extractors

    async def run(self, job: Job) -> ExtractResult:
        settings = self.deps.settings
        extractor = next(
            (candidate for candidate in self._extractors if candidate.supports(job.source_file_name)),
            None,
        )
        if extractor is None:
            raise UnsupportedFormatError(job.job_id, file_extension(job.source_file_name) or "unknown")

        try:
            data = await self._source.fetch(job.source_file_ref)
        except DocumentNotFoundError as e:
            raise PipelineFatalError("Uploaded file could not be found", job.job_id) from e

        text = extractor.extract(data, job.source_file_name).strip()
        if len(text) < settings.min_text_chars:
            raise InsufficientContentError(job.job_id, len(text), settings.min_text_chars)

        result = ExtractResult(
            text=text,
            word_count=count_words(text),
            char_count=len(text),
            estimated_page_count=estimate_page_count(len(text), settings.chars_per_page),
            sections=detect_sections(text),
        )
        logger.info(
            "run - Text extracted",
            extra={
                "job_id": job.job_id,
                "char_count": result.char_count,
                "section_count": len(result.sections),
            },
        )
        return result

    def summarize(self, result: ExtractResult) -> dict:
        return {
            "word_count": result.word_count,
            "page_count": result.estimated_page_count,
            "section_count": len(result.sections),
        }
