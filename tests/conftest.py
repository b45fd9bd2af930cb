"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory status store, recording queue, scripted language model,
in-memory SQLite primary record store and credit ledger, wired stage handlers
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import json
import uuid
from typing import Any

import pytest
from pydantic import BaseModel

from thesis_review.application.services.analysis_service import AnalysisService
from thesis_review.application.services.failure_handler import JobFailureHandler
from thesis_review.application.stages import (
    CrossValidateStage,
    DeepAnalyzeStage,
    ExtractStage,
    GenerateReportStage,
    PreAnalyzeStage,
    StageDependencies,
)
from thesis_review.boundary.cache.status_store import StatusStore
from thesis_review.boundary.queue.base import JobQueue
from thesis_review.boundary.llm.client import LanguageModelClient
from thesis_review.boundary.storage.document_source import DocumentSource, PlainTextExtractor
from thesis_review.configs.pipeline import PipelineSettings
from thesis_review.core.agents.cross_validator import CrossValidator
from thesis_review.core.agents.evaluator import MultiAgentEvaluator
from thesis_review.core.agents.prompts import CROSS_VALIDATION_SYSTEM_PROMPT
from thesis_review.core.agents.registry import AGENT_REGISTRY
from thesis_review.core.exceptions import DocumentNotFoundError, LLMProviderError
from thesis_review.core.pipeline.stages import PipelineStage
from thesis_review.core.report.aggregator import ReportAggregator
from thesis_review.models.job import Job, JobState, JobStatus
from thesis_review.models.results import ModelClass

SAMPLE_THESIS = (
    "ÖZET\nBu çalışma yapay zeka destekli tez değerlendirmesini incelemektedir.\n\n"
    "1. GİRİŞ\nTez değerlendirme süreçleri uzun ve öznel olabilmektedir.\n\n"
    "2. LİTERATÜR TARAMASI\nÖnceki çalışmalar otomatik puanlama yöntemlerini ele almıştır.\n\n"
    "3. YÖNTEM\nKarma yöntem yaklaşımı kullanılmış, 120 katılımcı ile anket yapılmıştır.\n\n"
    "4. BULGULAR\nKatılımcıların yüzde sekseni sistemi faydalı bulmuştur.\n\n"
    "5. TARTIŞMA\nBulgular literatürle uyumludur.\n\n"
    "6. SONUÇ\nSistem tez değerlendirmesini hızlandırmaktadır.\n\n"
    "KAYNAKÇA\nYılmaz, A. (2021). Otomatik değerlendirme. Eğitim Dergisi, 12(3), 45-60.\n"
)


class InMemoryStatusStore(StatusStore):
    """Dict-backed status store with the same failed-status guard as Redis."""

    def __init__(self) -> None:
        self.statuses: dict[str, JobStatus] = {}
        self.results: dict[tuple[str, int], str] = {}
        self.history: list[JobStatus] = []
        self.cleaned: list[str] = []

    async def set_status(self, job_id: str, status: JobStatus) -> bool:
        current = self.statuses.get(job_id)
        if current is not None and current.is_terminal_failure and status.status != JobState.FAILED:
            return False
        self.statuses[job_id] = status
        self.history.append(status)
        return True

    async def get_status(self, job_id: str) -> JobStatus | None:
        return self.statuses.get(job_id)

    async def set_result(self, job_id: str, step: int, value: BaseModel) -> None:
        self.results[(job_id, step)] = value.model_dump_json()

    async def get_result(self, job_id: str, step: int, model):
        raw = self.results.get((job_id, step))
        return model.model_validate_json(raw) if raw is not None else None

    async def cleanup(self, job_id: str) -> int:
        keys = [key for key in self.results if key[0] == job_id]
        for key in keys:
            del self.results[key]
        removed = len(keys)
        if self.statuses.pop(job_id, None) is not None:
            removed += 1
        self.cleaned.append(job_id)
        return removed


class RecordingQueue(JobQueue):
    """Queue that records published messages and honors deduplication IDs."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, Job]] = []
        self.dedup_ids: dict[str, str] = {}
        self.timeouts: dict[str, int | None] = {}
        self.error: Exception | None = None

    async def enqueue(
        self,
        path: str,
        job: Job,
        deduplication_id: str | None = None,
        timeout_seconds: int | None = None,
    ) -> str:
        if self.error is not None:
            raise self.error
        if deduplication_id and deduplication_id in self.dedup_ids:
            return self.dedup_ids[deduplication_id]
        message_id = f"msg_{len(self.messages) + 1}"
        self.messages.append((path, job))
        self.timeouts[path] = timeout_seconds
        if deduplication_id:
            self.dedup_ids[deduplication_id] = message_id
        return message_id

    def pop(self) -> tuple[str, Job]:
        return self.messages.pop(0)


class ScriptedLanguageModel(LanguageModelClient):
    """
    Language model returning canned responses.

    Responses are keyed by ``structure_assessment``, ``reference_extraction``,
    ``cross_validation`` or an agent id. A value that is an exception is
    raised instead of returned.
    """

    _AGENT_BY_SYSTEM_PROMPT = {config.system_prompt: config.agent_id for config in AGENT_REGISTRY}

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    def key_for(self, prompt: str, system_prompt: str | None) -> str:
        if system_prompt == CROSS_VALIDATION_SYSTEM_PROMPT:
            return "cross_validation"
        if system_prompt in self._AGENT_BY_SYSTEM_PROMPT:
            return self._AGENT_BY_SYSTEM_PROMPT[system_prompt]
        if prompt.startswith("Analyze the structure"):
            return "structure_assessment"
        return "reference_extraction"

    async def generate(self, model: ModelClass, prompt: str, system_prompt: str | None = None) -> str:
        key = self.key_for(prompt, system_prompt)
        self.calls.append(key)
        response = self.responses.get(key)
        if response is None:
            raise LLMProviderError(f"No scripted response for {key}", model_id=model.value)
        if isinstance(response, Exception):
            raise response
        return response

    def model_id(self, model: ModelClass) -> str:
        return f"test-{model.value}"


class InMemoryDocumentSource(DocumentSource):
    """Document source over a dict of file refs."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = dict(files or {})

    async def fetch(self, file_ref: str) -> bytes:
        if file_ref not in self.files:
            raise DocumentNotFoundError(file_ref)
        return self.files[file_ref]


def agent_response(score: int, issues: list[dict] | None = None, strengths: list[str] | None = None) -> str:
    """JSON body of a well-formed agent answer."""
    return json.dumps(
        {
            "score": score,
            "sub_scores": {"overall": score},
            "issues": issues or [],
            "strengths": strengths or [],
            "feedback": f"Scored {score}.",
        }
    )


STRUCTURE_ASSESSMENT = (
    '{"has_abstract": true, "has_introduction": true, "has_methodology": true, '
    '"has_conclusion": true, "has_references": true, "structure_score": 78, '
    '"structure_issues": ["Discussion section is short"], "language": "tr", '
    '"academic_level": "master", "field_of_study": "Education"}'
)

REFERENCE_EXTRACTION = (
    '{"references": [{"raw": "Yılmaz, A. (2021).", "type": "journal", "year": 2021, '
    '"is_recent": true}], "total_count": 1, "recent_count": 1, "oldest_year": 2021, '
    '"newest_year": 2021, "type_distribution": {"journal": 1}}'
)


def default_responses() -> dict[str, Any]:
    return {
        "structure_assessment": STRUCTURE_ASSESSMENT,
        "reference_extraction": REFERENCE_EXTRACTION,
        "structure": agent_response(80, strengths=["Clear chapter layout"]),
        "methodology": agent_response(
            70,
            issues=[
                {
                    "severity": "critical",
                    "category": "methodology",
                    "description": "Sample selection is not justified",
                    "suggestion": "Explain the sampling strategy",
                }
            ],
        ),
        "writing": agent_response(85, strengths=["Fluent academic Turkish"]),
        "references": agent_response(60, strengths=["Clear chapter layout"]),
        "originality": agent_response(80),
    }


@pytest.fixture
def pipeline_settings() -> PipelineSettings:
    """Pipeline settings with defaults, independent of the environment."""
    return PipelineSettings()


@pytest.fixture
def status_store() -> InMemoryStatusStore:
    return InMemoryStatusStore()


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def llm() -> ScriptedLanguageModel:
    return ScriptedLanguageModel(default_responses())


@pytest.fixture
def document_source() -> InMemoryDocumentSource:
    return InMemoryDocumentSource({"uploads/thesis.txt": SAMPLE_THESIS.encode("utf-8")})


@pytest.fixture
async def session_factory():
    """
    In-memory SQLite primary record store.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    import thesis_review.boundary.db.models  # noqa: F401  (register tables)
    from thesis_review.boundary.db.base import Base
    from thesis_review.boundary.db.connection import get_async_session_factory

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield get_async_session_factory(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def record_store(session_factory):
    from thesis_review.boundary.db.record_store import SqlRecordStore

    return SqlRecordStore(session_factory)


@pytest.fixture
def ledger(session_factory):
    from thesis_review.boundary.ledger.credit_ledger import SqlCreditLedger

    return SqlCreditLedger(session_factory)


@pytest.fixture
def owner_id() -> str:
    return f"owner-{uuid.uuid4().hex[:8]}"


@pytest.fixture
async def funded_owner(session_factory, owner_id) -> str:
    """Owner profile holding 100 credits."""
    from thesis_review.boundary.db.CRUD import profile_crud

    async with session_factory() as session:
        await profile_crud.create(session, id=owner_id, credits=100)
        await session.commit()
    return owner_id


@pytest.fixture
def failure_handler(status_store, record_store, ledger) -> JobFailureHandler:
    return JobFailureHandler(status_store, record_store, ledger)


@pytest.fixture
def stage_deps(status_store, record_store, queue, failure_handler, pipeline_settings) -> StageDependencies:
    return StageDependencies(
        status_store=status_store,
        record_store=record_store,
        queue=queue,
        failure_handler=failure_handler,
        settings=pipeline_settings,
    )


@pytest.fixture
def stages(stage_deps, llm, document_source, pipeline_settings) -> dict:
    """Every stage handler wired to the in-memory collaborators, keyed by path."""
    handlers = [
        ExtractStage(stage_deps, document_source, [PlainTextExtractor()]),
        PreAnalyzeStage(stage_deps, llm),
        DeepAnalyzeStage(stage_deps, MultiAgentEvaluator(llm, timeout_seconds=5), llm),
        CrossValidateStage(stage_deps, CrossValidator(llm)),
        GenerateReportStage(stage_deps, ReportAggregator(pipeline_settings)),
    ]
    return {handler.definition.path: handler for handler in handlers}


@pytest.fixture
def analysis_service(status_store, record_store, ledger, queue, failure_handler, pipeline_settings):
    return AnalysisService(
        status_store=status_store,
        record_store=record_store,
        ledger=ledger,
        queue=queue,
        failure_handler=failure_handler,
        settings=pipeline_settings,
    )


@pytest.fixture
def drain(queue, stages):
    """Deliver queued messages to their stage handlers until the queue is empty."""

    async def run(limit: int = 10) -> list[PipelineStage]:
        ran = []
        while queue.messages and len(ran) < limit:
            path, job = queue.pop()
            handler = stages[path]
            await handler.handle(job)
            ran.append(handler.stage)
        return ran

    return run
