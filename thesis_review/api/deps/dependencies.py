"""
Dependency injection container.

Builds the long-lived collaborators (stores, queue client, model client,
stage handlers) once per process and exposes them as FastAPI dependencies.

Dependencies: thesis_review.configs, thesis_review.application, thesis_review.boundary
System role: DI container for service injection
"""

from sqlalchemy.ext.asyncio import async_sessionmaker

from thesis_review.application.services.analysis_service import AnalysisService
from thesis_review.application.services.failure_handler import JobFailureHandler
from thesis_review.application.stages import (
    CrossValidateStage,
    DeepAnalyzeStage,
    ExtractStage,
    GenerateReportStage,
    PreAnalyzeStage,
    StageDependencies,
    StageHandler,
)
from thesis_review.boundary.cache.status_store import RedisStatusStore, StatusStore
from thesis_review.boundary.db.connection import get_async_engine, get_async_session_factory
from thesis_review.boundary.db.record_store import SqlRecordStore
from thesis_review.boundary.ledger.credit_ledger import SqlCreditLedger
from thesis_review.boundary.llm.client import LangChainModelClient
from thesis_review.boundary.queue.qstash import QStashQueue
from thesis_review.boundary.queue.signature import SignatureVerifier
from thesis_review.boundary.storage.document_source import PlainTextExtractor, S3DocumentSource
from thesis_review.configs import Settings, get_settings
from thesis_review.core.agents.cross_validator import CrossValidator
from thesis_review.core.agents.evaluator import MultiAgentEvaluator
from thesis_review.core.pipeline.stages import PipelineStage
from thesis_review.core.report.aggregator import ReportAggregator


class ServiceCache:
    """Container for cached service instances, built lazily."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._engine = None
        self._session_factory = None
        self._status_store = None
        self._record_store = None
        self._ledger = None
        self._queue = None
        self._llm = None
        self._verifier = None
        self._failure_handler = None
        self._stages: dict[PipelineStage, StageHandler] = {}
        self._analysis_service = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def status_store(self) -> RedisStatusStore:
        if self._status_store is None:
            self._status_store = RedisStatusStore(self.settings.cache)
        return self._status_store

    @property
    def session_factory(self) -> async_sessionmaker:
        """Session factory shared by the record store and the ledger (one engine)."""
        if self._session_factory is None:
            self._engine = get_async_engine()
            self._session_factory = get_async_session_factory(self._engine)
        return self._session_factory

    @property
    def record_store(self) -> SqlRecordStore:
        if self._record_store is None:
            self._record_store = SqlRecordStore(self.session_factory)
        return self._record_store

    @property
    def ledger(self) -> SqlCreditLedger:
        if self._ledger is None:
            self._ledger = SqlCreditLedger(self.session_factory)
        return self._ledger

    @property
    def queue(self) -> QStashQueue:
        if self._queue is None:
            self._queue = QStashQueue(self.settings.queue)
        return self._queue

    @property
    def llm(self) -> LangChainModelClient:
        if self._llm is None:
            self._llm = LangChainModelClient(self.settings.llm)
        return self._llm

    @property
    def verifier(self) -> SignatureVerifier:
        if self._verifier is None:
            self._verifier = SignatureVerifier(self.settings.queue)
        return self._verifier

    @property
    def failure_handler(self) -> JobFailureHandler:
        if self._failure_handler is None:
            self._failure_handler = JobFailureHandler(
                self.status_store, self.record_store, self.ledger
            )
        return self._failure_handler

    def stage_dependencies(self) -> StageDependencies:
        return StageDependencies(
            status_store=self.status_store,
            record_store=self.record_store,
            queue=self.queue,
            failure_handler=self.failure_handler,
            settings=self.settings.pipeline,
        )

    def stage(self, stage: PipelineStage) -> StageHandler:
        """Get the cached handler of a stage."""
        if stage not in self._stages:
            self._stages[stage] = self._build_stage(stage)
        return self._stages[stage]

    def _build_stage(self, stage: PipelineStage) -> StageHandler:
        deps = self.stage_dependencies()
        pipeline = self.settings.pipeline
        if stage == PipelineStage.EXTRACT:
            return ExtractStage(
                deps,
                S3DocumentSource(self.settings.storage),
                [PlainTextExtractor()],
            )
        if stage == PipelineStage.PRE_ANALYZE:
            return PreAnalyzeStage(deps, self.llm)
        if stage == PipelineStage.DEEP_ANALYZE:
            evaluator = MultiAgentEvaluator(
                self.llm,
                timeout_seconds=self.settings.llm.call_timeout_seconds,
                neutral_score=pipeline.neutral_agent_score,
                text_windows={"structure": pipeline.structure_agent_chars},
            )
            return DeepAnalyzeStage(deps, evaluator, self.llm)
        if stage == PipelineStage.CROSS_VALIDATE:
            validator = CrossValidator(
                self.llm,
                text_chars=pipeline.cross_validation_chars,
                fallback_confidence=pipeline.fallback_confidence,
            )
            return CrossValidateStage(deps, validator)
        return GenerateReportStage(deps, ReportAggregator(pipeline))

    @property
    def analysis_service(self) -> AnalysisService:
        if self._analysis_service is None:
            self._analysis_service = AnalysisService(
                status_store=self.status_store,
                record_store=self.record_store,
                ledger=self.ledger,
                queue=self.queue,
                failure_handler=self.failure_handler,
                settings=self.settings.pipeline,
            )
        return self._analysis_service

    async def close(self) -> None:
        """Close network clients and drop every cached instance."""
        if self._status_store is not None:
            await self._status_store.close()
        if self._queue is not None:
            await self._queue.close()
        if self._engine is not None:
            await self._engine.dispose()
        self.__init__(self._settings)


_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_status_store() -> StatusStore:
    return get_service_cache().status_store


def get_signature_verifier() -> SignatureVerifier:
    return get_service_cache().verifier


def get_analysis_service() -> AnalysisService:
    return get_service_cache().analysis_service


def get_extract_stage() -> StageHandler:
    return get_service_cache().stage(PipelineStage.EXTRACT)


def get_pre_analyze_stage() -> StageHandler:
    return get_service_cache().stage(PipelineStage.PRE_ANALYZE)


def get_deep_analyze_stage() -> StageHandler:
    return get_service_cache().stage(PipelineStage.DEEP_ANALYZE)


def get_cross_validate_stage() -> StageHandler:
    return get_service_cache().stage(PipelineStage.CROSS_VALIDATE)


def get_generate_report_stage() -> StageHandler:
    return get_service_cache().stage(PipelineStage.GENERATE_REPORT)
