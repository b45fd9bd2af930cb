"""
Test suite for configuration modules.

System role: Verification of settings defaults and cross-field validation
"""

import pytest
from pydantic import ValidationError

from thesis_review.configs import Settings
from thesis_review.configs.cache import CacheSettings
from thesis_review.configs.database import DatabaseSettings
from thesis_review.configs.pipeline import PipelineSettings
from thesis_review.configs.queue import QueueSettings
from thesis_review.core.pipeline.stages import PipelineStage


class TestSettings:
    """Test suite for the aggregated Settings."""

    def test_defaults_should_validate(self) -> None:
        settings = Settings()

        assert settings.cache.ttl_seconds > settings.pipeline.worst_case_pipeline_seconds

    def test_ttl_shorter_than_retried_pipeline_should_be_rejected(self) -> None:
        """Test a TTL that expires before four full attempts of every stage fails validation."""
        with pytest.raises(ValidationError):
            Settings(cache=CacheSettings(ttl_seconds=2000), queue=QueueSettings(retries=3))

    def test_ttl_accounts_for_retries(self) -> None:
        settings = Settings(cache=CacheSettings(ttl_seconds=2000), queue=QueueSettings(retries=0))

        assert settings.cache.ttl_seconds == 2000

    def test_log_level_should_be_normalized(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_should_be_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")


class TestQueueSettings:
    """Test suite for QueueSettings."""

    def test_endpoint_url_joins_base_prefix_and_path(self) -> None:
        settings = QueueSettings(public_base_url="https://reviews.example.com/", api_prefix="/api")

        assert settings.endpoint_url("/jobs/extract-text") == "https://reviews.example.com/api/jobs/extract-text"

    def test_signing_enabled_follows_current_key(self) -> None:
        assert not QueueSettings(current_signing_key="").signing_enabled
        assert QueueSettings(current_signing_key="k").signing_enabled


class TestDatabaseSettings:
    """Test suite for DatabaseSettings.async_database_url."""

    def test_url_from_parts(self) -> None:
        settings = DatabaseSettings(host="db", port=5433, user="u", password="p", db="reviews", url=None)

        assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5433/reviews?"

    def test_ssl_required(self) -> None:
        settings = DatabaseSettings(host="db", user="u", password="p", db="r", sslmode="require", url=None)

        assert settings.async_database_url.endswith("?ssl=require")

    @pytest.mark.parametrize(
        "dsn",
        [
            "postgres://u:p@db.example.com:5432/postgres",
            "postgresql://u:p@db.example.com:5432/postgres",
            "postgresql+asyncpg://u:p@db.example.com:5432/postgres",
        ],
    )
    def test_dsn_is_rewritten_to_asyncpg(self, dsn) -> None:
        settings = DatabaseSettings(url=dsn)

        assert settings.async_database_url == "postgresql+asyncpg://u:p@db.example.com:5432/postgres"


class TestPipelineSettings:
    def test_worst_case_is_sum_of_stage_budgets(self) -> None:
        settings = PipelineSettings(
            extract_budget_seconds=1,
            pre_analyze_budget_seconds=2,
            deep_analyze_budget_seconds=3,
            cross_validate_budget_seconds=4,
            report_budget_seconds=5,
        )

        assert settings.worst_case_pipeline_seconds == 15

    def test_budget_seconds_by_stage(self) -> None:
        settings = PipelineSettings(deep_analyze_budget_seconds=240, report_budget_seconds=45)

        assert settings.budget_seconds(PipelineStage.DEEP_ANALYZE) == 240
        assert settings.budget_seconds("generate_report") == 45

    def test_budget_seconds_rejects_unknown_stage(self) -> None:
        with pytest.raises(KeyError):
            PipelineSettings().budget_seconds("upload")
