"""Tests for job-scoped logging helpers and correlation IDs."""

import logging

from starlette.requests import Request

from thesis_review.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from thesis_review.observability.log_utils import (
    MAX_LOG_VALUE_CHARS,
    job_context,
    log_job_exception,
    safe_log_value,
)
from thesis_review.observability.logger import CorrelationIdFilter
from thesis_review.observability.middleware import delivery_fields


class TestSafeLogValue:
    """Tests for safe_log_value."""

    def test_scalars_pass_through(self) -> None:
        assert safe_log_value(None) is None
        assert safe_log_value(42) == 42
        assert safe_log_value(True) is True
        assert safe_log_value("short") == "short"

    def test_collections_collapse_to_size(self) -> None:
        assert safe_log_value([1, 2, 3]) == "list(3 items)"
        assert safe_log_value({"a": 1}) == "dict(1 keys)"

    def test_long_strings_are_truncated(self) -> None:
        value = safe_log_value("x" * (MAX_LOG_VALUE_CHARS + 50))

        assert value.startswith("x" * MAX_LOG_VALUE_CHARS + "...")
        assert value.endswith(f"({MAX_LOG_VALUE_CHARS + 50} chars)")


class TestJobContext:
    """Tests for job_context and log_job_exception."""

    def test_context_carries_job_and_stage(self) -> None:
        extra = job_context("job-1", "extract", attempts=2, body="y" * 1000)

        assert extra["job_id"] == "job-1"
        assert extra["stage"] == "extract"
        assert extra["attempts"] == 2
        assert len(extra["body"]) < 1000

    def test_stage_is_omitted_when_absent(self) -> None:
        assert "stage" not in job_context(None)

    def test_exception_is_logged_with_traceback(self, caplog) -> None:
        logger = logging.getLogger("tests.log_utils")

        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            with caplog.at_level(logging.ERROR, logger="tests.log_utils"):
                log_job_exception(logger, "stage crashed", e, "job-1", "report")

        record = caplog.records[-1]
        assert record.job_id == "job-1"
        assert record.stage == "report"
        assert record.error_type == "RuntimeError"
        assert record.exc_info is not None


class TestCorrelation:
    """Tests for correlation ID context."""

    def test_set_and_clear(self) -> None:
        assert set_correlation_id("job-7") == "job-7"
        assert get_correlation_id() == "job-7"

        clear_correlation_id()

        assert get_correlation_id() == ""

    def test_generated_when_missing(self) -> None:
        generated = set_correlation_id()

        assert generated
        clear_correlation_id()

    def test_filter_defaults_to_dash(self) -> None:
        clear_correlation_id()
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert CorrelationIdFilter().filter(record)
        assert record.correlation_id == "-"


class TestDeliveryFields:
    """Tests for broker delivery metadata extraction."""

    @staticmethod
    def _request(headers: dict):
        raw = [(key.lower().encode(), value.encode()) for key, value in headers.items()]
        return Request({"type": "http", "method": "POST", "path": "/", "headers": raw})

    def test_broker_delivery(self) -> None:
        fields = delivery_fields(self._request({"Upstash-Message-Id": "msg_9", "Upstash-Retried": "2"}))

        assert fields == {"message_id": "msg_9", "retried": 2}

    def test_direct_call(self) -> None:
        assert delivery_fields(self._request({"X-Correlation-ID": "c"})) == {}
