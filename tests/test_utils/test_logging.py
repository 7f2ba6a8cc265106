"""Tests for the structured logging utilities."""

import logging
import time

import pytest

from sheetlink.utils.logging import (
    LogContext,
    PerformanceMetrics,
    StructuredLogFormatter,
    StructuredLogger,
    clear_context,
    get_extra_context,
    get_logger,
    get_request_id,
    set_extra_context,
    set_request_id,
    timed_operation,
)


class TestContextVariables:
    """Tests for context variable management."""

    def setup_method(self) -> None:
        """Clear context before each test."""
        clear_context()

    def teardown_method(self) -> None:
        """Clear context after each test."""
        clear_context()

    def test_request_id_default_none(self) -> None:
        assert get_request_id() is None

    def test_set_and_get_request_id(self) -> None:
        set_request_id("req-123")
        assert get_request_id() == "req-123"

    def test_extra_context_default_empty(self) -> None:
        assert get_extra_context() == {}

    def test_clear_context(self) -> None:
        set_request_id("req-123")
        set_extra_context({"operation": "merge"})
        clear_context()
        assert get_request_id() is None
        assert get_extra_context() == {}


class TestLogContext:
    """Tests for the LogContext manager."""

    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def test_adds_and_restores_context(self) -> None:
        set_extra_context({"outer": 1})
        with LogContext(operation="extract"):
            assert get_extra_context() == {"outer": 1, "operation": "extract"}
        assert get_extra_context() == {"outer": 1}

    def test_request_id_is_scoped(self) -> None:
        set_request_id("outer")
        with LogContext(request_id="inner", operation="merge"):
            assert get_request_id() == "inner"
            assert "request_id" not in get_extra_context()
        assert get_request_id() == "outer"

    def test_nested_contexts(self) -> None:
        with LogContext(a=1):
            with LogContext(b=2):
                assert get_extra_context() == {"a": 1, "b": 2}
            assert get_extra_context() == {"a": 1}


class TestStructuredLogFormatter:
    """Tests for the structured formatter."""

    def teardown_method(self) -> None:
        clear_context()

    def _record(self, message: str) -> logging.LogRecord:
        return logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg=message,
            args=(),
            exc_info=None,
        )

    def test_no_prefix_without_context(self) -> None:
        formatter = StructuredLogFormatter("%(message)s")
        assert formatter.format(self._record("hello")) == "hello"

    def test_prefixes_request_id_and_context(self) -> None:
        set_request_id("req-1")
        set_extra_context({"operation": "extract"})
        formatter = StructuredLogFormatter("%(message)s")
        record = self._record("hello")

        assert formatter.format(record) == "[request_id=req-1 operation=extract] hello"
        assert record.msg == "hello"


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_get_logger(self) -> None:
        logger = get_logger("sheetlink.test")
        assert isinstance(logger, StructuredLogger)
        assert logger.logger.name == "sheetlink.test"

    def test_renders_key_value_pairs(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("sheetlink.test")
        with caplog.at_level(logging.INFO, logger="sheetlink.test"):
            logger.info("Workbook loaded", rows=3, sheet="Data")
        assert "Workbook loaded | rows=3, sheet=Data" in caplog.text

    def test_processing_result_success_is_info(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        logger = get_logger("sheetlink.test")
        with caplog.at_level(logging.INFO, logger="sheetlink.test"):
            logger.log_processing_result("extract", True, total_rows=2, links=2)

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert "operation=extract" in record.getMessage()
        assert "error_code" not in record.getMessage()

    def test_processing_result_failure_is_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        logger = get_logger("sheetlink.test")
        with caplog.at_level(logging.INFO, logger="sheetlink.test"):
            logger.log_processing_result(
                "merge", False, total_rows=0, links=0, error_code="E002"
            )

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert "error_code=E002" in record.getMessage()


class TestPerformanceMetrics:
    """Tests for PerformanceMetrics and timed_operation."""

    def test_finish_sets_duration(self) -> None:
        metrics = PerformanceMetrics(operation="extract")
        time.sleep(0.01)
        metrics.finish()
        assert metrics.end_time is not None
        assert metrics.duration_seconds > 0

    def test_to_dict_omits_zero_counters(self) -> None:
        metrics = PerformanceMetrics(operation="extract")
        assert set(metrics.to_dict()) == {"operation", "duration_seconds"}

        metrics.rows_processed = 4
        metrics.links = 2
        data = metrics.to_dict()
        assert data["rows_processed"] == 4
        assert data["links"] == 2

    def test_timed_operation_logs_performance(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        logger = get_logger("sheetlink.test")
        with caplog.at_level(logging.INFO, logger="sheetlink.test"):
            with timed_operation(logger, "merge") as metrics:
                metrics.rows_processed = 7

        assert metrics.end_time is not None
        assert "Performance: merge" in caplog.text
        assert "rows_processed=7" in caplog.text
