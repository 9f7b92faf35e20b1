"""Tests for structured logging."""

import json
import logging
import sys

from tunescope.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


def _record(msg: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="tunescope.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        assert set_correlation_id("test-123-abc") == "test-123-abc"
        assert get_correlation_id() == "test-123-abc"

    def test_blank_value_generates_uuid(self):
        result = set_correlation_id("   ")
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_none_generates_uuid(self):
        first = set_correlation_id(None)
        second = set_correlation_id(None)
        assert first != second

    def test_filter_attaches_id(self):
        set_correlation_id("req-42")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-42"


class TestFormatters:
    def test_json_formatter_emits_correlation_id(self):
        set_correlation_id("req-json")
        record = _record("provider failed")
        CorrelationIdFilter().filter(record)

        output = json.loads(
            CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s").format(
                record
            )
        )

        assert output["message"] == "provider failed"
        assert output["level"] == "WARNING"
        assert output["logger"] == "tunescope.test"
        assert output["correlation_id"] == "req-json"

    def test_compact_formatter_prints_chain_root_cause_first(self):
        try:
            try:
                raise ConnectionError("refused")
            except ConnectionError as e:
                raise RuntimeError("spotify unreachable") from e
        except RuntimeError:
            exc_info = sys.exc_info()

        text = CompactExceptionFormatter().formatException(exc_info)
        lines = text.splitlines()

        assert lines[0] == "╰─► ConnectionError: refused"
        assert "╰─► RuntimeError: spotify unreachable" in lines

    def test_compact_formatter_without_exception(self):
        assert CompactExceptionFormatter().formatException((None, None, None)) == ""


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_info_level(self):
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() == logging.INFO

    def test_configure_logging_json_format(self):
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        root_logger = logging.getLogger()

        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_reconfiguring_does_not_duplicate_handlers(self):
        configure_logging(log_level="INFO")
        configure_logging(log_level="INFO")
        assert len(logging.getLogger().handlers) == 1

    def test_noisy_loggers_are_quieted(self):
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
