"""
Unit tests for structured logging.

Tests the JSON formatter, the correlation ID and health probe filters,
and the admission decision logging of OperatorLogger.
"""

import json
import logging

import pytest

from postgres_operator.observability.logging import (
    CorrelationIDFilter,
    HealthProbeFilter,
    OperatorLogger,
    StructuredFormatter,
    get_correlation_id,
    set_correlation_id,
    setup_structured_logging,
)


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="postgres_operator.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Restore the root logger configuration after the test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
    root_logger.setLevel(level)


class TestStructuredFormatter:
    """Test cases for JSON log formatting."""

    def test_base_fields(self):
        output = json.loads(
            StructuredFormatter().format(make_record("hello", correlation_id="abc"))
        )

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["logger"] == "postgres_operator.test"
        assert output["correlation_id"] == "abc"
        assert "timestamp" in output

    def test_admission_fields(self):
        record = make_record(
            "denied",
            resource_name="cluster-example",
            operation="UPDATE",
            allowed=False,
            errors=["spec.storage.size: Invalid value"],
        )

        output = json.loads(StructuredFormatter().format(record))

        assert output["resource_name"] == "cluster-example"
        assert output["operation"] == "UPDATE"
        assert output["allowed"] is False
        assert output["errors"] == ["spec.storage.size: Invalid value"]

    def test_unknown_attributes_are_not_emitted(self):
        output = json.loads(StructuredFormatter().format(make_record("x", secret="s")))
        assert "secret" not in output


class TestFilters:
    """Test cases for logging filters."""

    def test_health_probes_are_suppressed(self):
        probe_filter = HealthProbeFilter()

        assert probe_filter.filter(make_record('"GET /healthz HTTP/1.1" 200')) is False
        assert probe_filter.filter(make_record('"GET /metrics HTTP/1.1" 200')) is False
        assert probe_filter.filter(make_record("Reviewing CREATE of Cluster")) is True

    def test_health_probes_can_be_logged(self):
        probe_filter = HealthProbeFilter(suppress_health_logs=False)
        assert probe_filter.filter(make_record("GET /healthz")) is True

    def test_correlation_id_is_attached(self):
        set_correlation_id("fixed-id")
        record = make_record("x")

        CorrelationIDFilter().filter(record)

        assert record.correlation_id == "fixed-id"
        assert get_correlation_id() == "fixed-id"


class TestSetupStructuredLogging:
    """Test cases for logging configuration."""

    def test_json_handler(self, restore_root_logger):
        setup_structured_logging(log_level="DEBUG", enable_json_formatting=True)

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_plain_handler(self, restore_root_logger):
        setup_structured_logging(
            log_level="WARNING",
            enable_json_formatting=False,
            correlation_id_enabled=False,
        )

        handler = restore_root_logger.handlers[0]
        assert not isinstance(handler.formatter, StructuredFormatter)
        assert restore_root_logger.level == logging.WARNING

    def test_webhook_log_level(self, restore_root_logger):
        setup_structured_logging(webhook_log_level="DEBUG")

        assert logging.getLogger("postgres_operator.webhooks").level == logging.DEBUG


class TestOperatorLogger:
    """Test cases for admission logging."""

    def test_admission_start_sets_correlation_id(self, caplog):
        caplog.set_level(logging.INFO)
        operator_logger = OperatorLogger("postgres_operator.test")

        corr_id = operator_logger.log_admission_start(
            "CREATE", "cluster-example", "default", correlation_id="req-1"
        )

        assert corr_id == "req-1"
        assert get_correlation_id() == "req-1"
        assert "Reviewing CREATE of Cluster cluster-example" in caplog.text

    def test_allowed_decision(self, caplog):
        caplog.set_level(logging.INFO)
        operator_logger = OperatorLogger("postgres_operator.test")

        operator_logger.log_admission_decision("CREATE", "cluster-example", "default", [], 0.01)

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.allowed is True
        assert record.error_count == 0

    def test_denied_decision(self, caplog):
        caplog.set_level(logging.INFO)
        operator_logger = OperatorLogger("postgres_operator.test")

        operator_logger.log_admission_decision(
            "UPDATE", "cluster-example", "default", ["a", "b"], 0.01
        )

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.allowed is False
        assert record.errors == ["a", "b"]
        assert "denied with 2 error(s)" in caplog.text

    def test_defaulting(self, caplog):
        caplog.set_level(logging.INFO)
        operator_logger = OperatorLogger("postgres_operator.test")

        operator_logger.log_defaulting("cluster-example", "default", ["bootstrap", "imageName"])

        assert caplog.records[-1].defaulted_fields == ["bootstrap", "imageName"]
