"""
Structured logging utilities for the PostgreSQL operator.

This module provides correlation ID tracking, structured log formatting,
and admission decision logging for production troubleshooting.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variable for tracking correlation IDs across async operations
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Paths that should be filtered from access logs (health probes)
HEALTH_PROBE_PATHS = frozenset({"/healthz", "/metrics"})

STRUCTURED_FIELDS = (
    "resource_type",
    "resource_name",
    "namespace",
    "operation",
    "dryrun",
    "allowed",
    "error_count",
    "errors",
    "duration",
    "error_type",
    "defaulted_fields",
)


class HealthProbeFilter(logging.Filter):
    """
    Logging filter that suppresses health probe and metrics endpoint logs.

    These endpoints are hit frequently by Kubernetes probes and monitoring
    systems, generating excessive noise in logs during debugging.
    """

    def __init__(self, suppress_health_logs: bool = True):
        super().__init__()
        self.suppress_health_logs = suppress_health_logs

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.suppress_health_logs:
            return True

        message = record.getMessage()
        return all(path not in message for path in HEALTH_PROBE_PATHS)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Get correlation ID from context, or generate a new one
        current_correlation_id = correlation_id.get()
        if not current_correlation_id:
            current_correlation_id = generate_correlation_id()
            correlation_id.set(current_correlation_id)

        record.correlation_id = current_correlation_id
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with correlation ID support.

    Formats log records as structured JSON for better parsing and analysis
    in production monitoring systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields are attributes of the record, not an 'extra' dict
        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        Unique correlation ID string
    """
    return str(uuid.uuid4())[:8]  # Short 8-character ID for readability


def set_correlation_id(corr_id: str) -> str:
    """Set the correlation ID for the current context."""
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str:
    """Get the current correlation ID, or an empty string if none is set."""
    return correlation_id.get("")


def setup_structured_logging(
    log_level: str = "INFO",
    enable_json_formatting: bool = True,
    correlation_id_enabled: bool = True,
    log_health_probes: bool = False,
    webhook_log_level: str = "INFO",
) -> None:
    """
    Set up structured logging for the operator.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_json_formatting: Whether to use JSON formatting
        correlation_id_enabled: Whether to enable correlation ID tracking
        log_health_probes: Whether to log health probe requests (default: False)
        webhook_log_level: Log level for webhook-related loggers
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()

    if enable_json_formatting:
        formatter = StructuredFormatter()
    elif correlation_id_enabled:
        formatter = logging.Formatter(
            "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())

    if not log_health_probes:
        handler.addFilter(HealthProbeFilter(suppress_health_logs=True))

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Set specific logger levels for third-party libraries
    logging.getLogger("kopf").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.server").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.web").setLevel(logging.WARNING)

    webhook_level = getattr(logging, webhook_log_level.upper(), logging.INFO)
    logging.getLogger("postgres_operator.webhooks").setLevel(webhook_level)


class OperatorLogger:
    """
    Logger for admission events with structured logging support.

    Provides convenient methods for logging admission decisions
    with proper correlation ID tracking and structured data.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log_admission_start(
        self,
        operation: str,
        resource_name: str,
        namespace: str | None,
        dryrun: bool = False,
        correlation_id: str | None = None,
    ) -> str:
        """
        Log the start of an admission review.

        Returns:
            The correlation ID used for this review
        """
        if correlation_id is None:
            correlation_id = generate_correlation_id()

        set_correlation_id(correlation_id)

        self.logger.info(
            f"Reviewing {operation} of Cluster {resource_name} in namespace {namespace}",
            extra={
                "resource_type": "cluster",
                "resource_name": resource_name,
                "namespace": namespace,
                "operation": operation,
                "dryrun": dryrun,
            },
        )

        return correlation_id

    def log_admission_decision(
        self,
        operation: str,
        resource_name: str,
        namespace: str | None,
        errors: list[str],
        duration: float,
    ) -> None:
        """
        Log whether an admission review allowed or denied the request.

        Args:
            operation: CREATE or UPDATE
            resource_name: Name of the Cluster
            namespace: Namespace of the Cluster
            errors: Rendered field errors, empty when allowed
            duration: Review duration in seconds
        """
        allowed = not errors
        level = logging.INFO if allowed else logging.WARNING
        verdict = "allowed" if allowed else f"denied with {len(errors)} error(s)"

        self.logger.log(
            level,
            f"{operation} of Cluster {resource_name} {verdict}",
            extra={
                "resource_type": "cluster",
                "resource_name": resource_name,
                "namespace": namespace,
                "operation": operation,
                "allowed": allowed,
                "error_count": len(errors),
                "errors": errors,
                "duration": duration,
            },
        )

    def log_defaulting(
        self,
        resource_name: str,
        namespace: str | None,
        defaulted_fields: list[str],
    ) -> None:
        """Log the spec fields filled in by the defaulting webhook."""
        self.logger.info(
            f"Defaulted {len(defaulted_fields)} field(s) of Cluster {resource_name}",
            extra={
                "resource_type": "cluster",
                "resource_name": resource_name,
                "namespace": namespace,
                "operation": "default",
                "defaulted_fields": defaulted_fields,
            },
        )

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message with extra data."""
        self.logger.debug(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message with extra data."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """Log error message with extra data."""
        self.logger.error(message, exc_info=exc_info, extra=kwargs)
