"""
Prometheus metrics for the PostgreSQL operator.

This module provides metrics for the admission webhooks and a small HTTP
server exposing them.
"""

import logging

# aiohttp is provided by Kopf (required for webhooks) and is reused here to
# keep the HTTP server implementation consistent with Kopf's own.
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

ADMISSION_REQUESTS_TOTAL = Counter(
    "postgres_operator_admission_requests_total",
    "Total number of Cluster admission reviews",
    ["webhook", "operation", "result"],
    registry=None,  # Will be set during initialization
)

ADMISSION_DURATION = Histogram(
    "postgres_operator_admission_duration_seconds",
    "Time spent reviewing Cluster admission requests",
    ["webhook", "operation"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
    registry=None,
)

VALIDATION_ERRORS_TOTAL = Counter(
    "postgres_operator_validation_errors_total",
    "Total number of field errors reported, per rule family",
    ["rule_family"],
    registry=None,
)

DEFAULTED_FIELDS_TOTAL = Counter(
    "postgres_operator_defaulted_fields_total",
    "Total number of Cluster spec fields filled by the defaulting webhook",
    ["field"],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()

        for metric in [
            ADMISSION_REQUESTS_TOTAL,
            ADMISSION_DURATION,
            VALIDATION_ERRORS_TOTAL,
            DEFAULTED_FIELDS_TOTAL,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Records admission metrics."""

    def record_validation(
        self,
        operation: str,
        errors_by_family: dict[str, list],
        duration: float,
    ) -> None:
        """
        Record the outcome of a validation review.

        Args:
            operation: CREATE or UPDATE
            errors_by_family: Field errors grouped by rule family
            duration: Review duration in seconds
        """
        error_count = 0
        for family, errors in errors_by_family.items():
            if errors:
                VALIDATION_ERRORS_TOTAL.labels(rule_family=family).inc(len(errors))
                error_count += len(errors)

        result = "allowed" if error_count == 0 else "denied"
        ADMISSION_REQUESTS_TOTAL.labels(
            webhook="validate", operation=operation, result=result
        ).inc()
        ADMISSION_DURATION.labels(webhook="validate", operation=operation).observe(
            duration
        )

    def record_rejected_manifest(self, webhook: str, operation: str) -> None:
        """Record a request whose body could not be parsed as a Cluster."""
        ADMISSION_REQUESTS_TOTAL.labels(
            webhook=webhook, operation=operation, result="malformed"
        ).inc()

    def record_defaulting(
        self, operation: str, defaulted_fields: list[str], duration: float
    ) -> None:
        """Record the fields filled by a defaulting review."""
        for field in defaulted_fields:
            DEFAULTED_FIELDS_TOTAL.labels(field=field).inc()

        ADMISSION_REQUESTS_TOTAL.labels(
            webhook="default", operation=operation, result="allowed"
        ).inc()
        ADMISSION_DURATION.labels(webhook="default", operation=operation).observe(
            duration
        )


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up HTTP routes for the metrics server."""
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            registry = get_metrics_registry()
            metrics_data = generate_latest(registry)
            return Response(body=metrics_data, content_type=CONTENT_TYPE_LATEST)
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        """Handle /healthz endpoint for Kubernetes liveness probes."""
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        try:
            self.runner = AppRunner(self.app)
            await self.runner.setup()

            self.site = TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Metrics server started on {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the metrics server."""
        try:
            if self.site:
                await self.site.stop()
                self.site = None

            if self.runner:
                await self.runner.cleanup()
                self.runner = None

            logger.info("Metrics server stopped")
        except Exception as e:
            logger.error(f"Error stopping metrics server: {e}")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


# Global metrics collector instance
metrics_collector = MetricsCollector()
