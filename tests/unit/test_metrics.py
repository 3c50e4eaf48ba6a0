"""
Unit tests for admission metrics and the metrics HTTP server.

Uses ``aiohttp.test_utils`` to drive the server's aiohttp application.
"""

from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from postgres_operator.models.field_errors import FieldError, FieldPath
from postgres_operator.observability.metrics import (
    MetricsCollector,
    MetricsServer,
    get_metrics_registry,
)


def sample(name: str, **labels) -> float:
    return get_metrics_registry().get_sample_value(name, labels) or 0.0


def field_error() -> FieldError:
    return FieldError.invalid(FieldPath.root("spec", "storage", "size"), "x", "bad")


@pytest.fixture
def metrics_server():
    """Create a fresh MetricsServer instance per test."""
    return MetricsServer(port=0)


@pytest.fixture
async def client(metrics_server):
    """Create an aiohttp TestClient from the MetricsServer app."""
    server = TestServer(metrics_server.app)
    async with TestClient(server) as cli:
        yield cli


class TestMetricsCollector:
    """Test cases for MetricsCollector."""

    def test_denied_validation(self):
        collector = MetricsCollector()
        before_requests = sample(
            "postgres_operator_admission_requests_total",
            webhook="validate",
            operation="UPDATE",
            result="denied",
        )
        before_errors = sample(
            "postgres_operator_validation_errors_total", rule_family="storage"
        )

        collector.record_validation(
            "UPDATE", {"storage": [field_error(), field_error()], "naming": []}, 0.002
        )

        assert sample(
            "postgres_operator_admission_requests_total",
            webhook="validate",
            operation="UPDATE",
            result="denied",
        ) == before_requests + 1
        assert sample(
            "postgres_operator_validation_errors_total", rule_family="storage"
        ) == before_errors + 2

    def test_allowed_validation(self):
        collector = MetricsCollector()
        before = sample(
            "postgres_operator_admission_requests_total",
            webhook="validate",
            operation="CREATE",
            result="allowed",
        )

        collector.record_validation("CREATE", {"storage": []}, 0.001)

        assert sample(
            "postgres_operator_admission_requests_total",
            webhook="validate",
            operation="CREATE",
            result="allowed",
        ) == before + 1

    def test_defaulting(self):
        collector = MetricsCollector()
        before = sample("postgres_operator_defaulted_fields_total", field="imageName")

        collector.record_defaulting("CREATE", ["bootstrap", "imageName"], 0.001)

        assert (
            sample("postgres_operator_defaulted_fields_total", field="imageName")
            == before + 1
        )

    def test_rejected_manifest(self):
        collector = MetricsCollector()
        before = sample(
            "postgres_operator_admission_requests_total",
            webhook="default",
            operation="CREATE",
            result="malformed",
        )

        collector.record_rejected_manifest("default", "CREATE")

        assert sample(
            "postgres_operator_admission_requests_total",
            webhook="default",
            operation="CREATE",
            result="malformed",
        ) == before + 1


class TestMetricsEndpoint:
    """Tests for ``GET /metrics``."""

    @pytest.mark.asyncio
    async def test_metrics_returns_200(self, client):
        MetricsCollector().record_validation("CREATE", {}, 0.001)

        resp = await client.get("/metrics")

        assert resp.status == 200
        body = await resp.text()
        assert "postgres_operator_admission_requests_total" in body

    @pytest.mark.asyncio
    async def test_metrics_error_returns_500(self, client):
        with patch(
            "postgres_operator.observability.metrics.generate_latest",
            side_effect=RuntimeError("boom"),
        ):
            resp = await client.get("/metrics")

        assert resp.status == 500
        assert "RuntimeError" in await resp.text()


class TestHealthzEndpoint:
    """Tests for ``GET /healthz``."""

    @pytest.mark.asyncio
    async def test_healthz_returns_ok(self, client):
        resp = await client.get("/healthz")

        assert resp.status == 200
        assert await resp.text() == "ok"


class TestServerLifecycle:
    """Tests for starting and stopping the server."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        server = MetricsServer(port=0, host="127.0.0.1")

        async with server:
            assert server.runner is not None

        assert server.runner is None
        assert server.site is None
