"""Tests for the /healthz and /metrics endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vault_audit_exporter.routing import collect_subrouters


@pytest.fixture
def app(metrics, timestamps):
    """
    Create a minimal FastAPI app with the exporter routes.

    Returns:
        FastAPI: FastAPI application instance.
    """
    test_app = FastAPI()
    test_app.state.metrics = metrics
    test_app.state.timestamps = timestamps
    test_app.include_router(collect_subrouters())
    return test_app


@pytest.fixture
def client(app):
    """
    Create a test client for the FastAPI application.

    Returns:
        TestClient: FastAPI test client instance.
    """
    return TestClient(app)


class TestHealthz:
    """Tests for the liveness endpoint."""

    def test_empty_cache(self, client):
        """Test health response before any request was seen."""
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"timestamp_cache_size": 0}

    def test_reports_live_entries(self, client, timestamps, clock):
        """Test that expired entries are not reported."""
        timestamps.put("old", "2024-01-01T00:00:00Z")
        clock.advance(301)
        timestamps.put("a", "2024-01-01T00:05:00Z")
        timestamps.put("b", "2024-01-01T00:05:00Z")

        response = client.get("/healthz")

        assert response.json() == {"timestamp_cache_size": 2}


class TestMetricsEndpoint:
    """Tests for the Prometheus exposition endpoint."""

    def test_exposition_format(self, client, metrics):
        """Test that registered metrics are served as text exposition."""
        metrics.inc_requests({"operation": "read", "path": "secret/x", "error": ""})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert "# TYPE vaultaudit_events_requests_total counter" in body
        assert (
            'vaultaudit_events_requests_total{error="",operation="read",path="secret/x"} 1.0'
            in body
        )
        assert "# TYPE vaultaudit_events_response_duration_seconds histogram" in body
        assert "vaultaudit_cache_timestamp_cache_entries_total" in body

    def test_only_exporter_registry_is_served(self, client):
        """Test that the isolated registry does not leak process metrics."""
        body = client.get("/metrics").text

        assert "process_cpu_seconds_total" not in body

    def test_unknown_path(self, client):
        """Test that other paths are not served."""
        assert client.get("/nope").status_code == 404
