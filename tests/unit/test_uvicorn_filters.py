"""Tests for the uvicorn access log filter."""

import logging

import pytest

from vault_audit_exporter.uvicorn_filters import ExcludeMonitoringPathsFilter


def access_record(path: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:5000", "GET", path, "1.1", 200),
        exc_info=None,
    )


@pytest.mark.parametrize(
    "path, logged",
    [
        ("/metrics", False),
        ("/healthz", False),
        ("/docs", True),
        ("/metrics-other", True),
    ],
)
def test_excludes_monitoring_paths(path, logged):
    """Test that scrape and probe requests are filtered out."""
    assert ExcludeMonitoringPathsFilter().filter(access_record(path)) is logged


def test_custom_paths():
    """Test a custom exclusion list."""
    log_filter = ExcludeMonitoringPathsFilter(["/docs"])

    assert log_filter.filter(access_record("/docs")) is False
    assert log_filter.filter(access_record("/metrics")) is True
