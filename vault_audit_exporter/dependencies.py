"""FastAPI dependencies resolving the exporter's shared components."""

from typing import Annotated

from fastapi import Depends, Request

from vault_audit_exporter.managers.timestamp_cache import TimestampCache
from vault_audit_exporter.utils.metrics import AuditMetrics


def get_timestamp_cache(request: Request) -> TimestampCache:
    """Request timestamp cache attached to the application state."""
    return request.app.state.timestamps


def get_metrics(request: Request) -> AuditMetrics:
    """Metrics facade attached to the application state."""
    return request.app.state.metrics


TimestampCacheDep = Annotated[TimestampCache, Depends(get_timestamp_cache)]
MetricsDep = Annotated[AuditMetrics, Depends(get_metrics)]
