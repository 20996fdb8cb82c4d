"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from vault_audit_exporter.dependencies import MetricsDep

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics endpoint",
    tags=["metrics"],
)
async def metrics(audit_metrics: MetricsDep) -> Response:
    """
    Expose Prometheus metrics for monitoring.

    Returns every metric registered in the exporter's registry in the
    text-based exposition format that Prometheus can scrape.

    Example:
        ```
        # HELP vaultaudit_events_requests_total Number of Vault requests ...
        # TYPE vaultaudit_events_requests_total counter
        vaultaudit_events_requests_total{error="",operation="read",path="secret/x"} 1.0
        ```
    """
    return Response(
        content=generate_latest(audit_metrics.registry),
        media_type=CONTENT_TYPE_LATEST,
    )
