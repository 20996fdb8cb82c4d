"""Liveness endpoint reporting the request timestamp cache size."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from vault_audit_exporter.dependencies import TimestampCacheDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""

    timestamp_cache_size: int


@router.get(
    "/healthz",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def healthz(timestamps: TimestampCacheDep) -> HealthResponse:
    """
    Report that the exporter is alive.

    Returns:
        HealthResponse: Number of live request timestamps in the cache.
    """
    return HealthResponse(timestamp_cache_size=timestamps.live_count())
