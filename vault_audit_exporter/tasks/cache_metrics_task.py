"""
Timestamp cache size metric task.

Periodically publishes the number of live request timestamps to the
vaultaudit_cache_timestamp_cache_entries_total gauge. Runs for the
lifetime of the process.
"""

import asyncio

from vault_audit_exporter.constants import (
    CACHE_METRICS_INTERVAL_SECONDS,
    TASK_ERROR_BACKOFF_SECONDS,
)
from vault_audit_exporter.logging import logger
from vault_audit_exporter.managers.timestamp_cache import TimestampCache
from vault_audit_exporter.utils.metrics import AuditMetrics


async def cache_metrics_task(
    timestamps: TimestampCache,
    metrics: AuditMetrics,
    interval: float = CACHE_METRICS_INTERVAL_SECONDS,
) -> None:
    """
    Refresh the cache size gauge every ``interval`` seconds.

    Args:
        timestamps: Request timestamp cache to measure.
        metrics: Metrics facade owning the gauge.
        interval: Seconds between refreshes.
    """
    logger.info("Starting timestamp cache metrics task")

    while True:
        try:
            await asyncio.sleep(interval)
            size = timestamps.live_count()
            metrics.set_cache_size(size)
            logger.debug(f"Timestamp cache size: {size}")

        except Exception as ex:  # noqa: BLE001
            logger.error(f"Error in cache_metrics_task: {ex}", exc_info=True)
            await asyncio.sleep(TASK_ERROR_BACKOFF_SECONDS)
