"""Background sweep removing expired request timestamps."""

import asyncio

from vault_audit_exporter.constants import TASK_ERROR_BACKOFF_SECONDS
from vault_audit_exporter.logging import logger
from vault_audit_exporter.managers.timestamp_cache import TimestampCache


async def cache_cleanup_task(timestamps: TimestampCache) -> None:
    """
    Evict expired entries every ``timestamps.cleanup_interval`` seconds.

    Returns immediately when the cleanup interval is not positive, in which
    case expired entries are only hidden from reads, never removed.
    """
    interval = timestamps.cleanup_interval
    if interval <= 0:
        logger.info("Timestamp cache cleanup disabled")
        return

    logger.info(f"Starting timestamp cache cleanup task (every {interval}s)")

    while True:
        try:
            await asyncio.sleep(interval)
            timestamps.delete_expired()

        except Exception as ex:  # noqa: BLE001
            logger.error(f"Error in cache_cleanup_task: {ex}", exc_info=True)
            await asyncio.sleep(TASK_ERROR_BACKOFF_SECONDS)
