"""Tests for the timestamp cache background tasks."""

import asyncio
from unittest.mock import MagicMock, patch

from tests.mocks.audit_mocks import sample
from vault_audit_exporter.managers.timestamp_cache import TimestampCache
from vault_audit_exporter.tasks.cache_cleanup_task import cache_cleanup_task
from vault_audit_exporter.tasks.cache_metrics_task import cache_metrics_task


async def run_briefly(coro, seconds: float = 0.2) -> None:
    task = asyncio.create_task(coro)
    await asyncio.sleep(seconds)
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


class TestCacheMetricsTask:
    """Tests for cache_metrics_task."""

    async def test_gauge_tracks_live_count(self, timestamps, metrics, registry):
        """Test that the gauge is set to the number of live entries."""
        timestamps.put("a", "t")
        timestamps.put("b", "t")

        await run_briefly(cache_metrics_task(timestamps, metrics, interval=0.05))

        assert (
            sample(registry, "vaultaudit_cache_timestamp_cache_entries_total")
            == 2.0
        )

    async def test_gauge_excludes_expired_entries(
        self, timestamps, metrics, registry, clock
    ):
        """Test that expired entries are not reported."""
        timestamps.put("a", "t")
        clock.advance(301)
        timestamps.put("b", "t")

        await run_briefly(cache_metrics_task(timestamps, metrics, interval=0.05))

        assert (
            sample(registry, "vaultaudit_cache_timestamp_cache_entries_total")
            == 1.0
        )

    async def test_survives_errors(self, metrics, registry, caplog):
        """Test that an error backs off instead of ending the task."""
        results = iter([RuntimeError("boom")])

        def live_count():
            result = next(results, 7)
            if isinstance(result, Exception):
                raise result
            return result

        timestamps = MagicMock()
        timestamps.live_count.side_effect = live_count

        with patch(
            "vault_audit_exporter.tasks.cache_metrics_task.TASK_ERROR_BACKOFF_SECONDS",
            0.01,
        ):
            await run_briefly(
                cache_metrics_task(timestamps, metrics, interval=0.02)
            )

        assert "Error in cache_metrics_task: boom" in caplog.text
        assert (
            sample(registry, "vaultaudit_cache_timestamp_cache_entries_total")
            == 7.0
        )


class TestCacheCleanupTask:
    """Tests for cache_cleanup_task."""

    async def test_sweeps_expired_entries(self, clock):
        """Test that expired entries are removed periodically."""
        timestamps = TimestampCache(ttl=300, cleanup_interval=0.05, clock=clock)
        timestamps.put("old", "t")
        clock.advance(301)
        timestamps.put("new", "t")

        await run_briefly(cache_cleanup_task(timestamps))

        assert len(timestamps) == 1
        assert timestamps.get("new") == "t"

    async def test_disabled_when_interval_not_positive(self, clock):
        """Test that a non-positive interval returns immediately."""
        timestamps = TimestampCache(ttl=300, cleanup_interval=0, clock=clock)
        timestamps.put("old", "t")
        clock.advance(301)

        await asyncio.wait_for(cache_cleanup_task(timestamps), timeout=1)

        assert len(timestamps) == 1
