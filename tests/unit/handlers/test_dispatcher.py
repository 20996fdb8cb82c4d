"""Tests for the event dispatch worker pool."""

import asyncio
from unittest.mock import MagicMock

from tests.mocks.audit_mocks import LABELS, make_audit_line, sample
from vault_audit_exporter.handlers.dispatcher import EventDispatcher
from vault_audit_exporter.schemas.audit_event import classify


def request_event(request_id="abc"):
    return classify(make_audit_line("request", request_id, "2024-01-01T00:00:00Z"))


class TestEventDispatcher:
    """Tests for EventDispatcher."""

    async def test_submitted_events_are_processed(self, processor, metrics, registry):
        """Test that workers drain the queue through the processor."""
        dispatcher = EventDispatcher(processor, metrics, workers=2)
        dispatcher.start()
        try:
            for n in range(10):
                assert dispatcher.submit(request_event(f"id-{n}"))
            await asyncio.wait_for(dispatcher.join(), timeout=5)
        finally:
            await dispatcher.stop()

        assert sample(registry, "vaultaudit_events_requests_total", LABELS) == 10.0

    async def test_full_queue_drops_event(self, processor, metrics, registry, caplog):
        """Test that submit never blocks and counts dropped events."""
        dispatcher = EventDispatcher(processor, metrics, workers=1, max_queue_size=2)

        # Workers not started: the queue fills up
        assert dispatcher.submit(request_event("a"))
        assert dispatcher.submit(request_event("b"))
        assert not dispatcher.submit(request_event("c"))

        assert sample(registry, "vaultaudit_events_dropped_total") == 1.0
        assert "Event queue full" in caplog.text

    async def test_worker_survives_processing_error(self, metrics, caplog):
        """Test that an exception in processing does not kill the worker."""
        processor = MagicMock()
        processor.process.side_effect = [RuntimeError("boom"), None]
        dispatcher = EventDispatcher(processor, metrics, workers=1)
        dispatcher.start()
        try:
            dispatcher.submit(request_event("a"))
            dispatcher.submit(request_event("b"))
            await asyncio.wait_for(dispatcher.join(), timeout=5)
        finally:
            await dispatcher.stop()

        assert processor.process.call_count == 2
        assert "Error processing audit event: boom" in caplog.text

    async def test_stop_cancels_workers(self, processor, metrics):
        """Test that stop cancels every worker task."""
        dispatcher = EventDispatcher(processor, metrics, workers=3)
        dispatcher.start()
        tasks = list(dispatcher._tasks)

        await dispatcher.stop()

        assert all(task.done() for task in tasks)
        assert dispatcher._tasks == []
