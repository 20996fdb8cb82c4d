"""
Fire-and-forget dispatch of decoded audit events.

Connection handlers hand events to a bounded async queue drained by a fixed
pool of worker tasks, so reading the next line never waits on processing
and a burst of events cannot grow memory without bound.
"""

import asyncio

from vault_audit_exporter.handlers.event_processor import EventProcessor
from vault_audit_exporter.logging import logger
from vault_audit_exporter.schemas.audit_event import AuditEvent
from vault_audit_exporter.utils.metrics import AuditMetrics


class EventDispatcher:
    """
    Bounded worker pool feeding the EventProcessor.

    Example:
        >>> dispatcher = EventDispatcher(processor, metrics, workers=8)
        >>> dispatcher.start()
        >>> dispatcher.submit(event)
    """

    def __init__(
        self,
        processor: EventProcessor,
        metrics: AuditMetrics,
        workers: int = 8,
        max_queue_size: int = 10000,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            processor: Event processor invoked by every worker.
            metrics: Metrics facade, used to count dropped events.
            workers: Number of worker tasks.
            max_queue_size: Events waiting beyond this are dropped.
        """
        self.processor = processor
        self.metrics = metrics
        self.workers = workers
        self.queue: asyncio.Queue[AuditEvent] = asyncio.Queue(
            maxsize=max_queue_size
        )
        self._tasks: list[asyncio.Task] = []

    def start(self) -> None:
        """Spawn the worker tasks on the running event loop."""
        for index in range(self.workers):
            self._tasks.append(
                asyncio.create_task(
                    self._worker(), name=f"event-worker-{index}"
                )
            )
        logger.info(f"Started {self.workers} event processing workers")

    async def stop(self) -> None:
        """Cancel the worker tasks and wait for them to finish."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    def submit(self, event: AuditEvent) -> bool:
        """
        Queue an event for processing without blocking.

        Returns:
            True if queued, False if the queue was full and the event was
            dropped.
        """
        try:
            self.queue.put_nowait(event)
            return True
        except asyncio.QueueFull:
            self.metrics.inc_dropped()
            logger.warning(
                f"Event queue full ({self.queue.maxsize}), dropping "
                f"{event.type} event for request id '{event.request_id}'"
            )
            return False

    async def join(self) -> None:
        """Wait until every queued event has been processed."""
        await self.queue.join()

    async def _worker(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                self.processor.process(event)
            except Exception as ex:  # noqa: BLE001
                logger.error(
                    f"Error processing audit event: {ex}", exc_info=True
                )
            finally:
                self.queue.task_done()
