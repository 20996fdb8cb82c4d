"""
Audit event processing.

Turns decoded audit events into metric updates: request events store their
timestamp and are counted, response events are correlated with the stored
request timestamp to observe latency and are always counted.
"""

from vault_audit_exporter.exceptions import TimestampParseError
from vault_audit_exporter.logging import logger
from vault_audit_exporter.managers.timestamp_cache import TimestampCache
from vault_audit_exporter.schemas.audit_event import AuditEvent, EventType
from vault_audit_exporter.utils.metrics import AuditMetrics
from vault_audit_exporter.utils.timestamps import seconds_between


class EventProcessor:
    """
    Records Prometheus metrics from audit events.

    Correlation is best effort: a response whose request was never seen,
    already expired or is still in flight on another worker is counted
    without a latency observation.

    Args:
        timestamps: Request timestamp cache.
        metrics: Metrics facade.
    """

    def __init__(self, timestamps: TimestampCache, metrics: AuditMetrics):
        self.timestamps = timestamps
        self.metrics = metrics

    def process(self, event: AuditEvent) -> None:
        """Update the cache and metrics for one audit event."""
        event_type = event.event_type

        if event_type is EventType.REQUEST:
            self.timestamps.put(event.request_id, event.timestamp)
            self.metrics.inc_requests(event.labels())

        elif event_type is EventType.RESPONSE:
            self.observe_latency(event)
            self.metrics.inc_responses(event.labels())

        else:
            logger.warning(f"Unknown audit event type: {event.type!r}")

    def observe_latency(self, event: AuditEvent) -> float | None:
        """
        Record the latency between a response and its prior request.

        Args:
            event: Response event.

        Returns:
            Latency in seconds, or None if it could not be computed.
        """
        request_time = self.timestamps.get(event.request_id)
        if request_time is None:
            logger.info(
                f"Prior request not found for response with request id "
                f"'{event.request_id}'"
            )
            return None

        try:
            latency = seconds_between(request_time, event.timestamp)
        except TimestampParseError as ex:
            logger.warning(
                f"Error computing latency for request id "
                f"'{event.request_id}': {ex}"
            )
            return None

        self.metrics.observe_latency(event.labels(), latency)
        return latency
