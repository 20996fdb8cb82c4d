"""
Facade for audit event metrics.

Provides high-level methods for recording metrics without exposing
Prometheus implementation details to the event processor.
"""

from prometheus_client import REGISTRY, CollectorRegistry

from vault_audit_exporter.constants import EVENT_LABEL_NAMES
from vault_audit_exporter.logging import logger
from vault_audit_exporter.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)


class AuditMetrics:
    """
    Process-wide set of audit event metrics.

    Exported series:
    - vaultaudit_cache_timestamp_cache_entries_total (gauge)
    - vaultaudit_events_requests_total{operation,path,error} (counter)
    - vaultaudit_events_responses_total{operation,path,error} (counter)
    - vaultaudit_events_response_duration_seconds{operation,path,error}
      (histogram)
    - vaultaudit_events_dropped_total (counter)

    Labelled series are created on first use and live for the lifetime of
    the process. A label set that cannot be applied is logged and that
    single observation is dropped.

    Example:
        >>> metrics = AuditMetrics()
        >>> metrics.inc_requests({"operation": "read", "path": "secret/x", "error": ""})
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """
        Register (or reuse) the metrics in ``registry``.

        Args:
            registry: Prometheus registry, the process default unless a
                test supplies its own.
        """
        self.registry = registry

        self.cache_size = _get_or_create_gauge(
            "timestamp_cache_entries_total",
            "Number of request timestamp entries in the cache.",
            subsystem="cache",
            registry=registry,
        )
        self.requests = _get_or_create_counter(
            "requests_total",
            "Number of Vault requests recorded in the audit log. "
            "Partitioned by operation, path, and error.",
            EVENT_LABEL_NAMES,
            subsystem="events",
            registry=registry,
        )
        self.responses = _get_or_create_counter(
            "responses_total",
            "Number of Vault responses recorded in the audit log. "
            "Partitioned by operation, path, and error.",
            EVENT_LABEL_NAMES,
            subsystem="events",
            registry=registry,
        )
        self.latency = _get_or_create_histogram(
            "response_duration_seconds",
            "Latency of a Vault response. Partitioned by operation, path, "
            "and error.",
            EVENT_LABEL_NAMES,
            subsystem="events",
            registry=registry,
        )
        self.dropped = _get_or_create_counter(
            "dropped_total",
            "Number of audit events dropped because the processing queue "
            "was full.",
            subsystem="events",
            registry=registry,
        )

    def inc_requests(self, labels: dict[str, str]) -> None:
        """Count one request event."""
        try:
            series = self.requests.labels(**labels)
        except (ValueError, TypeError) as ex:
            logger.error(f"Error getting requests counter: {ex}")
            return
        series.inc()

    def inc_responses(self, labels: dict[str, str]) -> None:
        """Count one response event."""
        try:
            series = self.responses.labels(**labels)
        except (ValueError, TypeError) as ex:
            logger.error(f"Error getting responses counter: {ex}")
            return
        series.inc()

    def observe_latency(self, labels: dict[str, str], seconds: float) -> None:
        """
        Record one response latency.

        Args:
            labels: Event label set.
            seconds: Response time minus request time, recorded as-is even
                when negative.
        """
        try:
            series = self.latency.labels(**labels)
        except (ValueError, TypeError) as ex:
            logger.error(f"Error getting latency histogram: {ex}")
            return
        series.observe(seconds)

    def set_cache_size(self, size: int) -> None:
        """Set the timestamp cache size gauge."""
        self.cache_size.set(size)

    def inc_dropped(self) -> None:
        """Count one event dropped before processing."""
        self.dropped.inc()
