"""
Helper functions for Prometheus metric registration.

These functions prevent duplicate registration errors when the exporter is
built more than once against the same registry (application reloads,
tests) by retrieving existing metrics from the registry if they already
exist.
"""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from vault_audit_exporter.constants import PROM_NAMESPACE


def _full_name(name: str, subsystem: str) -> str:
    return "_".join(part for part in (PROM_NAMESPACE, subsystem, name) if part)


def _get_or_create_counter(
    name: str,
    doc: str,
    labels: list[str] | tuple[str, ...] | None = None,
    subsystem: str = "",
    registry: CollectorRegistry = REGISTRY,
) -> Counter:
    """
    Get existing counter or create new one.

    Args:
        name: Metric name within the namespace and subsystem.
        doc: Metric documentation.
        labels: Optional list of label names.
        subsystem: Metric subsystem (second name component).
        registry: Registry to register with.

    Returns:
        Counter instance.
    """
    try:
        return Counter(
            name,
            doc,
            labels or [],
            namespace=PROM_NAMESPACE,
            subsystem=subsystem,
            registry=registry,
        )
    except ValueError:
        # Metric already exists, retrieve it from registry
        return registry._names_to_collectors[_full_name(name, subsystem)]


def _get_or_create_gauge(
    name: str,
    doc: str,
    labels: list[str] | tuple[str, ...] | None = None,
    subsystem: str = "",
    registry: CollectorRegistry = REGISTRY,
) -> Gauge:
    """
    Get existing gauge or create new one.

    Args:
        name: Metric name within the namespace and subsystem.
        doc: Metric documentation.
        labels: Optional list of label names.
        subsystem: Metric subsystem (second name component).
        registry: Registry to register with.

    Returns:
        Gauge instance.
    """
    try:
        return Gauge(
            name,
            doc,
            labels or [],
            namespace=PROM_NAMESPACE,
            subsystem=subsystem,
            registry=registry,
        )
    except ValueError:
        # Metric already exists, retrieve it from registry
        return registry._names_to_collectors[_full_name(name, subsystem)]


def _get_or_create_histogram(
    name: str,
    doc: str,
    labels: list[str] | tuple[str, ...] | None = None,
    subsystem: str = "",
    registry: CollectorRegistry = REGISTRY,
    buckets: list[float] | tuple[float, ...] | None = None,
) -> Histogram:
    """
    Get existing histogram or create new one.

    Args:
        name: Metric name within the namespace and subsystem.
        doc: Metric documentation.
        labels: Optional list of label names.
        subsystem: Metric subsystem (second name component).
        registry: Registry to register with.
        buckets: Optional histogram buckets (prometheus_client defaults
            otherwise).

    Returns:
        Histogram instance.
    """
    kwargs = {"buckets": buckets} if buckets else {}
    try:
        return Histogram(
            name,
            doc,
            labels or [],
            namespace=PROM_NAMESPACE,
            subsystem=subsystem,
            registry=registry,
            **kwargs,
        )
    except ValueError:
        # Metric already exists, retrieve it from registry
        return registry._names_to_collectors[_full_name(name, subsystem)]
