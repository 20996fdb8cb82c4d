"""
Pytest configuration and fixtures for testing.

Every test gets its own Prometheus registry so metric values never leak
between tests, and a fake clock so cache expiry is deterministic.
"""

import pytest
from prometheus_client import CollectorRegistry

from tests.mocks.audit_mocks import FakeClock
from vault_audit_exporter.handlers.event_processor import EventProcessor
from vault_audit_exporter.managers.timestamp_cache import TimestampCache
from vault_audit_exporter.utils.metrics import AuditMetrics


@pytest.fixture
def registry():
    """
    Provides an isolated Prometheus registry.

    Returns:
        CollectorRegistry: Empty registry
    """
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    """
    Provides AuditMetrics registered against the isolated registry.

    Args:
        registry: Fixture providing the registry

    Returns:
        AuditMetrics: Metrics facade
    """
    return AuditMetrics(registry)


@pytest.fixture
def clock():
    """
    Provides a manually advanced clock.

    Returns:
        FakeClock: Clock starting at an arbitrary reading
    """
    return FakeClock()


@pytest.fixture
def timestamps(clock):
    """
    Provides a timestamp cache with a 300s TTL driven by the fake clock.

    Args:
        clock: Fixture providing the fake clock

    Returns:
        TimestampCache: Empty cache
    """
    return TimestampCache(ttl=300, cleanup_interval=60, clock=clock)


@pytest.fixture
def processor(timestamps, metrics):
    """
    Provides an EventProcessor wired to the test cache and metrics.

    Returns:
        EventProcessor: Processor under test
    """
    return EventProcessor(timestamps, metrics)
