"""
Mock factories for audit event testing.

Provides a controllable clock for cache expiry and builders for Vault
audit log lines.
"""

import json


class FakeClock:
    """
    Manually advanced monotonic clock.

    Example:
        >>> clock = FakeClock()
        >>> clock.advance(301)
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_audit_line(
    event_type: str,
    request_id: str,
    time: str,
    operation: str = "read",
    path: str = "secret/x",
    error: str | None = None,
) -> str:
    """
    Build one audit log line in the capitalised key style.

    Args:
        event_type: ``request``, ``response`` or anything else.
        request_id: Request identifier.
        time: RFC 3339 timestamp.
        operation: Vault operation.
        path: Request path.
        error: Error text; omitted from the record when None.

    Returns:
        JSON document without a trailing newline.
    """
    record = {
        "type": event_type,
        "Request": {"ID": request_id, "Operation": operation, "Path": path},
        "Time": time,
    }
    if error is not None:
        record["Error"] = error
    return json.dumps(record)


LABELS = {"operation": "read", "path": "secret/x", "error": ""}


def sample(registry, name, labels=None):
    """Current value of a series, or None if it was never created."""
    return registry.get_sample_value(name, labels or {})
