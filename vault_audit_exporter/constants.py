"""
Application-level constants for hardcoded exporter behaviour.

These values define the metric naming contract and internal timing and
should not be changed via environment variables. For configurable values
(addresses, cache TTL, worker pool sizing) see
vault_audit_exporter/settings.py.
"""

# ============================================================================
# Prometheus naming
# ============================================================================

# Prefix shared by every exported series (vaultaudit_<subsystem>_<name>)
PROM_NAMESPACE = "vaultaudit"

# Label dimensions shared by the request/response counters and the
# latency histogram
EVENT_LABEL_NAMES = ("operation", "path", "error")


# ============================================================================
# Audit event types
# ============================================================================

AUDIT_EVENT_TYPE_REQUEST = "request"
AUDIT_EVENT_TYPE_RESPONSE = "response"


# ============================================================================
# Connection handling
# ============================================================================

# Idle deadline (seconds) for the next line on an audit connection.
# A connection silent for longer is closed.
READ_IDLE_TIMEOUT_SECONDS = 10


# ============================================================================
# Background Task Behavior
# ============================================================================

# Interval (seconds) between timestamp cache size gauge refreshes
CACHE_METRICS_INTERVAL_SECONDS = 10

# Backoff delay (seconds) when a periodic task encounters an error
TASK_ERROR_BACKOFF_SECONDS = 1
