"""
Prometheus metrics definitions.

Audit event metrics are owned by a single AuditMetrics instance built at
startup and passed to the components that update them:

    from vault_audit_exporter.utils.metrics import AuditMetrics
    metrics = AuditMetrics()
    metrics.inc_requests(event.labels())
"""

from vault_audit_exporter.utils.metrics.collector import AuditMetrics

__all__ = ["AuditMetrics"]
