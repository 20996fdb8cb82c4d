"""
Custom exception classes for the exporter.

Every recoverable error is scoped to the smallest unit of work (one line,
one connection, one observation). Only ListenerBindError is fatal.
"""


class AuditExporterError(Exception):
    """Base class for all exporter errors."""

    pass


class DecodeError(AuditExporterError):
    """
    Audit log line could not be decoded.

    Raised for invalid JSON, a non-object record or a known field of the
    wrong type. The line is logged and skipped.
    """

    pass


class TimestampParseError(AuditExporterError):
    """
    Audit event timestamp is not a valid RFC 3339 timestamp.

    Raised while computing response latency; the latency observation is
    skipped but the response is still counted.
    """

    pass


class ListenerBindError(AuditExporterError):
    """
    Audit listener could not bind its network address.

    Propagated to the caller and aborts startup.
    """

    pass


class ConfigurationError(AuditExporterError, ValueError):
    """Invalid address, network or duration in the configuration."""

    pass
