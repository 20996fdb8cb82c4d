"""
RFC 3339 timestamp parsing for audit events.

Vault writes timestamps with nanosecond precision
(``2024-01-01T00:00:00.123456789Z``), which ``datetime.fromisoformat`` does
not accept on every supported Python version, so the fractional part is
parsed separately and kept as integer nanoseconds.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from vault_audit_exporter.exceptions import TimestampParseError

_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(Z|[+-]\d{2}:\d{2})$"
)


class Timestamp(NamedTuple):
    """Second-resolution datetime plus the sub-second part in nanoseconds."""

    moment: datetime
    nanos: int


def parse_timestamp(value: str) -> Timestamp:
    """
    Parse an RFC 3339 timestamp with optional fractional seconds.

    Raises:
        TimestampParseError: If the value is not a valid timestamp.
    """
    match = _RFC3339.match(value)
    if match is None:
        raise TimestampParseError(f"invalid timestamp {value!r}")

    date_part, time_part, fraction, offset = match.groups()
    try:
        moment = datetime.strptime(
            f"{date_part}T{time_part}", "%Y-%m-%dT%H:%M:%S"
        )
        if offset == "Z":
            tz = timezone.utc
        else:
            sign = -1 if offset[0] == "-" else 1
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    except ValueError as ex:
        raise TimestampParseError(f"invalid timestamp {value!r}: {ex}") from ex

    nanos = int(fraction.ljust(9, "0")) if fraction else 0
    return Timestamp(moment.replace(tzinfo=tz), nanos)


def seconds_between(start: str, end: str) -> float:
    """
    Elapsed seconds from ``start`` to ``end``.

    The result is negative when ``end`` precedes ``start``.

    Raises:
        TimestampParseError: If either value is not a valid timestamp.
    """
    first = parse_timestamp(start)
    second = parse_timestamp(end)
    whole = (second.moment - first.moment) // timedelta(seconds=1)
    return whole + (second.nanos - first.nanos) / 1e9
