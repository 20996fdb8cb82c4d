"""
Duration string parsing.

Accepts the duration syntax operators already use for Vault and most Go
tooling (``300ms``, ``1m30s``, ``5m``, ``1.5h``) as well as plain numbers,
which are read as seconds.
"""

import re

from vault_audit_exporter.exceptions import ConfigurationError

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str | int | float) -> float:
    """
    Convert a duration to seconds.

    Args:
        value: Number of seconds, or a duration string such as ``"1m30s"``.

    Returns:
        Duration in seconds (may be zero or negative).

    Raises:
        ConfigurationError: If the string is not a valid duration.

    Example:
        >>> parse_duration("1m30s")
        90.0
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass

    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0
    if not text:
        raise ConfigurationError(f"invalid duration {value!r}")

    total = 0.0
    position = 0
    for match in _COMPONENT.finditer(text):
        if match.start() != position:
            raise ConfigurationError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ConfigurationError(f"invalid duration {value!r}")

    return sign * total
