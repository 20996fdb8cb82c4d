"""Listen address parsing for the audit listener and the HTTP server."""

from typing import NamedTuple

from vault_audit_exporter.exceptions import ConfigurationError

STREAM_NETWORKS = {"tcp", "tcp4", "tcp6", "unix"}


class ListenAddress(NamedTuple):
    """
    Parsed listen address.

    Attributes:
        network: One of ``tcp``, ``tcp4``, ``tcp6`` or ``unix``.
        host: Interface to bind, None for every interface (TCP only).
        port: TCP port, None for unix sockets.
        path: Socket path, None for TCP.
    """

    network: str
    host: str | None
    port: int | None
    path: str | None = None


def split_host_port(addr: str) -> tuple[str, int]:
    """
    Split ``host:port`` (``[::1]:port`` for IPv6) into its parts.

    An empty host (``":9090"``) is returned as an empty string.

    Raises:
        ConfigurationError: If the address has no valid port.
    """
    if addr.startswith("["):
        end = addr.find("]")
        if end == -1 or addr[end + 1 : end + 2] != ":":
            raise ConfigurationError(f"invalid address {addr!r}")
        host, port = addr[1:end], addr[end + 2 :]
    else:
        host, sep, port = addr.rpartition(":")
        if not sep:
            raise ConfigurationError(f"missing port in address {addr!r}")
        if ":" in host:
            raise ConfigurationError(
                f"too many colons in address {addr!r}"
            )

    try:
        port_number = int(port)
    except ValueError:
        raise ConfigurationError(f"invalid port in address {addr!r}") from None
    if not 0 <= port_number <= 65535:
        raise ConfigurationError(f"port out of range in address {addr!r}")

    return host, port_number


def parse_listen_address(network: str, addr: str) -> ListenAddress:
    """
    Resolve a network/address pair into a ListenAddress.

    Args:
        network: Stream network name.
        addr: ``host:port`` for TCP networks, a filesystem path for unix.

    Returns:
        ListenAddress ready to hand to the listener.

    Raises:
        ConfigurationError: For unsupported networks or malformed addresses.
    """
    network = network.lower()
    if network not in STREAM_NETWORKS:
        raise ConfigurationError(
            f"unsupported network {network!r}, expected one of "
            f"{', '.join(sorted(STREAM_NETWORKS))}"
        )

    if network == "unix":
        if not addr:
            raise ConfigurationError("unix network requires a socket path")
        return ListenAddress(network, None, None, addr)

    host, port = split_host_port(addr)
    if not host:
        if network == "tcp4":
            host = "0.0.0.0"
        elif network == "tcp6":
            host = "::"
    return ListenAddress(network, host or None, port)
