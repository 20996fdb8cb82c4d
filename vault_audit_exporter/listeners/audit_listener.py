"""
Vault socket audit device listener.

Vault streams audit entries as newline-delimited JSON over a TCP (or unix)
socket. The listener accepts connections and runs one ConnectionHandler
task per connection; the handler decodes each line and hands it to the
event dispatcher without waiting for it to be processed.

Accepting runs inside the event loop's server machinery: an accept failure
is logged by the loop and accepting continues.
"""

import asyncio
import socket
from typing import Any

from vault_audit_exporter.constants import READ_IDLE_TIMEOUT_SECONDS
from vault_audit_exporter.exceptions import DecodeError, ListenerBindError
from vault_audit_exporter.handlers.dispatcher import EventDispatcher
from vault_audit_exporter.logging import clear_log_context, logger, set_log_context
from vault_audit_exporter.schemas.audit_event import classify
from vault_audit_exporter.utils.network import ListenAddress

_FAMILIES = {
    "tcp": socket.AF_UNSPEC,
    "tcp4": socket.AF_INET,
    "tcp6": socket.AF_INET6,
}


def format_peer(peername: Any) -> str:
    """Render a socket peer name for log messages."""
    if isinstance(peername, tuple) and len(peername) >= 2:
        host, port = peername[0], peername[1]
        if ":" in str(host):
            return f"[{host}]:{port}"
        return f"{host}:{port}"
    return str(peername) if peername else "unix"


class ConnectionHandler:
    """
    Reads audit events from one connection.

    The connection is closed when it stays idle longer than
    ``idle_timeout`` seconds, when the peer closes it or on a transport
    error. Lines that fail to decode are logged and skipped; they never
    close the connection.
    """

    def __init__(
        self,
        dispatcher: EventDispatcher,
        idle_timeout: float = READ_IDLE_TIMEOUT_SECONDS,
    ) -> None:
        self.dispatcher = dispatcher
        self.idle_timeout = idle_timeout

    async def __call__(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        set_log_context(peer=format_peer(writer.get_extra_info("peername")))
        logger.debug("Accepted audit log connection")

        try:
            await self.read_events(reader)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError) as ex:
                logger.warning(f"Error closing connection: {ex}")
            logger.debug("Closed audit log connection")
            clear_log_context()

    async def read_events(self, reader: asyncio.StreamReader) -> int:
        """
        Decode and dispatch lines until the connection ends.

        Returns:
            Number of events dispatched.
        """
        dispatched = 0
        while True:
            try:
                line = await asyncio.wait_for(
                    reader.readline(), timeout=self.idle_timeout
                )
            except asyncio.TimeoutError:
                logger.info(
                    f"Connection idle for {self.idle_timeout}s, closing"
                )
                return dispatched
            except ValueError as ex:
                # Line longer than the stream limit; the reader has
                # discarded it.
                logger.warning(f"Error reading audit event: {ex}")
                continue
            except (ConnectionError, OSError) as ex:
                logger.warning(f"Error reading from connection: {ex}")
                return dispatched

            if not line:
                return dispatched

            line = line.strip()
            if not line:
                continue

            try:
                event = classify(line)
            except DecodeError as ex:
                logger.warning(f"Error decoding audit event: {ex}")
                continue

            if self.dispatcher.submit(event):
                dispatched += 1


class AuditListener:
    """
    Stream server accepting Vault audit device connections.

    Example:
        >>> listener = AuditListener(address, ConnectionHandler(dispatcher))
        >>> await listener.start()
    """

    def __init__(
        self,
        address: ListenAddress,
        handler: ConnectionHandler,
        max_line_bytes: int = 1024 * 1024,
    ) -> None:
        self.address = address
        self.handler = handler
        self.max_line_bytes = max_line_bytes
        self._server: asyncio.AbstractServer | None = None

    async def start(self) -> None:
        """
        Bind the listening socket and start accepting connections.

        Raises:
            ListenerBindError: If the address cannot be bound.
        """
        try:
            if self.address.network == "unix":
                self._server = await asyncio.start_unix_server(
                    self.handler,
                    path=self.address.path,
                    limit=self.max_line_bytes,
                )
            else:
                self._server = await asyncio.start_server(
                    self.handler,
                    host=self.address.host,
                    port=self.address.port,
                    family=_FAMILIES[self.address.network],
                    limit=self.max_line_bytes,
                )
        except OSError as ex:
            raise ListenerBindError(
                f"error listening on {self.address.network} "
                f"{self.describe()}: {ex}"
            ) from ex

        logger.info(
            f"Listening for audit log connections on "
            f"{self.address.network} {self.describe()}"
        )

    @property
    def port(self) -> int | None:
        """Bound TCP port (useful when listening on port 0)."""
        if self._server is None or not self._server.sockets:
            return None
        sockname = self._server.sockets[0].getsockname()
        return sockname[1] if isinstance(sockname, tuple) else None

    def describe(self) -> str:
        if self.address.network == "unix":
            return str(self.address.path)
        return f"{self.address.host or '*'}:{self.address.port}"

    async def close(self) -> None:
        """Stop accepting connections."""
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Audit log listener closed")
