"""Client side of a chat connection: one host talking to the server."""

from __future__ import annotations

import logging

from chatup.events import HostEvents
from chatup.host import Host
from chatup.messages import Message

log = logging.getLogger(__name__)


class Client:
    """Keeps at most one connection to a chat server.

    Connection, disconnection and received-message hooks are reported
    through ``relay``; the server connection has host id 0.
    """

    def __init__(self) -> None:
        self.relay = HostEvents()
        self._server_host: Host | None = None

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect_from_server()

    def connect_to_server(self, address: str, port: int | str) -> None:
        """Connect to a server; ignored while a connection is already live.

        Raises ``OSError`` when the server cannot be reached.
        """
        host = self._server_host
        if host is not None:
            if host.is_connected():
                log.warning("already connected to a server")
                return
            host.close_connection()
            self._server_host = None

        host = Host(self.relay)
        self._server_host = host
        host.connect(address, port)

    def disconnect_from_server(self) -> None:
        """Close the server connection, if any."""
        if self._server_host is not None:
            self._server_host.close_connection()

    def send_message(self, msg: Message) -> None:
        """Send ``msg`` to the server; dropped when not connected."""
        if self.is_connected_to_server():
            self._server_host.send_message(msg)

    def is_connected_to_server(self) -> bool:
        return self._server_host is not None and self._server_host.is_connected()