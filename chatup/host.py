"""A peer on the other end of a TCP stream, exchanging framed messages."""

from __future__ import annotations

import logging
import queue
import socket
import threading

from chatup.events import HostEvents
from chatup.messages import HEADER_SIZE, Message, MessageError, decode_header

log = logging.getLogger(__name__)


class Host:
    """One connection that reads and writes messages in the background.

    Received messages, connections and disconnections are reported through
    the hooks of ``relay``. Reading and writing run on their own threads, so
    the hooks are called from those threads.
    """

    def __init__(
        self,
        relay: HostEvents,
        sock: socket.socket | None = None,
        host_id: int = 0,
    ) -> None:
        self._relay = relay
        self._sock = sock
        self._host_id = host_id
        self._lock = threading.Lock()
        self._connected = False
        self._closed = False
        self._disconnect_reported = False
        self._outbox: queue.Queue[bytes | None] = queue.Queue()

    @property
    def host_id(self) -> int:
        return self._host_id

    def connect(self, address: str, port: int | str) -> None:
        """Open a connection to ``address``:``port`` and start exchanging messages.

        Raises ``OSError`` when the address cannot be resolved or reached.
        """
        with self._lock:
            if self._sock is not None:
                raise RuntimeError("host already has a connection")
        sock = socket.create_connection((address, int(port)))
        with self._lock:
            self._sock = sock
        peer = sock.getpeername()
        log.info("client connected to host: %s port: %s", peer[0], peer[1])
        self.on_connection_established()

    def on_connection_established(self) -> None:
        """Mark the connection as live and start reading and writing."""
        with self._lock:
            if self._connected or self._closed or self._sock is None:
                return
            self._connected = True
        threading.Thread(
            target=self._write_loop, name=f"host-{self._host_id}-write", daemon=True
        ).start()
        self._relay.on_host_connection(self._host_id)
        threading.Thread(
            target=self._read_loop, name=f"host-{self._host_id}-read", daemon=True
        ).start()

    def send_message(self, msg: Message) -> None:
        """Queue a copy of ``msg`` for sending; dropped when not connected."""
        data = msg.header_bytes() + bytes(msg.body)
        with self._lock:
            if not self._connected:
                log.debug("host %d: not connected, message dropped", self._host_id)
                return
            self._outbox.put(data)

    def close_connection(self) -> None:
        """Close the socket and stop the background threads."""
        with self._lock:
            self._connected = False
            already_closed = self._closed
            self._closed = True
            sock = self._sock
        if already_closed or sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()
        self._outbox.put(None)

    def is_connected(self) -> bool:
        with self._lock:
            return (
                self._connected
                and self._sock is not None
                and self._sock.fileno() != -1
            )

    def _recv_exact(self, size: int) -> bytes:
        chunks = bytearray()
        while len(chunks) < size:
            chunk = self._sock.recv(size - len(chunks))
            if not chunk:
                raise ConnectionError("connection closed by peer")
            chunks += chunk
        return bytes(chunks)

    def _read_loop(self) -> None:
        try:
            while True:
                msg_id, size = decode_header(self._recv_exact(HEADER_SIZE))
                body = self._recv_exact(size) if size else b""
                self._relay.on_message_received(self._host_id, Message(msg_id, body))
        except (OSError, MessageError) as exc:
            log.info("host %d: %s while reading", self._host_id, exc)
            self._handle_error()

    def _write_loop(self) -> None:
        while True:
            data = self._outbox.get()
            if data is None:
                return
            try:
                self._sock.sendall(data)
            except OSError as exc:
                log.info("host %d: %s while writing", self._host_id, exc)
                self._handle_error()
                return

    def _handle_error(self) -> None:
        self.close_connection()
        with self._lock:
            if self._disconnect_reported:
                return
            self._disconnect_reported = True
        self._relay.on_host_disconnected(self._host_id)