"""TCP server that accepts chat hosts and routes messages to them."""

from __future__ import annotations

import ipaddress
import itertools
import logging
import socket
import threading

from chatup.events import HostEvents
from chatup.host import Host
from chatup.messages import Message

log = logging.getLogger(__name__)

MAX_HOSTS = 256
_ACCEPT_POLL_SECONDS = 0.1


class Server:
    """Listens on an address and keeps one ``Host`` per accepted connection.

    Host ids are handed out from 1 upwards. Connection, disconnection and
    received-message hooks are reported through ``relay``.
    """

    def __init__(
        self, binding_address: str, port: int, *, max_hosts: int = MAX_HOSTS
    ) -> None:
        ip = ipaddress.ip_address(binding_address)
        family = socket.AF_INET6 if ip.version == 6 else socket.AF_INET
        self.relay = HostEvents()
        self._listener = socket.create_server((str(ip), port), family=family)
        self._listener.settimeout(_ACCEPT_POLL_SECONDS)
        self._max_hosts = max_hosts
        self._hosts: dict[int, Host] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._stopping = threading.Event()
        self._accept_thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """The address and port the server is bound to."""
        host, port = self._listener.getsockname()[:2]
        return host, port

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def run(self) -> None:
        """Start accepting connections in the background."""
        if self._accept_thread is not None:
            raise RuntimeError("server is already running")
        self._accept_thread = threading.Thread(
            target=self._accept_loop, name="server-accept", daemon=True
        )
        self._accept_thread.start()
        log.info("Server running!")

    def shutdown(self) -> None:
        """Stop accepting, close every host connection and wait for the listener."""
        self._stopping.set()
        self._listener.close()
        with self._lock:
            hosts = list(self._hosts.values())
            self._hosts.clear()
        for host in hosts:
            host.close_connection()
        thread = self._accept_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def broadcast_message_to_clients(self, msg: Message) -> None:
        """Send ``msg`` to every connected host."""
        for host in self._snapshot():
            if host.is_connected():
                host.send_message(msg)

    def broadcast_message_to_clients_except(
        self, sender_host_id: int, msg: Message
    ) -> None:
        """Send ``msg`` to every connected host but ``sender_host_id``."""
        for host in self._snapshot():
            if host.host_id != sender_host_id and host.is_connected():
                host.send_message(msg)

    def send_message_to_client(self, msg: Message, host_id: int) -> None:
        """Send ``msg`` to one host; unknown ids are ignored."""
        with self._lock:
            host = self._hosts.get(host_id)
        if host is not None:
            host.send_message(msg)

    def remove_host(self, host_id: int) -> None:
        """Forget a host and close its connection."""
        with self._lock:
            host = self._hosts.pop(host_id, None)
        if host is not None:
            host.close_connection()

    def _snapshot(self) -> list[Host]:
        with self._lock:
            return list(self._hosts.values())

    def _accept_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                sock, peer = self._listener.accept()
            except TimeoutError:
                continue
            except OSError as exc:
                if not self._stopping.is_set():
                    log.error("accept failed: %s", exc)
                return
            sock.settimeout(None)
            with self._lock:
                full = len(self._hosts) >= self._max_hosts
            if full:
                # Once full, the server stops listening for new connections.
                log.warning("host limit of %d reached, refusing %s", self._max_hosts, peer[0])
                sock.close()
                return
            self._on_connection_accepted(sock, peer)

    def _on_connection_accepted(self, sock: socket.socket, peer: tuple) -> None:
        log.info("host connected: %s", peer[0])
        host_id = next(self._ids)
        host = Host(self.relay, sock, host_id)
        with self._lock:
            self._hosts[host_id] = host
        host.on_connection_established()