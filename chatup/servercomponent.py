"""Chat server logic: host bookkeeping, message relaying and the server command."""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass

from chatup import messages
from chatup.events import Application, Broadcaster, Component
from chatup.messages import Message, MessageError, MessageID
from chatup.server import Server

log = logging.getLogger(__name__)

_UPDATE_INTERVAL_SECONDS = 0.05


@dataclass
class HostData:
    """What the server remembers about a host that joined the chat."""

    username: str = ""
    address: str = ""
    host_id: int = 0


class ServerComponent(Component):
    """Answers host connections and relays chat traffic between hosts."""

    def __init__(
        self, broadcaster: Broadcaster, binding_address: str, port: int
    ) -> None:
        super().__init__(broadcaster)
        self.server = Server(binding_address, port)
        self._hosts: list[HostData] = []
        self._lock = threading.Lock()
        self._handlers = {
            MessageID.CONNECTION_ESTABLISHED: self._handle_connection_established,
            MessageID.CHAT_MESSAGE: self._handle_chat_message,
        }

    @property
    def hosts(self) -> list[HostData]:
        """Hosts that announced themselves, in the order they joined."""
        with self._lock:
            return list(self._hosts)

    def init(self) -> None:
        """Hook into the server and start accepting connections."""
        relay = self.server.relay
        relay.on_host_connection.subscribe(self._on_host_connection)
        relay.on_host_disconnected.subscribe(self._on_host_disconnected)
        relay.on_message_received.subscribe(self._on_message_received)
        self.server.run()

    def update(self) -> None:
        """Nothing to do per step; all work happens on network events."""

    def _on_host_connection(self, host_id: int) -> None:
        reply = Message()
        messages.ServerData(host_id=host_id).serialize_into(reply)
        self.server.send_message_to_client(reply, host_id)

    def _on_host_disconnected(self, host_id: int) -> None:
        notice = Message()
        messages.HostDisconnected(host_id=host_id).serialize_into(notice)

        self.server.remove_host(host_id)
        with self._lock:
            self._hosts = [h for h in self._hosts if h.host_id != host_id]

        log.info("host disconnected")
        self.server.broadcast_message_to_clients(notice)

    def _on_message_received(self, sender_host_id: int, msg: Message) -> None:
        handler = self._handlers.get(msg.id)
        if handler is not None:
            try:
                handler(sender_host_id, msg)
            except MessageError as exc:
                log.warning("malformed %s from host %d: %s", msg.id.name, sender_host_id, exc)
        elif msg.id is not MessageID.NOTIFICATION:
            log.warning(
                "%s reached server. Server should only send this, not receive it",
                msg.id.name,
            )

    def _handle_chat_message(self, sender_host_id: int, msg: Message) -> None:
        self.server.broadcast_message_to_clients_except(sender_host_id, msg)

    def _handle_connection_established(self, sender_host_id: int, msg: Message) -> None:
        pack = messages.ConnectionEstablished.deserialize_from(msg)
        with self._lock:
            # Tell the newcomer about everyone already in the chat.
            for host in self._hosts:
                known = Message()
                messages.HostConnection(
                    username=host.username, host_id=host.host_id
                ).serialize_into(known)
                self.server.send_message_to_client(known, sender_host_id)

            self._hosts.append(HostData(username=pack.username, host_id=sender_host_id))

            announce = Message()
            messages.HostConnection(
                username=pack.username, host_id=sender_host_id
            ).serialize_into(announce)
            self.server.broadcast_message_to_clients_except(sender_host_id, announce)


class ServerApplication(Application):
    """Runs a server component until stopped."""

    def __init__(self, binding_address: str, port: int) -> None:
        super().__init__()
        self.component = ServerComponent(self.broadcaster, binding_address, port)
        self._stop = threading.Event()

    def init(self) -> None:
        self.component.init()

    def run(self) -> None:
        """Update the component until ``stop`` is called, then shut the server down."""
        try:
            while not self._stop.wait(_UPDATE_INTERVAL_SECONDS):
                self.component.update()
        finally:
            self.component.server.shutdown()

    def stop(self) -> None:
        """Make ``run`` return."""
        self._stop.set()


def _print_help() -> None:
    print("- specify ip address and port that the server should listen to\n")
    print("server <ip> <port>\n")
    print("- if you want to make a LAN server enter your device private NAT ip")
    print("- 127.0.0.1 to run a server for local clients\n")


def main(argv: list[str] | None = None) -> int:
    """Start a chat server on ``<ip> <port>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print("ERROR - missing args\n")
        _print_help()
        return -1

    try:
        port = int(args[1], 10)
    except ValueError:
        print(f"ERROR - invalid port {args[1]!r}\n")
        _print_help()
        return -1
    if not 0 <= port <= 0xFFFF:
        print(f"ERROR - port {port} out of range\n")
        _print_help()
        return -1

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        app = ServerApplication(args[0], port)
    except (OSError, ValueError) as exc:
        print(f"ERROR - {exc}\n")
        return -1

    app.init()
    try:
        app.run()
    except KeyboardInterrupt:
        pass
    return 0