"""Client-side networking: turns application events into messages and back."""

from __future__ import annotations

import logging

from chatup import events, messages
from chatup.client import Client
from chatup.events import ApplicationEvent, Broadcaster, Component, EventType
from chatup.messages import Message, MessageError, MessageID

log = logging.getLogger(__name__)


class NetworkComponent(Component):
    """Connects to the chat server and bridges it with the broadcaster."""

    def __init__(self, broadcaster: Broadcaster) -> None:
        super().__init__(broadcaster)
        self.client = Client()
        self._username = ""
        self._host_id: int | None = None
        self._handlers = {
            MessageID.HOST_CONNECTION: self._handle_host_connection,
            MessageID.HOST_DISCONNECTED: self._handle_host_disconnected,
            MessageID.SERVER_DATA: self._handle_server_data,
            MessageID.CHAT_MESSAGE: self._handle_chat_message,
        }

    @property
    def username(self) -> str:
        """User name sent to the server when connecting."""
        return self._username

    @property
    def host_id(self) -> int | None:
        """Host id the server assigned, once known."""
        return self._host_id

    def init(self) -> None:
        bus = self.broadcaster
        bus.subscribe(EventType.CHAT_MESSAGE_POSTED, self._on_chat_message_posted)
        bus.subscribe(EventType.SERVER_CHOSEN, self._on_server_chosen)
        bus.subscribe(EventType.EXIT_APPLICATION, self._on_exit_application)

        relay = self.client.relay
        relay.on_host_disconnected.subscribe(
            lambda _host_id: bus.push(events.ConnectionClosed())
        )
        relay.on_host_connection.subscribe(self._on_host_connection)
        relay.on_message_received.subscribe(self._on_message_received)

    def update(self) -> None:
        """Nothing to do per step; all work happens on events."""

    def _on_host_connection(self, _host_id: int) -> None:
        msg = Message()
        messages.ConnectionEstablished(username=self._username).serialize_into(msg)
        self.client.send_message(msg)

    def _on_message_received(self, _host_id: int, msg: Message) -> None:
        if msg.id is MessageID.CONNECTION_ESTABLISHED:
            log.warning("CONNECTION_ESTABLISHED reached client, which shouldn't happen")
            return
        handler = self._handlers.get(msg.id)
        if handler is None:
            return
        try:
            handler(msg)
        except MessageError as exc:
            log.warning("malformed %s from server: %s", msg.id.name, exc)

    def _handle_chat_message(self, msg: Message) -> None:
        chat = messages.ChatMessage.deserialize_from(msg)
        self.broadcaster.push(events.ChatMessageReceived(msg=chat))

    def _handle_host_connection(self, msg: Message) -> None:
        pack = messages.HostConnection.deserialize_from(msg)
        self.broadcaster.push(
            events.HostConnected(username=pack.username, host_id=pack.host_id)
        )

    def _handle_host_disconnected(self, msg: Message) -> None:
        pack = messages.HostDisconnected.deserialize_from(msg)
        self.broadcaster.push(events.HostDisconnected(host_id=pack.host_id))

    def _handle_server_data(self, msg: Message) -> None:
        pack = messages.ServerData.deserialize_from(msg)
        self._host_id = pack.host_id
        self.broadcaster.push(events.HostDataReceived(my_host_id=pack.host_id))

    def _on_chat_message_posted(self, event: ApplicationEvent) -> None:
        posted = event.msg
        msg = Message(MessageID.CHAT_MESSAGE)
        messages.ChatMessage(
            text=posted.text, username=posted.username, host_id=posted.host_id
        ).serialize_into(msg)
        self.client.send_message(msg)

    def _on_server_chosen(self, event: ApplicationEvent) -> None:
        self._username = event.username
        try:
            self.client.connect_to_server(event.address, event.port)
        except (OSError, ValueError) as exc:
            log.error("could not connect to %s:%s: %s", event.address, event.port, exc)

    def _on_exit_application(self, _event: ApplicationEvent) -> None:
        if self.client.is_connected_to_server():
            self.client.disconnect_from_server()