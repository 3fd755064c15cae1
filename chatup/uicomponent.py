"""Client user-interface component: bridges the GUI and the application events."""

from __future__ import annotations

from dataclasses import dataclass

from chatup import events
from chatup.console import ConsoleRenderer
from chatup.events import ApplicationEvent, Broadcaster, Component, EventType
from chatup.gui import AppGUI, ChatMessageInfo, HostInfo, Renderer, WindowType
from chatup.messages import ChatMessage

APP_NAME = "Chat App"


@dataclass
class UserData:
    """What the client knows about its own user."""

    username: str = ""
    current_server_address: str = ""
    host_id: int = 0


class UIComponent(Component):
    """Drives the chat GUI and turns its actions into application events."""

    def __init__(self, broadcaster: Broadcaster, renderer: Renderer | None = None) -> None:
        super().__init__(broadcaster)
        if renderer is None:
            renderer = ConsoleRenderer(APP_NAME)
        self.gui = AppGUI(renderer)
        self.user_data = UserData()

    def init(self) -> None:
        bus = self.broadcaster
        bus.subscribe(EventType.EXIT_APPLICATION, lambda _event: self.gui.close_app())
        bus.subscribe(EventType.CHAT_MESSAGE_RECEIVED, self._on_chat_message_received)
        bus.subscribe(EventType.HOST_DATA_RECEIVED, self._on_host_data_received)
        bus.subscribe(EventType.HOST_CONNECTED, self._on_host_connected)
        bus.subscribe(EventType.HOST_DISCONNECTED, self._on_host_disconnected)

        relay = self.gui.relay
        relay.on_message_posted_to_chat.subscribe(self._on_message_posted)
        relay.on_server_chosen.subscribe(self._on_server_chosen)
        relay.get_user_data.subscribe(
            lambda: (self.user_data.username, self.user_data.host_id)
        )
        relay.on_should_quit.subscribe(self._on_should_quit)

        self.gui.init()

    def update(self) -> None:
        """Draw one GUI frame."""
        self.gui.on_update()

    def _on_message_posted(self, info: ChatMessageInfo) -> None:
        self.broadcaster.push(
            events.ChatMessagePosted(
                msg=ChatMessage(text=info.text, username=info.username, host_id=info.host_id)
            )
        )

    def _on_server_chosen(self, address: str, port: str, username: str) -> None:
        self.user_data.current_server_address = address
        self.user_data.username = username
        self.broadcaster.push(
            events.ServerChosen(address=address, port=port, username=username)
        )

    def _on_should_quit(self) -> None:
        self.gui.app_state.closing = True
        self.broadcaster.push(events.ExitApplication())

    def _on_chat_message_received(self, event: ApplicationEvent) -> None:
        self.gui.on_new_chat_message(event.msg)

    def _on_host_connected(self, event: ApplicationEvent) -> None:
        self.gui.on_new_host_in_chat(HostInfo(username=event.username, host_id=event.host_id))

    def _on_host_disconnected(self, event: ApplicationEvent) -> None:
        self.gui.on_host_disconnected(event.host_id)

    def _on_host_data_received(self, event: ApplicationEvent) -> None:
        self.user_data.host_id = event.my_host_id
        self.gui.on_window_change(WindowType.MAIN_WINDOW)