"""Chat user interface: layouts, the renderer interface and the application GUI.

Layouts are text based: each frame they take at most one line of user input
and return the lines to show. A ``Renderer`` puts those lines on screen and
supplies the input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum

from chatup.events import GUIEvents
from chatup.messages import ChatMessage

BOOT_WIN_WIDTH = 400
BOOT_WIN_HEIGHT = 300
MAIN_WIN_WIDTH = 800
MAIN_WIN_HEIGHT = 720

_SIDEBAR_FRACTION = 0.25
_CHAT_PROMPT = "Write something"

_BOOT_FIELDS = ("server_address", "port", "username")
_BOOT_HINTS = {
    "server_address": "Enter server address",
    "port": "Enter a port",
    "username": "Enter username",
}
_BOOT_RETRY_HINTS = {
    "server_address": "Enter a valid address",
    "port": "Enter a valid port",
    "username": "Enter a valid user name",
}


class WindowType(IntEnum):
    """Which window the GUI shows."""

    BOOT_WINDOW = 0
    MAIN_WINDOW = 1


@dataclass
class AppState:
    """State of the GUI shared with the component that drives it."""

    window_type: WindowType = WindowType.BOOT_WINDOW
    closing: bool = False


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChatMessageInfo:
    """A chat message as shown in the chat view."""

    text: str = ""
    username: str = ""
    host_id: int = 0
    sent_time: datetime = field(default_factory=_now)
    mine: bool = False


@dataclass
class HostInfo:
    """A participant of the chat."""

    username: str = ""
    host_id: int = 0


def format_chat_message_block(msg: ChatMessageInfo) -> list[str]:
    """Lines showing one chat message: the author, then the text."""
    return [msg.username, msg.text]


def format_participant_block(host: HostInfo) -> list[str]:
    """Lines showing one participant."""
    return [host.username, "connected"]


class Renderer(ABC):
    """Puts frames on screen and supplies user input."""

    @abstractmethod
    def init_viewport(self) -> bool:
        """Open the viewport; False when it cannot be opened."""

    @abstractmethod
    def create_frame(self) -> bool:
        """Begin a frame; False when the viewport is gone or cannot draw."""

    @abstractmethod
    def render_frame(self, lines: list[str]) -> bool:
        """Show ``lines``; False when the viewport is gone."""

    @abstractmethod
    def destroy(self) -> None:
        """Close the viewport."""

    @abstractmethod
    def get_viewport_size(self) -> tuple[int, int]:
        """Current ``(width, height)`` of the viewport."""

    @abstractmethod
    def set_viewport_size(self, width: int, height: int) -> None:
        """Resize the viewport."""

    @abstractmethod
    def read_input(self) -> str | None:
        """A line the user entered since the last frame, or None."""


class _Layout(ABC):
    def __init__(self, relay: GUIEvents) -> None:
        self.relay = relay
        self.width = 0.0
        self.height = 0.0

    @abstractmethod
    def update(self, text: str | None) -> list[str]:
        """Handle a line of input, if any, and return the lines to show."""

    @abstractmethod
    def set_layout_size(self, width: float, height: float) -> None:
        """Set the space the layout may use."""


class BootLayout(_Layout):
    """Asks for the server address, port and user name, in that order."""

    def __init__(self, relay: GUIEvents) -> None:
        super().__init__(relay)
        self.values = dict.fromkeys(_BOOT_FIELDS, "")
        self.hints = dict(_BOOT_HINTS)
        self._focus = 0

    @property
    def focused_field(self) -> str:
        """Name of the field the next line of input fills."""
        return _BOOT_FIELDS[self._focus]

    def update(self, text: str | None) -> list[str]:
        if text is not None:
            self.values[self.focused_field] = text.strip()
            if self._focus == len(_BOOT_FIELDS) - 1:
                self._focus = 0
                self.on_enter()
            else:
                self._focus += 1
        return [
            f"{'>' if index == self._focus else ' '} {self.hints[name]}: {self.values[name]}"
            for index, name in enumerate(_BOOT_FIELDS)
        ]

    def set_layout_size(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def on_enter(self) -> bool:
        """Choose the server if every field is filled, else clear them all."""
        if not all(self.values.values()):
            self.hints = dict(_BOOT_RETRY_HINTS)
            self.values = dict.fromkeys(_BOOT_FIELDS, "")
            self._focus = 0
            return False
        self.relay.on_server_chosen(
            self.values["server_address"], self.values["port"], self.values["username"]
        )
        return True


class ChatLayout(_Layout):
    """Shows the chat messages and posts what the user writes."""

    def __init__(self, relay: GUIEvents, messages: list[ChatMessageInfo]) -> None:
        super().__init__(relay)
        self.messages = messages
        self.message_input = ""

    def update(self, text: str | None) -> list[str]:
        if text is not None:
            self.message_input = text
            self.on_message_posted()
        lines = [line for msg in self.messages for line in format_chat_message_block(msg)]
        lines.append(f"> {self.message_input or _CHAT_PROMPT}")
        return lines

    def set_layout_size(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def on_message_posted(self) -> ChatMessageInfo:
        """Post the current input as the user's own message and clear it."""
        info = ChatMessageInfo(text=self.message_input, sent_time=_now(), mine=True)
        user_data = self.relay.get_user_data()
        if user_data is not None:
            info.username, info.host_id = user_data
        self.message_input = ""
        self.messages.append(info)
        self.relay.on_message_posted_to_chat(info)
        return info


class ParticipantsLayout(_Layout):
    """Lists the other hosts in the chat."""

    def __init__(self, relay: GUIEvents, participants: list[HostInfo]) -> None:
        super().__init__(relay)
        self.participants = participants

    def update(self, text: str | None) -> list[str]:
        lines: list[str] = []
        for host in self.participants:
            lines.extend(format_participant_block(host))
            lines.append("")
        return lines

    def set_layout_size(self, width: float, height: float) -> None:
        self.width = width
        self.height = height


class AppGUI:
    """The chat window: a boot form first, then participants and chat."""

    def __init__(self, renderer: Renderer) -> None:
        self.renderer = renderer
        self.relay = GUIEvents()
        self.app_state = AppState()
        self.participants: list[HostInfo] = []
        self.chat_messages: list[ChatMessageInfo] = []
        self.boot_layout = BootLayout(self.relay)
        self.chat_layout = ChatLayout(self.relay, self.chat_messages)
        self.participants_layout = ParticipantsLayout(self.relay, self.participants)

    def init(self) -> None:
        """Open the viewport at the boot window size."""
        self.renderer.init_viewport()
        self.renderer.set_viewport_size(BOOT_WIN_WIDTH, BOOT_WIN_HEIGHT)

    def close_app(self) -> None:
        """Close the viewport and ask to quit, unless already closing."""
        if self.app_state.closing:
            return
        self.renderer.destroy()
        self.relay.on_should_quit()

    def on_update(self) -> None:
        """Draw one frame, feeding it the user's input."""
        if self.app_state.closing:
            return
        if not self.renderer.create_frame():
            self.close_app()
            return
        text = self.renderer.read_input()

        if self.app_state.window_type is WindowType.MAIN_WINDOW:
            self._check_window_size()
            lines = self._main_window_lines(text)
        else:
            self.renderer.set_viewport_size(BOOT_WIN_WIDTH, BOOT_WIN_HEIGHT)
            lines = self.boot_layout.update(text)

        if not self.renderer.render_frame(lines):
            self.close_app()

    def on_new_chat_message(self, msg: ChatMessage) -> None:
        self.chat_messages.append(
            ChatMessageInfo(text=msg.text, username=msg.username, host_id=msg.host_id)
        )

    def on_window_change(self, window: WindowType) -> None:
        self.app_state.window_type = WindowType(window)
        if self.app_state.window_type is WindowType.MAIN_WINDOW:
            self.renderer.set_viewport_size(MAIN_WIN_WIDTH, MAIN_WIN_HEIGHT)
        else:
            self.renderer.set_viewport_size(BOOT_WIN_WIDTH, BOOT_WIN_HEIGHT)

    def on_new_host_in_chat(self, host: HostInfo) -> None:
        self.participants.append(host)

    def on_host_disconnected(self, host_id: int) -> None:
        """Drop the first participant with ``host_id``; unknown ids are ignored."""
        for index, host in enumerate(self.participants):
            if host.host_id == host_id:
                del self.participants[index]
                return

    def _main_window_lines(self, text: str | None) -> list[str]:
        full_width, full_height = self.renderer.get_viewport_size()
        left_width = full_width * _SIDEBAR_FRACTION
        self.participants_layout.set_layout_size(left_width, full_height)
        participant_lines = self.participants_layout.update(None)
        self.chat_layout.set_layout_size(full_width - left_width, full_height)
        chat_lines = self.chat_layout.update(text)
        return [*participant_lines, "", *chat_lines]

    def _check_window_size(self) -> None:
        width, height = self.renderer.get_viewport_size()
        self.renderer.set_viewport_size(
            max(width, MAIN_WIN_WIDTH), max(height, MAIN_WIN_HEIGHT)
        )