"""Application events, the broadcaster that routes them, and callback hooks."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, ClassVar

from chatup.messages import ChatMessage, MessageID


class EventType(IntEnum):
    """Kinds of events passed between application components."""

    NONE = 0
    INPUT_EVENT = 1
    MESSAGE_SENT = 2
    CHAT_MESSAGE_RECEIVED = 3
    CHAT_MESSAGE_POSTED = 4
    SERVER_CHOSEN = 5
    CONNECTION_ESTABLISHED = 6
    CONNECTION_CLOSED = 7
    HOST_DATA_RECEIVED = 8
    HOST_CONNECTED = 9
    HOST_DISCONNECTED = 10
    EXIT_APPLICATION = 11


@dataclass
class ApplicationEvent:
    """Base of all events; ``type`` selects the subscribers it reaches."""

    type: ClassVar[EventType] = EventType.NONE


@dataclass
class ExitApplication(ApplicationEvent):
    type: ClassVar[EventType] = EventType.EXIT_APPLICATION


@dataclass
class ConnectionEstablished(ApplicationEvent):
    type: ClassVar[EventType] = EventType.CONNECTION_ESTABLISHED
    host_id: int = 0


@dataclass
class ConnectionClosed(ApplicationEvent):
    type: ClassVar[EventType] = EventType.CONNECTION_CLOSED


@dataclass
class HostConnected(ApplicationEvent):
    type: ClassVar[EventType] = EventType.HOST_CONNECTED
    username: str = ""
    host_id: int = 0


@dataclass
class HostDisconnected(ApplicationEvent):
    type: ClassVar[EventType] = EventType.HOST_DISCONNECTED
    host_id: int = 0


@dataclass
class HostDataReceived(ApplicationEvent):
    type: ClassVar[EventType] = EventType.HOST_DATA_RECEIVED
    my_host_id: int = 0


@dataclass
class ChatMessageReceived(ApplicationEvent):
    type: ClassVar[EventType] = EventType.CHAT_MESSAGE_RECEIVED
    msg: ChatMessage = field(default_factory=ChatMessage)


@dataclass
class ChatMessagePosted(ApplicationEvent):
    type: ClassVar[EventType] = EventType.CHAT_MESSAGE_POSTED
    msg: ChatMessage = field(default_factory=ChatMessage)


@dataclass
class MessageSent(ApplicationEvent):
    """A message was written to the socket."""

    type: ClassVar[EventType] = EventType.MESSAGE_SENT
    msg_id: MessageID | None = None


@dataclass
class ServerChosen(ApplicationEvent):
    type: ClassVar[EventType] = EventType.SERVER_CHOSEN
    address: str = ""
    port: str = ""
    username: str = ""


EventCallback = Callable[[ApplicationEvent], Any]


class Broadcaster:
    """Routes events to every callback subscribed to their type, in order."""

    def __init__(self) -> None:
        self._callbacks: defaultdict[EventType, list[EventCallback]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe(self, event_type: EventType, callback: EventCallback | None) -> None:
        """Register ``callback`` for ``event_type``; ``None`` is ignored."""
        if callback is None:
            return
        with self._lock:
            self._callbacks[EventType(event_type)].append(callback)

    def push(self, event: ApplicationEvent) -> None:
        """Call every callback subscribed to the event's type."""
        with self._lock:
            callbacks = list(self._callbacks.get(event.type, ()))
            for callback in callbacks:
                callback(event)


class InternalEvent:
    """A hook holding at most one callback; subscribing replaces it."""

    def __init__(self) -> None:
        self._callback: Callable[..., Any] | None = None

    def subscribe(self, callback: Callable[..., Any] | None) -> None:
        self._callback = callback

    def __call__(self, *args: Any) -> Any:
        """Invoke the callback, returning its result, or None without one."""
        if self._callback is None:
            return None
        return self._callback(*args)


@dataclass
class HostEvents:
    """Hooks raised by network hosts."""

    on_host_connection: InternalEvent = field(default_factory=InternalEvent)
    on_host_disconnected: InternalEvent = field(default_factory=InternalEvent)
    on_message_received: InternalEvent = field(default_factory=InternalEvent)
    on_message_sent: InternalEvent = field(default_factory=InternalEvent)


@dataclass
class GUIEvents:
    """Hooks raised by the user interface.

    ``get_user_data`` is expected to return a ``(username, host_id)`` pair.
    """

    on_message_posted_to_chat: InternalEvent = field(default_factory=InternalEvent)
    on_server_chosen: InternalEvent = field(default_factory=InternalEvent)
    get_user_data: InternalEvent = field(default_factory=InternalEvent)
    on_should_quit: InternalEvent = field(default_factory=InternalEvent)


class Component(ABC):
    """A part of an application that talks through a shared broadcaster."""

    def __init__(self, broadcaster: Broadcaster) -> None:
        self.broadcaster = broadcaster

    @abstractmethod
    def init(self) -> None:
        """Subscribe to events and prepare the component."""

    @abstractmethod
    def update(self) -> None:
        """Do one step of the component's work."""


class Application(ABC):
    """An application owning the broadcaster its components share."""

    def __init__(self) -> None:
        self.broadcaster = Broadcaster()

    @abstractmethod
    def init(self) -> None:
        """Prepare the application's components."""

    @abstractmethod
    def run(self) -> None:
        """Run the application until it finishes."""