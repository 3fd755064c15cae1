import threading

import pytest

from chatup.events import (
    Application,
    ApplicationEvent,
    Broadcaster,
    ChatMessagePosted,
    ChatMessageReceived,
    Component,
    ConnectionClosed,
    ConnectionEstablished,
    EventType,
    ExitApplication,
    GUIEvents,
    HostConnected,
    HostDataReceived,
    HostDisconnected,
    HostEvents,
    InternalEvent,
    MessageSent,
    ServerChosen,
)
from chatup.messages import ChatMessage


@pytest.mark.parametrize(
    "event_cls, expected",
    [
        (ApplicationEvent, EventType.NONE),
        (ExitApplication, EventType.EXIT_APPLICATION),
        (ConnectionEstablished, EventType.CONNECTION_ESTABLISHED),
        (ConnectionClosed, EventType.CONNECTION_CLOSED),
        (HostConnected, EventType.HOST_CONNECTED),
        (HostDisconnected, EventType.HOST_DISCONNECTED),
        (HostDataReceived, EventType.HOST_DATA_RECEIVED),
        (ChatMessageReceived, EventType.CHAT_MESSAGE_RECEIVED),
        (ChatMessagePosted, EventType.CHAT_MESSAGE_POSTED),
        (MessageSent, EventType.MESSAGE_SENT),
        (ServerChosen, EventType.SERVER_CHOSEN),
    ],
)
def test_event_types(event_cls, expected):
    assert event_cls().type is expected


def test_push_reaches_subscribers_in_order():
    broadcaster = Broadcaster()
    seen = []
    broadcaster.subscribe(EventType.HOST_CONNECTED, lambda e: seen.append(("a", e.username)))
    broadcaster.subscribe(EventType.HOST_CONNECTED, lambda e: seen.append(("b", e.host_id)))
    broadcaster.push(HostConnected(username="ann", host_id=4))
    assert seen == [("a", "ann"), ("b", 4)]


def test_push_only_reaches_matching_type():
    broadcaster = Broadcaster()
    seen = []
    broadcaster.subscribe(EventType.EXIT_APPLICATION, seen.append)
    broadcaster.push(ConnectionClosed())
    assert seen == []
    event = ExitApplication()
    broadcaster.push(event)
    assert seen == [event]


def test_none_callback_is_ignored():
    broadcaster = Broadcaster()
    broadcaster.subscribe(EventType.CONNECTION_CLOSED, None)
    seen = []
    broadcaster.subscribe(EventType.CONNECTION_CLOSED, seen.append)
    broadcaster.push(ConnectionClosed())
    assert len(seen) == 1


def test_callback_may_push_another_event():
    broadcaster = Broadcaster()
    seen = []
    broadcaster.subscribe(
        EventType.CHAT_MESSAGE_POSTED, lambda e: broadcaster.push(ExitApplication())
    )
    broadcaster.subscribe(EventType.EXIT_APPLICATION, lambda e: seen.append(e.type))
    broadcaster.push(ChatMessagePosted(msg=ChatMessage(text="bye")))
    assert seen == [EventType.EXIT_APPLICATION]


def test_push_from_many_threads():
    broadcaster = Broadcaster()
    seen = []
    broadcaster.subscribe(EventType.HOST_DISCONNECTED, lambda e: seen.append(e.host_id))
    threads = [
        threading.Thread(target=broadcaster.push, args=(HostDisconnected(host_id=i),))
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert sorted(seen) == list(range(20))


def test_chat_message_events_have_independent_messages():
    first = ChatMessageReceived()
    second = ChatMessageReceived()
    first.msg.text = "changed"
    assert second.msg.text == ""


def test_internal_event_without_callback_returns_none():
    hook = InternalEvent()
    assert hook(1, 2) is None


def test_internal_event_passes_arguments_and_returns_result():
    hook = InternalEvent()
    hook.subscribe(lambda a, b: a + b)
    assert hook(2, 3) == 5


def test_internal_event_subscribe_replaces_callback():
    hook = InternalEvent()
    calls = []
    hook.subscribe(lambda: calls.append("first"))
    hook.subscribe(lambda: calls.append("second"))
    hook()
    assert calls == ["second"]


def test_host_events_hooks_are_separate():
    events = HostEvents()
    received = []
    events.on_message_received.subscribe(lambda host_id, msg: received.append((host_id, msg)))
    events.on_host_connection(3)
    events.on_message_received(3, "payload")
    assert received == [(3, "payload")]
    assert HostEvents().on_message_received(1, "x") is None


def test_gui_events_user_data_hook():
    events = GUIEvents()
    events.get_user_data.subscribe(lambda: ("ann", 9))
    assert events.get_user_data() == ("ann", 9)


def test_component_is_abstract():
    with pytest.raises(TypeError):
        Component(Broadcaster())


def test_application_is_abstract():
    with pytest.raises(TypeError):
        Application()


def test_concrete_application_and_component_share_broadcaster():
    class Counter(Component):
        def init(self):
            self.count = 0
            self.broadcaster.subscribe(EventType.CONNECTION_CLOSED, self._on_closed)

        def update(self):
            self.broadcaster.push(ConnectionClosed())

        def _on_closed(self, event):
            self.count += 1

    class App(Application):
        def init(self):
            self.counter = Counter(self.broadcaster)
            self.counter.init()

        def run(self):
            for _ in range(3):
                self.counter.update()

    app = App()
    app.init()
    app.run()
    assert app.counter.count == 3
    assert app.counter.broadcaster is app.broadcaster

    app.broadcaster.push(ConnectionClosed())
    assert app.counter.count == 4
    app.broadcaster.push(ExitApplication())
    assert app.counter.count == 4