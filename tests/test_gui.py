from collections import deque

import pytest

from chatup.events import GUIEvents
from chatup.gui import (
    BOOT_WIN_HEIGHT,
    BOOT_WIN_WIDTH,
    MAIN_WIN_HEIGHT,
    MAIN_WIN_WIDTH,
    AppGUI,
    BootLayout,
    ChatLayout,
    ChatMessageInfo,
    HostInfo,
    ParticipantsLayout,
    Renderer,
    WindowType,
    format_chat_message_block,
    format_participant_block,
)
from chatup.messages import ChatMessage


class FakeRenderer(Renderer):
    def __init__(self, inputs=(), frame_ok=True, render_ok=True):
        self.inputs = deque(inputs)
        self.frame_ok = frame_ok
        self.render_ok = render_ok
        self.size = (0, 0)
        self.frames = []
        self.destroyed = 0
        self.initialised = False

    def init_viewport(self):
        self.initialised = True
        return True

    def create_frame(self):
        return self.frame_ok

    def render_frame(self, lines):
        self.frames.append(list(lines))
        return self.render_ok

    def destroy(self):
        self.destroyed += 1

    def get_viewport_size(self):
        return self.size

    def set_viewport_size(self, width, height):
        self.size = (width, height)

    def read_input(self):
        return self.inputs.popleft() if self.inputs else None


def test_format_chat_message_block():
    msg = ChatMessageInfo(text="hello", username="bob", host_id=3)
    assert format_chat_message_block(msg) == ["bob", "hello"]


def test_format_participant_block():
    assert format_participant_block(HostInfo("alice", 2)) == ["alice", "connected"]


def test_boot_layout_chooses_server_after_all_fields():
    relay = GUIEvents()
    chosen = []
    relay.on_server_chosen.subscribe(lambda *args: chosen.append(args))
    layout = BootLayout(relay)
    layout.update("127.0.0.1")
    layout.update("6969")
    assert chosen == []
    layout.update("bob")
    assert chosen == [("127.0.0.1", "6969", "bob")]
    assert layout.focused_field == "server_address"


def test_boot_layout_rejects_empty_fields():
    relay = GUIEvents()
    chosen = []
    relay.on_server_chosen.subscribe(lambda *args: chosen.append(args))
    layout = BootLayout(relay)
    layout.update("127.0.0.1")
    layout.update("")
    layout.update("bob")
    assert chosen == []
    assert layout.hints["server_address"] == "Enter a valid address"
    assert layout.hints["port"] == "Enter a valid port"
    assert layout.hints["username"] == "Enter a valid user name"
    assert set(layout.values.values()) == {""}


def test_boot_layout_lines_show_hints_and_values():
    layout = BootLayout(GUIEvents())
    lines = layout.update("10.0.0.1")
    assert len(lines) == 3
    assert "Enter server address" in lines[0] and "10.0.0.1" in lines[0]
    assert lines[1].startswith(">")


def test_chat_layout_posts_own_message():
    relay = GUIEvents()
    relay.get_user_data.subscribe(lambda: ("bob", 7))
    posted = []
    relay.on_message_posted_to_chat.subscribe(posted.append)
    messages = []
    layout = ChatLayout(relay, messages)
    lines = layout.update("hi there")
    assert len(messages) == 1
    info = messages[0]
    assert (info.text, info.username, info.host_id, info.mine) == ("hi there", "bob", 7, True)
    assert posted == [info]
    assert layout.message_input == ""
    assert lines[:2] == ["bob", "hi there"]


def test_chat_layout_without_input_posts_nothing():
    messages = [ChatMessageInfo(text="x", username="y")]
    layout = ChatLayout(GUIEvents(), messages)
    lines = layout.update(None)
    assert len(messages) == 1
    assert lines[:2] == ["y", "x"]


def test_participants_layout_lines():
    layout = ParticipantsLayout(GUIEvents(), [HostInfo("a", 1), HostInfo("b", 2)])
    assert layout.update(None) == ["a", "connected", "", "b", "connected", ""]


def test_set_layout_size_stores_size():
    layout = ParticipantsLayout(GUIEvents(), [])
    layout.set_layout_size(12.5, 30.0)
    assert (layout.width, layout.height) == (12.5, 30.0)


def test_init_uses_boot_size():
    renderer = FakeRenderer()
    gui = AppGUI(renderer)
    gui.init()
    assert renderer.initialised
    assert renderer.size == (BOOT_WIN_WIDTH, BOOT_WIN_HEIGHT)


def test_window_change_resizes():
    renderer = FakeRenderer()
    gui = AppGUI(renderer)
    gui.on_window_change(WindowType.MAIN_WINDOW)
    assert gui.app_state.window_type is WindowType.MAIN_WINDOW
    assert renderer.size == (MAIN_WIN_WIDTH, MAIN_WIN_HEIGHT)
    gui.on_window_change(WindowType.BOOT_WINDOW)
    assert renderer.size == (BOOT_WIN_WIDTH, BOOT_WIN_HEIGHT)


def test_main_window_enforces_minimum_size():
    renderer = FakeRenderer()
    gui = AppGUI(renderer)
    gui.on_window_change(WindowType.MAIN_WINDOW)
    renderer.size = (100, 2000)
    gui.on_update()
    assert renderer.size == (MAIN_WIN_WIDTH, 2000)


def test_boot_update_feeds_input():
    renderer = FakeRenderer(inputs=["127.0.0.1", "6969", "bob"])
    gui = AppGUI(renderer)
    chosen = []
    gui.relay.on_server_chosen.subscribe(lambda *args: chosen.append(args))
    for _ in range(3):
        gui.on_update()
    assert chosen == [("127.0.0.1", "6969", "bob")]
    assert len(renderer.frames) == 3


def test_main_update_shows_participants_and_chat():
    renderer = FakeRenderer()
    gui = AppGUI(renderer)
    gui.on_window_change(WindowType.MAIN_WINDOW)
    gui.on_new_host_in_chat(HostInfo("alice", 2))
    gui.on_new_chat_message(ChatMessage(text="yo", username="alice", host_id=2))
    gui.on_update()
    frame = renderer.frames[-1]
    assert frame[:2] == ["alice", "connected"]
    assert ["alice", "yo"] == frame[-3:-1]


def test_failed_frame_closes_app():
    renderer = FakeRenderer(frame_ok=False)
    gui = AppGUI(renderer)
    quits = []
    gui.relay.on_should_quit.subscribe(lambda: quits.append(True))
    gui.on_update()
    assert renderer.destroyed == 1
    assert quits == [True]
    assert renderer.frames == []


def test_failed_render_closes_app():
    renderer = FakeRenderer(render_ok=False)
    gui = AppGUI(renderer)
    gui.on_update()
    assert renderer.destroyed == 1


def test_closing_app_skips_update_and_close():
    renderer = FakeRenderer()
    gui = AppGUI(renderer)
    gui.app_state.closing = True
    gui.on_update()
    gui.close_app()
    assert renderer.frames == []
    assert renderer.destroyed == 0


def test_new_chat_message_is_copied():
    gui = AppGUI(FakeRenderer())
    gui.on_new_chat_message(ChatMessage(text="t", username="u", host_id=4))
    info = gui.chat_messages[0]
    assert (info.text, info.username, info.host_id, info.mine) == ("t", "u", 4, False)


@pytest.mark.parametrize("removed, remaining", [(1, [2, 1]), (5, [1, 2, 1])])
def test_host_disconnected_removes_first_match(removed, remaining):
    gui = AppGUI(FakeRenderer())
    for host_id in (1, 2, 1):
        gui.on_new_host_in_chat(HostInfo(f"h{host_id}", host_id))
    gui.on_host_disconnected(removed)
    assert [h.host_id for h in gui.participants] == remaining