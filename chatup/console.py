"""A text renderer that draws chat frames on a terminal and reads typed lines."""

from __future__ import annotations

import queue
import sys
import threading
from typing import TextIO

from chatup.gui import Renderer

DEFAULT_WIDTH = 1080
DEFAULT_HEIGHT = 720

_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_DEFAULT_INPUT_TIMEOUT = 0.05


class ConsoleRenderer(Renderer):
    """Renders frames as lines of text and collects input lines in the background.

    Input is read on a daemon thread so frames keep being drawn while the
    user is not typing. ``read_input`` waits at most ``input_timeout``
    seconds for a line, which also paces the frame loop. Once the input
    stream ends, the viewport counts as closed.
    """

    def __init__(
        self,
        app_name: str = "",
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
        input_timeout: float = _DEFAULT_INPUT_TIMEOUT,
    ) -> None:
        self.app_name = app_name
        self._input_stream = input_stream
        self._output_stream = output_stream
        self._input_timeout = input_timeout
        self._inputs: queue.Queue[str | None] = queue.Queue()
        self._open = False
        self._input_closed = False
        self._size = (DEFAULT_WIDTH, DEFAULT_HEIGHT)
        self._last_frame: list[str] | None = None
        self._reader: threading.Thread | None = None

    def init_viewport(self) -> bool:
        """Start reading input; True once the viewport is open."""
        if self._open:
            return True
        if self._input_stream is None:
            self._input_stream = sys.stdin
        if self._output_stream is None:
            self._output_stream = sys.stdout
        self._open = True
        if self._reader is None:
            self._reader = threading.Thread(
                target=self._read_loop,
                args=(self._input_stream,),
                name="console-input",
                daemon=True,
            )
            self._reader.start()
        return True

    def create_frame(self) -> bool:
        """False once the viewport is destroyed or the input has ended."""
        return self._open and not self._input_closed

    def render_frame(self, lines: list[str]) -> bool:
        """Write ``lines`` when they differ from the previous frame."""
        if not self._open:
            return False
        frame = list(lines)
        if frame == self._last_frame:
            return True
        out = self._output_stream
        try:
            if out.isatty():
                out.write(_CLEAR_SCREEN)
            if self.app_name:
                out.write(f"== {self.app_name} ==\n")
            for line in frame:
                out.write(f"{line}\n")
            out.flush()
        except (OSError, ValueError):
            return False
        self._last_frame = frame
        return True

    def destroy(self) -> None:
        """Close the viewport; later frames are refused."""
        self._open = False
        self._last_frame = None

    def get_viewport_size(self) -> tuple[int, int]:
        return self._size

    def set_viewport_size(self, width: int, height: int) -> None:
        """Resize the viewport; ignored while it is not open."""
        if not self._open:
            return
        self._size = (int(width), int(height))

    def read_input(self) -> str | None:
        """Return the next typed line, or None when none arrived in time."""
        if not self._open or self._input_closed:
            return None
        try:
            line = self._inputs.get(timeout=self._input_timeout)
        except queue.Empty:
            return None
        if line is None:
            self._input_closed = True
        return line

    def _read_loop(self, stream: TextIO) -> None:
        try:
            for line in iter(stream.readline, ""):
                self._inputs.put(line.rstrip("\r\n"))
        except (OSError, ValueError):
            pass
        finally:
            self._inputs.put(None)