"""The chat client application and its command."""

from __future__ import annotations

import logging
import threading

from chatup import events
from chatup.events import Application, EventType
from chatup.gui import Renderer
from chatup.networkcomponent import NetworkComponent
from chatup.uicomponent import UIComponent


class ClientApplication(Application):
    """Runs the user interface and the network side until asked to exit."""

    def __init__(self, renderer: Renderer | None = None) -> None:
        super().__init__()
        self.ui = UIComponent(self.broadcaster, renderer)
        self.network = NetworkComponent(self.broadcaster)
        self._quit = threading.Event()

    @property
    def quitting(self) -> bool:
        """True once an exit was requested."""
        return self._quit.is_set()

    def init(self) -> None:
        self.broadcaster.subscribe(
            EventType.EXIT_APPLICATION, lambda _event: self._quit.set()
        )
        self.ui.init()
        self.network.init()

    def run(self) -> None:
        """Update the components until an exit event arrives."""
        while not self._quit.is_set():
            self.ui.update()
            self.network.update()

    def stop(self) -> None:
        """Ask every component to exit."""
        self.broadcaster.push(events.ExitApplication())


def main(argv: list[str] | None = None) -> int:
    """Start the chat client on the terminal; the client takes no arguments."""
    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    app = ClientApplication()
    app.init()
    try:
        app.run()
    except KeyboardInterrupt:
        app.stop()
    return 0