"""Bridge from the ``logging`` module to the TUI log panel.

Records may be emitted from any thread; UI updates are marshalled onto
the app thread with ``call_from_thread``.
"""

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import LogPanel


def component_name(logger_name: str) -> str:
    """Short component label for a logger, e.g. ``relaychat.client.session`` -> ``session``."""
    return logger_name.rsplit(".", 1)[-1]


class PanelLogHandler(logging.Handler):
    """Logging handler that writes records into a ``LogPanel``."""

    def __init__(self, app: "App", panel: "LogPanel", level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._app = app
        self._panel = panel

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            component = component_name(record.name)
            if self._app._thread_id != threading.get_ident():
                self._app.call_from_thread(self._panel.add_entry, component, message, record.levelno)
            else:
                self._panel.add_entry(component, message, record.levelno)
        except Exception:
            self.handleError(record)
