"""Terminal UI for relaychat.

Provides a Textual-based TUI over the streaming session controller.

Module structure (each module hides a design decision):
- config.py: Log levels and display constants
- formatting.py: Status line text and message presentation
- widgets.py: Custom widgets (transcript, status bar, banner, input, log)
- log_handler.py: Routing of log records into the log panel
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette
- app.py: Application orchestration (user interaction flow)
"""

from .app import RelayChatApp, run_textual_tui
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, LogPanel, NetworkBanner, StatusBar

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "LogLevel",
    "LogPanel",
    "NetworkBanner",
    "RelayChatApp",
    "StatusBar",
    "run_textual_tui",
]
