"""Custom Textual widgets for the chat TUI.

Hides widget implementation details:
- Transcript rendering and incremental updates while a reply is typed
- Connection status line with the cancel affordance
- Offline banner
- Input history management
- Log rendering with level filtering
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, RichLog, Static, TextArea

from ..client import ChangeKind, ConnectionState, ConversationMessage, MessageRole, TranscriptChange
from .config import (
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    OFFLINE_BANNER_TEXT,
    LogLevel,
)
from .formatting import message_body, message_classes, message_header, status_display


def copy_text(widget, text: str, label: str) -> None:
    """Copy text to the system clipboard, falling back to the terminal (OSC 52)."""
    try:
        import pyperclip
        pyperclip.copy(text)
        widget.app.notify(f"{label} copied", timeout=2)
    except Exception:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{label} copied (terminal)", timeout=2)


class MessageView(Vertical):
    """One transcript message. Clicking it copies the text."""

    def __init__(self, message: ConversationMessage, *args, **kwargs) -> None:
        super().__init__(*args, classes=message_classes(message), **kwargs)
        self._message = message
        self._header = Static(message_header(message), classes="message-header")
        self._body = Static(Text(message_body(message, typing=True)), classes="message-content")

    @property
    def message(self) -> ConversationMessage:
        return self._message

    def compose(self):
        yield self._header
        yield self._body

    def refresh_text(self) -> None:
        """Re-render the body from the (mutable) message text."""
        self._body.update(Text(message_body(self._message, typing=True)))

    def on_click(self, event: Click) -> None:
        event.stop()
        if self._message.text:
            copy_text(self, self._message.text, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable conversation mirroring a ``Transcript`` change by change."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: list[MessageView] = []

    def apply_change(self, change: TranscriptChange) -> None:
        """Update the displayed messages for one transcript change."""
        if change.kind == ChangeKind.ADDED and change.message is not None:
            view = MessageView(change.message)
            if change.index < len(self._views):
                self.mount(view, before=self._views[change.index])
            else:
                self.mount(view)
            self._views.insert(change.index, view)
        elif change.kind in (ChangeKind.APPENDED, ChangeKind.RESET):
            self._views[change.index].refresh_text()
        elif change.kind == ChangeKind.REMOVED:
            self._views.pop(change.index).remove()
        elif change.kind == ChangeKind.CLEARED:
            self._views.clear()
            self.remove_children()

        self.border_subtitle = f"{len(self._views)} messages" if self._views else "Conversation history"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for view in reversed(self._views):
            if view.message.role == MessageRole.ASSISTANT and view.message.text:
                return view.message.text
        return None


class StatusBar(Horizontal):
    """Connection status line; shows a Cancel button while a request is busy."""

    class CancelRequested(Message):
        """Posted when the user presses Cancel."""

    def __init__(self, max_retries: int, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._max_retries = max_retries
        self._css_class: str | None = None

    def compose(self):
        yield Static("", id="status-text")
        yield Button("Cancel", id="cancel-btn", variant="warning")

    def update_state(self, state: ConnectionState, retry_count: int) -> None:
        display = status_display(state, retry_count, self._max_retries)
        if self._css_class:
            self.remove_class(self._css_class)
            self._css_class = None
        if display is None:
            self.display = False
            return
        text, css_class = display
        self.query_one("#status-text", Static).update(text)
        self.add_class(css_class)
        self._css_class = css_class
        self.query_one("#cancel-btn", Button).display = state.is_busy
        self.display = True

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel-btn":
            event.stop()
            self.post_message(self.CancelRequested())


class NetworkBanner(Static):
    """Banner shown while the network is offline."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(OFFLINE_BANNER_TEXT, *args, **kwargs)

    def set_online(self, online: bool) -> None:
        self.display = not online


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._enabled = True

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit question (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False
        text_area.focus()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable typing and sending."""
        self._enabled = enabled
        self.query_one("#chat-input", TextArea).disabled = not enabled
        self.query_one("#send-btn", Button).disabled = not enabled
        if enabled:
            self.focus_input()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Terminals do not report modifiers with Enter, so ctrl+j submits.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if not self._enabled:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        self.query_one("#chat-input", TextArea).focus()


class LogPanel(RichLog):
    """Log panel for real-time session tracing with level filtering.

    Receives records from ``PanelLogHandler``. Hidden by default, shown with
    --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.INFO, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        self._update_subtitle()

    def add_entry(self, component: str, message: str, level: int = LogLevel.INFO) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        line = Text.assemble(
            (f"{timestamp} ", "dim"),
            (f"{LogLevel.name(level):<7} ", self.LEVEL_COLORS.get(level, "white")),
            (f"[{component}] ", "magenta"),
            message,
        )
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
