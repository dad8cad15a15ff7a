"""Text formatting for transcript and status display.

Pure functions, kept apart from widgets so they can be tested without a
running app.
"""

from ..client import ConnectionState, ConversationMessage, MessageKind, MessageRole
from .config import MESSAGE_TIMESTAMP_FORMAT

ROLE_LABELS = {
    MessageRole.USER: ("You", ">"),
    MessageRole.ASSISTANT: ("Assistant", "<"),
    MessageRole.SYSTEM: ("System", "!"),
}


def status_display(state: ConnectionState, retry_count: int, max_retries: int) -> tuple[str, str] | None:
    """Status line text and CSS class for a connection state (None when idle)."""
    if state == ConnectionState.CONNECTING:
        return "Connecting...", "-connecting"
    if state == ConnectionState.STREAMING:
        return "Receiving response...", "-streaming"
    if state == ConnectionState.RETRYING:
        return f"Retrying ({retry_count}/{max_retries})...", "-retrying"
    if state == ConnectionState.ERROR:
        return "Connection failed", "-error"
    return None


def message_classes(message: ConversationMessage) -> str:
    """CSS classes of the container a message is rendered in."""
    if message.role == MessageRole.SYSTEM:
        kind = message.kind or MessageKind.INFO
        return f"chat-message system-message -{kind.value}"
    return f"chat-message {message.role.value}-message"


def message_header(message: ConversationMessage) -> str:
    """Header line shown above a message body, e.g. ``< Assistant [12:00:01]``."""
    label, icon = ROLE_LABELS[message.role]
    timestamp = message.timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)
    return f"{icon} {label} [{timestamp}]"


def message_body(message: ConversationMessage, typing: bool = False) -> str:
    """Message body; an empty reply still waiting for text shows an ellipsis."""
    if message.role == MessageRole.ASSISTANT and not message.text:
        return "..." if typing else ""
    return message.text
