"""Ordered conversation transcript with change notifications."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..logging_config import get_logger
from .models import ConversationMessage, MessageKind, MessageRole

logger = get_logger(__name__)


class ChangeKind(str, Enum):
    ADDED = "added"
    APPENDED = "appended"
    RESET = "reset"
    REMOVED = "removed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class TranscriptChange:
    """A single mutation of the transcript.

    ``text`` holds the appended characters for APPENDED changes.
    """

    kind: ChangeKind
    index: int
    message: ConversationMessage | None = None
    text: str = ""


TranscriptListener = Callable[[TranscriptChange], None]


class Transcript:
    """Append-only list of messages, except for the assistant reply being typed.

    While an assistant reply is active it stays the last element: system
    notices added meanwhile are inserted just before it.
    """

    def __init__(self) -> None:
        self._messages: list[ConversationMessage] = []
        self._active: ConversationMessage | None = None
        self._listeners: list[TranscriptListener] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    def __getitem__(self, index: int) -> ConversationMessage:
        return self._messages[index]

    @property
    def messages(self) -> list[ConversationMessage]:
        """Snapshot of the messages in order."""
        return list(self._messages)

    @property
    def last(self) -> ConversationMessage | None:
        return self._messages[-1] if self._messages else None

    @property
    def active_reply(self) -> ConversationMessage | None:
        """The assistant message currently being streamed into, if any."""
        return self._active

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self, change: TranscriptChange) -> None:
        for listener in list(self._listeners):
            listener(change)

    def _insert(self, message: ConversationMessage) -> None:
        if self._active is not None and self.last is self._active:
            index = len(self._messages) - 1
        else:
            index = len(self._messages)
        self._messages.insert(index, message)
        self._notify(TranscriptChange(ChangeKind.ADDED, index, message))

    def add_user(self, text: str) -> ConversationMessage:
        message = ConversationMessage(role=MessageRole.USER, text=text)
        self._insert(message)
        return message

    def add_system(self, text: str, kind: MessageKind = MessageKind.INFO) -> ConversationMessage:
        message = ConversationMessage(role=MessageRole.SYSTEM, text=text, kind=kind)
        self._insert(message)
        return message

    def begin_reply(self) -> ConversationMessage:
        """Append an empty assistant placeholder that streaming will fill."""
        message = ConversationMessage(role=MessageRole.ASSISTANT)
        self._messages.append(message)
        self._active = message
        self._notify(TranscriptChange(ChangeKind.ADDED, len(self._messages) - 1, message))
        return message

    def append_to_reply(self, text: str) -> bool:
        """Append text to the last message if it is an assistant message.

        Returns False (and changes nothing) otherwise; under correct
        sequencing that never happens.
        """
        last = self.last
        if last is None or last.role != MessageRole.ASSISTANT:
            logger.debug("Dropped %r: last transcript message is not an assistant reply", text)
            return False
        last.text += text
        self._notify(TranscriptChange(ChangeKind.APPENDED, len(self._messages) - 1, last, text))
        return True

    def reset_reply(self) -> None:
        """Clear the active reply's text before a new attempt streams into it."""
        if self._active is None or not self._active.text:
            return
        self._active.text = ""
        index = self._messages.index(self._active)
        self._notify(TranscriptChange(ChangeKind.RESET, index, self._active))

    def end_reply(self, discard_if_empty: bool = False) -> None:
        """Stop tracking the active reply, removing it when it stayed empty."""
        active = self._active
        self._active = None
        if active is None or not discard_if_empty or active.text:
            return
        index = self._messages.index(active)
        del self._messages[index]
        self._notify(TranscriptChange(ChangeKind.REMOVED, index, active))

    def clear(self) -> None:
        self._messages.clear()
        self._active = None
        self._notify(TranscriptChange(ChangeKind.CLEARED, 0))
