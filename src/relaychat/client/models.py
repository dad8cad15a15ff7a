"""Data models for the streaming client.

Hides the representation of transcript messages and session state.
"""

import itertools
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MessageRole(str, Enum):
    """Who a transcript message belongs to."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageKind(str, Enum):
    """Severity of a system message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ConnectionState(str, Enum):
    """Connection status of the active session; drives UI affordances."""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    RETRYING = "retrying"
    ERROR = "error"

    @property
    def is_busy(self) -> bool:
        """True while a request is in flight (input disabled, cancel shown)."""
        return self in (ConnectionState.CONNECTING, ConnectionState.STREAMING, ConnectionState.RETRYING)


class SessionOutcome(str, Enum):
    """How a call to ``SessionController.submit`` ended."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass
class ConversationMessage:
    """A message in the conversation transcript."""

    role: MessageRole
    text: str = ""
    kind: MessageKind | None = None  # system messages only
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class AttemptToken:
    """Identity of one attempt; anything tagged with a stale token is dropped."""

    session_id: int
    attempt: int


_session_ids = itertools.count(1)


@dataclass
class StreamingSession:
    """One question/answer exchange, spanning up to ``max_retries + 1`` attempts."""

    question: str
    max_retries: int
    session_id: int = field(default_factory=lambda: next(_session_ids))
    retry_count: int = 0
    attempt: int = 0
    token: AttemptToken | None = None
    last_chunk_at: float | None = None
    attempt_deadline: float | None = None
    received_content: bool = False
    cancelled: bool = False
    closed: bool = False

    def begin_attempt(self, connect_timeout: float) -> AttemptToken:
        """Start a new attempt, invalidating the previous token."""
        self.attempt += 1
        self.token = AttemptToken(self.session_id, self.attempt)
        self.attempt_deadline = time.monotonic() + connect_timeout
        self.last_chunk_at = None
        self.received_content = False
        return self.token

    def is_current(self, token: AttemptToken | None) -> bool:
        """Whether ``token`` belongs to this session's live attempt."""
        return not self.closed and token is not None and token == self.token

    def connect_time_left(self) -> float:
        """Seconds until this attempt's connect deadline passes."""
        if self.attempt_deadline is None:
            raise RuntimeError("No attempt in progress")
        return max(0.0, self.attempt_deadline - time.monotonic())

    def record_chunk(self) -> None:
        self.last_chunk_at = time.monotonic()
        self.received_content = True

    def seconds_since_last_chunk(self) -> float | None:
        """Time since this attempt's last chunk, or None before the first one."""
        if self.last_chunk_at is None:
            return None
        return time.monotonic() - self.last_chunk_at

    def close(self) -> None:
        """Mark the session finished; every outstanding token becomes stale."""
        self.closed = True
        self.token = None
