"""Streaming client for the relaychat gateway.

Module structure (each module hides one design decision):
- config.py: timing constants and the retry policy
- models.py: transcript messages, connection state, session bookkeeping
- transcript.py: ordered conversation with change notifications
- typewriter.py: character-by-character reveal of queued chunks
- network.py: online/offline signal and gateway health probe
- transport.py: streaming HTTP requests via httpx
- session.py: request/retry/timeout state machine
"""

from .config import RetryPolicy, gateway_url
from .models import (
    AttemptToken,
    ConnectionState,
    ConversationMessage,
    MessageKind,
    MessageRole,
    SessionOutcome,
    StreamingSession,
)
from .network import ConnectivityProbe, NetworkMonitor
from .session import SessionController
from .transcript import ChangeKind, Transcript, TranscriptChange
from .transport import HttpxTransport, StreamTransport
from .typewriter import TypewriterRenderer

__all__ = [
    "AttemptToken",
    "ChangeKind",
    "ConnectionState",
    "ConnectivityProbe",
    "ConversationMessage",
    "HttpxTransport",
    "MessageKind",
    "MessageRole",
    "NetworkMonitor",
    "RetryPolicy",
    "SessionController",
    "SessionOutcome",
    "StreamTransport",
    "StreamingSession",
    "Transcript",
    "TranscriptChange",
    "TypewriterRenderer",
    "gateway_url",
]
