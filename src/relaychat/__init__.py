"""
Relaychat: a streaming chat front-end for hosted language models.

A FastAPI gateway relays completion fragments from an LLM provider over a
chunked HTTP response; the client side drives each question through a
retrying streaming session and reveals the answer with a typewriter effect.
"""

__version__ = "0.1.0"

from .client import (
    ConnectionState,
    ConversationMessage,
    SessionController,
    SessionOutcome,
    Transcript,
    TypewriterRenderer,
)
from .errors import RelayChatError

__all__ = [
    "ConnectionState",
    "ConversationMessage",
    "RelayChatError",
    "SessionController",
    "SessionOutcome",
    "Transcript",
    "TypewriterRenderer",
]
