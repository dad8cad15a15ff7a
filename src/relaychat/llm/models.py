from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Async iterator over completion fragments that captures usage info.

    Fragments are yielded in the order the provider produces them. The
    provider fills ``usage`` from its final stream events, so it becomes
    available once the stream has been fully consumed. Each response owns
    its usage mapping, so concurrent streams from one provider stay apart.

    Usage:
        stream = await provider.chat_completion_stream(messages)
        async for fragment in stream:
            print(fragment, end="")
        print(stream.usage)
    """

    def __init__(self, fragments: AsyncIterator[str], usage: dict[str, Any] | None = None):
        self._fragments = fragments
        self._usage = usage if usage is not None else {}

    @property
    def usage(self) -> dict[str, Any] | None:
        """Token usage info (None until the provider reported it)."""
        return dict(self._usage) if self._usage else None

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        return await self._fragments.__anext__()

    async def aclose(self) -> None:
        """Stop the underlying provider stream early."""
        aclose = getattr(self._fragments, "aclose", None)
        if aclose is not None:
            await aclose()


class ChatMessage(BaseModel):
    """A prompt message sent to a completion provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")
