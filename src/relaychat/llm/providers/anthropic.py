"""Anthropic Claude provider.

Uses the official Anthropic Python SDK message streaming helper.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ..base import LLMProvider
from ..models import ChatMessage, StreamingResponse

DEFAULT_MAX_TOKENS = 4096


class AnthropicProvider(LLMProvider):
    """Streams message completions from Anthropic Claude.

    Hidden design decisions:
    - System prompt is passed separately from the message list
    - ``max_tokens`` is mandatory for the Messages API
    - Usage is assembled from message_start and message_delta events
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        self._model = model
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        system_message = None
        anthropic_messages = []
        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                anthropic_messages.append({"role": msg.role, "content": msg.content})

        request_params: dict[str, Any] = {
            "model": model or self._model,
            "messages": anthropic_messages,
            "temperature": temperature,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            **kwargs
        }
        if system_message:
            request_params["system"] = system_message

        usage: dict[str, Any] = {}
        return StreamingResponse(self._text_deltas(request_params, usage), usage)

    async def _text_deltas(self, request_params: dict[str, Any], usage: dict[str, Any]) -> AsyncIterator[str]:
        input_tokens = 0
        output_tokens = 0

        async with self._client.messages.stream(**request_params) as stream:
            async for event in stream:
                event_type = getattr(event, "type", None)
                if event_type == "message_start":
                    input_tokens = event.message.usage.input_tokens
                elif event_type == "message_delta":
                    # Cumulative count
                    output_tokens = event.usage.output_tokens
                elif event_type == "content_block_delta" and hasattr(event.delta, "text"):
                    yield event.delta.text

        usage.update(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )

    async def close(self) -> None:
        await self._client.close()
