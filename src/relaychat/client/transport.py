"""Streaming HTTP transport to the completion gateway.

Wraps ``httpx.AsyncClient.stream`` so the session controller sees decoded
text chunks and the relaychat error taxonomy instead of httpx exceptions.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import AsyncContextManager, Protocol

import httpx

from ..errors import ConnectionFailed, ConnectTimeout, HttpFailure, StreamTimeout
from ..logging_config import get_logger
from .config import CONNECT_TIMEOUT_SECONDS, STREAM_TIMEOUT_SECONDS

logger = get_logger(__name__)


class StreamTransport(Protocol):
    """Opens one streaming request for a question.

    Entering the returned context manager completes once response headers
    with a success status have arrived; it yields the decoded body chunks.
    Non-success statuses raise ``HttpFailure``.
    """

    def open(self, question: str) -> AsyncContextManager[AsyncIterator[str]]:
        ...


class HttpxTransport:
    """``StreamTransport`` that POSTs ``{"question": ...}`` to ``/ask``."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        stream_timeout: float = STREAM_TIMEOUT_SECONDS,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/ask"
        self._connect_timeout = connect_timeout
        self._stream_timeout = stream_timeout
        # Headers arrive with the first fragment; the controller's asyncio
        # deadlines enforce connect and stream timeouts separately
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect_timeout, read=max(connect_timeout, stream_timeout))
        )
        self._owns_client = client is None

    @asynccontextmanager
    async def open(self, question: str) -> AsyncIterator[AsyncIterator[str]]:
        request = self._client.build_request("POST", self._url, json={"question": question})
        try:
            response = await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise ConnectTimeout(self._connect_timeout) from e
        except httpx.HTTPError as e:
            raise ConnectionFailed(str(e) or type(e).__name__) from e

        try:
            if not response.is_success:
                await response.aread()
                raise HttpFailure(response.status_code, response.reason_phrase)
            yield self._decode(response)
        finally:
            await response.aclose()

    async def _decode(self, response: httpx.Response) -> AsyncIterator[str]:
        try:
            async for text in response.aiter_text():
                if text:
                    yield text
        except httpx.ReadTimeout as e:
            raise StreamTimeout(self._stream_timeout) from e
        except httpx.HTTPError as e:
            raise ConnectionFailed(str(e) or type(e).__name__) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
