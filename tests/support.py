"""Test doubles shared by the test modules: providers, transports, sleeps, servers."""
import asyncio
import contextlib
import socket
from typing import Any

from relaychat.client import (
    NetworkMonitor,
    RetryPolicy,
    SessionController,
    Transcript,
    TypewriterRenderer,
)
from relaychat.llm import ChatMessage, LLMProvider, StreamingResponse

# Placeholder for a step that never completes (until cancelled or timed out)
HANG = object()


class FakeProvider(LLMProvider):
    """Completion provider yielding canned fragments.

    Args:
        fragments: Fragments to stream
        fail_before: Exception raised by ``chat_completion_stream`` itself
        fail_at: Index of the fragment at which iteration raises
    """

    def __init__(
        self,
        fragments: list[str] | tuple[str, ...] = (),
        fail_before: Exception | None = None,
        fail_at: int | None = None,
    ):
        self.fragments = list(fragments)
        self.fail_before = fail_before
        self.fail_at = fail_at
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        self.calls.append(messages)
        if self.fail_before is not None:
            raise self.fail_before

        async def _fragments():
            for index, fragment in enumerate(self.fragments):
                if index == self.fail_at:
                    raise RuntimeError("provider dropped the stream")
                yield fragment
            if self.fail_at is not None and self.fail_at >= len(self.fragments):
                raise RuntimeError("provider dropped the stream")

        return StreamingResponse(_fragments())

    async def close(self) -> None:
        self.closed = True


class ScriptedTransport:
    """``StreamTransport`` replaying one scripted step per attempt.

    A step is an exception (raised while connecting), ``HANG`` (never
    connects), or a list of body items: strings are chunks, exceptions are
    raised mid-stream and ``HANG`` stalls the body. The last step repeats
    once the script runs out.
    """

    def __init__(self, *steps):
        self._steps = list(steps)
        self.questions: list[str] = []
        self.hanging = asyncio.Event()

    def _next_step(self):
        if len(self._steps) > 1:
            return self._steps.pop(0)
        return self._steps[0]

    async def _hang(self) -> None:
        self.hanging.set()
        await asyncio.Event().wait()

    async def _chunks(self, items):
        for item in items:
            if item is HANG:
                await self._hang()
            elif isinstance(item, BaseException):
                raise item
            else:
                yield item

    @contextlib.asynccontextmanager
    async def open(self, question: str):
        self.questions.append(question)
        step = self._next_step()
        if step is HANG:
            await self._hang()
        if isinstance(step, BaseException):
            raise step
        yield self._chunks(step)

    @property
    def attempts(self) -> int:
        return len(self.questions)


class RecordingSleep:
    """Backoff sleep that records requested delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


def make_controller(
    transport,
    network: NetworkMonitor | None = None,
    policy: RetryPolicy | None = None,
    sleep=None,
) -> SessionController:
    """Session controller with an instant typewriter and recorded backoff."""
    transcript = Transcript()
    renderer = TypewriterRenderer(transcript.append_to_reply, char_delay=0, chunk_pause=0)
    return SessionController(
        transport,
        transcript=transcript,
        renderer=renderer,
        network=network or NetworkMonitor(),
        policy=policy or RetryPolicy(),
        sleep=sleep or RecordingSleep(),
    )


def closed_port() -> int:
    """A localhost port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@contextlib.asynccontextmanager
async def delayed_http_server(delay: float, body: str = "slow start"):
    """Plain HTTP/1.1 server on a real socket that answers after ``delay``.

    Every request is read in full, then the response status, headers and
    body are written together once ``delay`` has passed. Yields the base URL.
    """
    stopping = asyncio.Event()
    payload = body.encode()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            head = await reader.readuntil(b"\r\n\r\n")
            length = 0
            for line in head.split(b"\r\n"):
                name, _, value = line.partition(b":")
                if name.strip().lower() == b"content-length":
                    length = int(value)
            await reader.readexactly(length)
            try:
                await asyncio.wait_for(stopping.wait(), timeout=delay)
            except TimeoutError:
                writer.write(
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Type: text/plain; charset=utf-8\r\n"
                    b"Content-Length: %d\r\n"
                    b"Connection: close\r\n\r\n" % len(payload)
                    + payload
                )
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        stopping.set()
        server.close()
        await server.wait_closed()
