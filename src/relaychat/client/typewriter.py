"""Typewriter renderer: reveals queued text one character at a time.

The renderer is the only consumer of the chunk queue. It runs as a single
cooperative asyncio task that sleeps between reveals, so the session
controller can keep reading the network while characters are typed out.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable

from ..logging_config import get_logger
from .config import TYPEWRITER_CHAR_DELAY, TYPEWRITER_CHUNK_PAUSE

logger = get_logger(__name__)

CharSink = Callable[[str], bool]
Sleep = Callable[[float], Awaitable[None]]


class TypewriterRenderer:
    """Animate chunks into a sink, chunk by chunk, in arrival order.

    Args:
        sink: Receives each character; returns False when it could not be
            placed (no assistant reply at the end of the transcript)
        char_delay: Seconds before each character is revealed
        chunk_pause: Seconds between two queued chunks
        sleep: Awaitable sleep, replaceable for tests
    """

    def __init__(
        self,
        sink: CharSink,
        char_delay: float = TYPEWRITER_CHAR_DELAY,
        chunk_pause: float = TYPEWRITER_CHUNK_PAUSE,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._sink = sink
        self._char_delay = char_delay
        self._chunk_pause = chunk_pause
        self._sleep = sleep
        self._queue: deque[str] = deque()
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._dropped = 0

    @property
    def is_typing(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        """Number of chunks waiting behind the one being typed."""
        return len(self._queue)

    @property
    def dropped(self) -> int:
        """Characters the sink refused since the last reset."""
        return self._dropped

    def enqueue(self, chunk: str) -> None:
        """Queue a chunk; starts the animation task if it is not running.

        A chunk being typed is never interrupted by new arrivals.
        """
        if not chunk:
            return
        self._queue.append(chunk)
        self._idle.clear()
        if not self.is_typing:
            self._task = asyncio.get_running_loop().create_task(self._run(self._generation))

    def reset(self) -> None:
        """Drop queued chunks and stop the running animation."""
        self._generation += 1
        self._queue.clear()
        self._dropped = 0
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._idle.set()

    async def wait_idle(self) -> None:
        """Wait until every queued character has been revealed (or reset)."""
        await self._idle.wait()

    async def aclose(self) -> None:
        task = self._task
        self.reset()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, generation: int) -> None:
        try:
            while self._queue and generation == self._generation:
                chunk = self._queue.popleft()
                for char in chunk:
                    await self._sleep(self._char_delay)
                    if generation != self._generation:
                        return
                    if not self._sink(char):
                        self._dropped += 1
                if self._queue:
                    await self._sleep(self._chunk_pause)
        finally:
            if generation == self._generation:
                self._idle.set()
                if self._dropped:
                    logger.warning("Typewriter dropped %d character(s) with no reply to type into", self._dropped)
