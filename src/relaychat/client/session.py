"""Streaming session controller.

Drives one question to a terminal outcome (answered, failed after the
retry limit, or cancelled by the user) and reports every connection state
change so a UI can enable or disable its affordances.

State machine:

    idle --submit--> connecting --headers ok--> streaming --end--> idle
                       |   ^                      |
                  failure  backoff (+ wait online)  failure
                       v   |                      v
                      retrying <------------------+
                       |
                 retries exhausted --> error

Cancellation moves any state straight to idle. Each attempt runs under
its own ``AttemptToken``; a chunk whose token is no longer current is
dropped, so nothing from an abandoned attempt reaches the transcript.
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from ..errors import (
    Cancelled,
    ConnectionFailed,
    ConnectTimeout,
    EmptyResponse,
    NetworkUnavailable,
    SessionActiveError,
    StreamTimeout,
    classify_failure,
)
from ..logging_config import get_logger
from .config import RetryPolicy
from .models import (
    AttemptToken,
    ConnectionState,
    MessageKind,
    SessionOutcome,
    StreamingSession,
)
from .network import NetworkMonitor
from .transcript import Transcript
from .transport import StreamTransport
from .typewriter import TypewriterRenderer

logger = get_logger(__name__)

StateListener = Callable[[ConnectionState, int], None]
Sleep = Callable[[float], Awaitable[None]]

OFFLINE_REJECTION = "Network offline."
CANCELLED_NOTICE = "Request cancelled"
OFFLINE_DURING_RETRY = "Network offline detected during retry. Waiting for connection..."
NETWORK_RESTORED = "Network restored. Continuing..."


class SessionController:
    """Owns the request, retry and timeout lifecycle of one question at a time.

    Args:
        transport: Opens streaming requests to the gateway
        transcript: Conversation the session writes into
        renderer: Typewriter fed with decoded chunks (defaults to one typing
            into ``transcript``)
        network: Online/offline signal consulted on submit and before retries
        policy: Retry limit, backoff and timeouts
        sleep: Awaitable used for backoff delays, replaceable for tests
    """

    def __init__(
        self,
        transport: StreamTransport,
        transcript: Transcript | None = None,
        renderer: TypewriterRenderer | None = None,
        network: NetworkMonitor | None = None,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self.transcript = transcript or Transcript()
        self.renderer = renderer or TypewriterRenderer(self.transcript.append_to_reply)
        self.network = network or NetworkMonitor()
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._state = ConnectionState.IDLE
        self._retry_count = 0
        self._session: StreamingSession | None = None
        self._task: asyncio.Task | None = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def session(self) -> StreamingSession | None:
        """The active session, if a question is in flight or still being typed."""
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with ``(state, retry_count)`` on each change."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: ConnectionState, retry_count: int) -> None:
        if state == self._state and retry_count == self._retry_count:
            return
        self._state = state
        self._retry_count = retry_count
        logger.debug("Connection state -> %s (retry %d)", state.value, retry_count)
        for listener in list(self._listeners):
            listener(state, retry_count)

    async def submit(self, question: str) -> SessionOutcome:
        """Ask a question and wait until the answer is fully rendered.

        Returns:
            REJECTED for an empty question (no-op) or while offline,
            COMPLETED, FAILED or CANCELLED otherwise.

        Raises:
            SessionActiveError: If another question is still in flight
        """
        if not question.strip():
            return SessionOutcome.REJECTED
        if self._session is not None:
            raise SessionActiveError("A question is already being answered")
        if not self.network.is_online:
            self.transcript.add_system(OFFLINE_REJECTION, MessageKind.ERROR)
            return SessionOutcome.REJECTED

        session = StreamingSession(question=question, max_retries=self.policy.max_retries)
        self._session = session
        self.transcript.add_user(question)
        self.transcript.begin_reply()
        logger.info("Session %d started", session.session_id)

        task = asyncio.get_running_loop().create_task(self._drive(session))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if session.cancelled:
                return SessionOutcome.CANCELLED
            # The caller itself was cancelled
            self._abandon(session)
            raise
        finally:
            if self._session is session:
                self._session = None
                self._task = None

    def cancel(self) -> bool:
        """Abort the active session immediately, without further retries.

        Returns:
            True if a session was cancelled
        """
        session = self._session
        if session is None or session.cancelled:
            return False
        session.cancelled = True
        self._abandon(session)
        if self._task is not None:
            self._task.cancel()
        self.transcript.add_system(CANCELLED_NOTICE, MessageKind.INFO)
        logger.info("Session %d cancelled", session.session_id)
        return True

    async def aclose(self) -> None:
        """Cancel any active session and stop the renderer."""
        task = self._task
        self.cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.renderer.aclose()

    def _abandon(self, session: StreamingSession) -> None:
        session.close()
        self.renderer.reset()
        self.transcript.end_reply(discard_if_empty=True)
        self._set_state(ConnectionState.IDLE, 0)

    async def _drive(self, session: StreamingSession) -> SessionOutcome:
        policy = self.policy
        while True:
            token = session.begin_attempt(policy.connect_timeout)
            # Never mix chunks from different attempts
            self.renderer.reset()
            self.transcript.reset_reply()
            self._set_state(ConnectionState.CONNECTING, session.retry_count)

            failure: Exception | None = None
            try:
                await self._run_attempt(session, token)
            except Cancelled as e:
                logger.debug("%s", e)
                return SessionOutcome.CANCELLED
            except Exception as error:
                failure = error

            if not session.is_current(token):
                logger.debug("Attempt %s finished after it was superseded", token)
                return SessionOutcome.CANCELLED
            if failure is None:
                return await self._complete(session)

            logger.warning(
                "Request failed (attempt %d/%d): %s",
                session.attempt, policy.max_retries + 1, failure,
            )
            if session.retry_count >= session.max_retries:
                return await self._fail(session, failure)

            session.retry_count += 1
            self._set_state(ConnectionState.RETRYING, session.retry_count)
            self.transcript.add_system(
                f"Connection failed, retrying {session.retry_count}", MessageKind.WARNING
            )
            await self._sleep(policy.backoff_delay(session.retry_count))

            if not self.network.is_online:
                self.transcript.add_system(OFFLINE_DURING_RETRY, MessageKind.WARNING)
                await self.network.wait_online()
                self.transcript.add_system(NETWORK_RESTORED, MessageKind.INFO)

    async def _run_attempt(self, session: StreamingSession, token: AttemptToken) -> None:
        try:
            await self._stream_attempt(session, token)
        except ConnectionFailed as e:
            if self.network.is_online:
                raise
            raise NetworkUnavailable(f"Network offline: {e}") from e

    async def _stream_attempt(self, session: StreamingSession, token: AttemptToken) -> None:
        policy = self.policy
        async with contextlib.AsyncExitStack() as stack:
            try:
                async with asyncio.timeout(session.connect_time_left()):
                    chunks = await stack.enter_async_context(self._transport.open(session.question))
            except TimeoutError as e:
                raise ConnectTimeout(policy.connect_timeout) from e

            self._set_state(ConnectionState.STREAMING, session.retry_count)
            iterator = aiter(chunks)
            if hasattr(iterator, "aclose"):
                stack.push_async_callback(iterator.aclose)

            while True:
                try:
                    async with asyncio.timeout(policy.stream_timeout):
                        chunk = await anext(iterator)
                except StopAsyncIteration:
                    break
                except TimeoutError as e:
                    stalled = session.seconds_since_last_chunk()
                    if stalled is not None:
                        logger.debug("Stream stalled %.1fs after the last chunk", stalled)
                    raise StreamTimeout(policy.stream_timeout) from e

                if not session.is_current(token):
                    raise Cancelled(f"Discarding chunk from superseded attempt {token}")
                session.record_chunk()
                self.renderer.enqueue(chunk)

        if not session.received_content:
            raise EmptyResponse()

    async def _complete(self, session: StreamingSession) -> SessionOutcome:
        self._set_state(ConnectionState.IDLE, 0)
        await self.renderer.wait_idle()
        self.transcript.end_reply()
        session.close()
        logger.info("Session %d completed after %d attempt(s)", session.session_id, session.attempt)
        return SessionOutcome.COMPLETED

    async def _fail(self, session: StreamingSession, error: Exception) -> SessionOutcome:
        self._set_state(ConnectionState.ERROR, session.retry_count)
        if session.received_content:
            await self.renderer.wait_idle()
        else:
            self.renderer.reset()
        self.transcript.end_reply(discard_if_empty=True)
        session.close()
        self.transcript.add_system(classify_failure(error, self.network.is_online), MessageKind.ERROR)
        logger.error("Session %d failed: %s", session.session_id, error)
        return SessionOutcome.FAILED
