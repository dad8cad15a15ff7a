"""Error taxonomy shared by the gateway and the streaming client.

Every failure a session can run into is one of these types, so the
controller can decide between retrying, waiting for the network, and
terminating, and can render exactly one user-facing message at the end.
"""


class RelayChatError(Exception):
    """Base class for all relaychat errors."""


class MissingInput(RelayChatError):
    """The question was empty. Rejected locally, never retried."""


class SessionActiveError(RelayChatError):
    """A question was submitted while another session is still running."""


class NetworkUnavailable(RelayChatError):
    """A request failed while the network is reported offline."""


class ConnectTimeout(RelayChatError):
    """No successful response began within the connect timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"No response within {timeout:g}s")
        self.timeout = timeout


class StreamTimeout(RelayChatError):
    """Streaming started but no chunk arrived within the stream timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"Stream timeout: no data for {timeout:g}s")
        self.timeout = timeout


class HttpFailure(RelayChatError):
    """The gateway answered with a non-success status."""

    def __init__(self, status_code: int, reason: str = ""):
        message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class EmptyResponse(RelayChatError):
    """The response finished without a single chunk of body."""

    def __init__(self) -> None:
        super().__init__("Empty response body")


class ConnectionFailed(RelayChatError):
    """Transport-level failure (refused connection, reset, protocol error)."""


class ProviderFailure(RelayChatError):
    """The completion provider failed while generating."""


class Cancelled(RelayChatError):
    """The attempt was superseded by a cancel. Ends the session silently."""


TIMEOUT_MESSAGE = "Request timeout. Check your network."
OFFLINE_MESSAGE = "Network offline. Check your internet."
GENERIC_MESSAGE = "Connection failed. Try again later."


def classify_failure(error: BaseException, online: bool = True) -> str:
    """Map a terminal failure to the message shown to the user.

    Classification is for messaging only; control flow never depends on it.
    """
    if isinstance(error, (ConnectTimeout, StreamTimeout, Cancelled, TimeoutError)):
        return TIMEOUT_MESSAGE
    if isinstance(error, HttpFailure):
        return f"Server error: {error}"
    if isinstance(error, NetworkUnavailable) or not online:
        return OFFLINE_MESSAGE
    return GENERIC_MESSAGE
