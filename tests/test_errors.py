"""Tests for failure classification and retry policy."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from relaychat.client import RetryPolicy
from relaychat.client.config import DEFAULT_GATEWAY_URL, gateway_url
from relaychat.errors import (
    GENERIC_MESSAGE,
    OFFLINE_MESSAGE,
    TIMEOUT_MESSAGE,
    Cancelled,
    ConnectionFailed,
    ConnectTimeout,
    EmptyResponse,
    HttpFailure,
    NetworkUnavailable,
    RelayChatError,
    StreamTimeout,
    classify_failure,
)


class TestClassifyFailure:
    """Tests for the user-facing final failure message."""

    @pytest.mark.parametrize(
        "error",
        [ConnectTimeout(30.0), StreamTimeout(10.0), Cancelled("superseded"), TimeoutError()],
    )
    def test_timeouts(self, error):
        assert classify_failure(error) == TIMEOUT_MESSAGE

    def test_timeout_wins_over_offline(self):
        assert classify_failure(ConnectTimeout(30.0), online=False) == TIMEOUT_MESSAGE

    def test_http_failure(self):
        error = HttpFailure(503, "Service Unavailable")
        assert classify_failure(error) == "Server error: HTTP 503: Service Unavailable"

    def test_http_failure_without_reason(self):
        assert classify_failure(HttpFailure(502)) == "Server error: HTTP 502"

    def test_offline(self):
        assert classify_failure(NetworkUnavailable("offline")) == OFFLINE_MESSAGE
        assert classify_failure(ConnectionFailed("refused"), online=False) == OFFLINE_MESSAGE

    @pytest.mark.parametrize("error", [ConnectionFailed("reset"), EmptyResponse(), ValueError("bug")])
    def test_generic(self, error):
        assert classify_failure(error) == GENERIC_MESSAGE

    def test_hierarchy(self):
        for error in (ConnectTimeout(1), StreamTimeout(1), HttpFailure(500), EmptyResponse()):
            assert isinstance(error, RelayChatError)

    def test_http_failure_attributes(self):
        error = HttpFailure(429, "Too Many Requests")
        assert error.status_code == 429
        assert error.reason == "Too Many Requests"
        assert str(error) == "HTTP 429: Too Many Requests"


class TestRetryPolicy:
    """Tests for backoff and defaults."""

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_retries == 3
        assert policy.connect_timeout == 30.0
        assert policy.stream_timeout == 10.0

    def test_default_backoff_schedule(self):
        policy = RetryPolicy()
        assert [policy.backoff_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    @given(retry=st.integers(min_value=1, max_value=30))
    def test_backoff_doubles(self, retry):
        policy = RetryPolicy()
        assert policy.backoff_delay(retry) == 2 ** (retry - 1)
        assert policy.backoff_delay(retry + 1) == 2 * policy.backoff_delay(retry)

    @given(retry=st.integers(max_value=0))
    def test_no_backoff_before_first_attempt(self, retry):
        with pytest.raises(ValueError):
            RetryPolicy().backoff_delay(retry)

    def test_policy_is_frozen(self):
        with pytest.raises(AttributeError):
            RetryPolicy().max_retries = 5  # type: ignore[misc]


class TestGatewayUrl:
    """Tests for client gateway selection."""

    def test_default(self, monkeypatch):
        monkeypatch.delenv("RELAYCHAT_URL", raising=False)
        assert gateway_url() == DEFAULT_GATEWAY_URL

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("RELAYCHAT_URL", "http://chat.internal:8000/")
        assert gateway_url() == "http://chat.internal:8000"
