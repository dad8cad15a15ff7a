"""Client configuration constants.

Centralizes the timing values of the streaming session and the typewriter.
"""

import os
from dataclasses import dataclass

# Gateway location
DEFAULT_GATEWAY_URL = "http://localhost:3001"

# Retry configuration
MAX_RETRIES = 3  # Retries after the first attempt (4 attempts total)
BACKOFF_BASE_SECONDS = 1.0  # Delay before retry n is base * 2^(n-1)

# Timeouts
CONNECT_TIMEOUT_SECONDS = 30.0  # Until a successful response begins
STREAM_TIMEOUT_SECONDS = 10.0  # Between chunks once streaming

# Typewriter configuration
TYPEWRITER_CHAR_DELAY = 0.02  # Seconds per revealed character
TYPEWRITER_CHUNK_PAUSE = 0.01  # Pause between queued chunks

# Connectivity probe
NETWORK_POLL_INTERVAL = 1.0  # Seconds between health probes
NETWORK_PROBE_TIMEOUT = 2.0


def gateway_url() -> str:
    """Gateway base URL from ``RELAYCHAT_URL`` (default: localhost:3001)."""
    return os.getenv("RELAYCHAT_URL", DEFAULT_GATEWAY_URL).rstrip("/")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry and timeout limits for one streaming session."""

    max_retries: int = MAX_RETRIES
    backoff_base: float = BACKOFF_BASE_SECONDS
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS
    stream_timeout: float = STREAM_TIMEOUT_SECONDS

    def backoff_delay(self, retry: int) -> float:
        """Delay before the given retry (1-based): 1s, 2s, 4s by default."""
        if retry < 1:
            raise ValueError(f"retry must be >= 1, got {retry}")
        return self.backoff_base * 2 ** (retry - 1)
