"""UI configuration constants."""

import logging


class LogLevel:
    """Log level constants for the log panel, aligned with ``logging`` levels.

    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Log panel
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Chat display
MESSAGE_TIMESTAMP_FORMAT = "%H:%M:%S"
OFFLINE_BANNER_TEXT = "Network connection lost. Check your internet."
FOOTNOTE_TEXT = "Responses stream from a hosted model and may include inaccurate information."

# Input history
INPUT_HISTORY_MAX_SIZE = 100
