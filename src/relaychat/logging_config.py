"""Logging configuration for relaychat."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "relaychat"

LOG_FORMAT = "%(message)s"
LOG_TIME_FORMAT = "[%X]"


def configure_logging(level: str | int = logging.INFO, console: Console | None = None) -> None:
    """Route relaychat and server loggers through a single Rich handler.

    Args:
        level: Level name ("debug", "info", ...) or numeric level
        console: Console to write to (defaults to stderr so typewriter
            output on stdout stays clean)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
        log_time_format=LOG_TIME_FORMAT,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers.clear()
        server_logger.setLevel(level)
        server_logger.propagate = True


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get logger instance."""
    return logging.getLogger(name)
