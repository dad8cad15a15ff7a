"""Uvicorn entry point for the gateway."""

import uvicorn

from ..logging_config import configure_logging
from .app import create_app
from .config import get_settings


def run_gateway(host: str | None = None, port: int | None = None, log_level: str = "info") -> None:
    """Run the gateway until interrupted."""
    configure_logging(log_level)
    settings = get_settings()

    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.server_host,
        port=port or settings.server_port,
        log_level=log_level,
        log_config=None,
    )


if __name__ == "__main__":
    run_gateway()
