"""Command line interface for relaychat."""

from .app import app, main

__all__ = ["app", "main"]
