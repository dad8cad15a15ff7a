"""Completion gateway: relays streamed LLM output over chunked HTTP."""

from .app import AskRequest, create_app
from .config import GatewaySettings, get_settings
from .server import run_gateway

__all__ = ["AskRequest", "GatewaySettings", "create_app", "get_settings", "run_gateway"]
