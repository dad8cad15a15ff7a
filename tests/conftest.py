"""Pytest configuration and shared fixtures."""
import pytest

from relaychat.gateway import GatewaySettings
from support import RecordingSleep


@pytest.fixture
def gateway_settings():
    """Gateway settings independent of the environment."""
    return GatewaySettings(
        llm_provider="openai",
        openai_api_key="sk-test",
        openai_model="gpt-3.5-turbo",
        cors_allow_origins_raw="*",
    )


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
