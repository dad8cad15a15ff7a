"""Gateway configuration with environment fallbacks."""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_APP_NAME = "Relaychat Gateway"
DEFAULT_APP_VERSION = "0.1.0"


def _env_int(name: str, fallback: int) -> int:
    try:
        return int(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


class GatewaySettings(BaseModel):
    """Gateway settings resolved from the environment."""

    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default_factory=lambda: os.getenv("RELAYCHAT_HOST", "127.0.0.1"))
    server_port: int = Field(default_factory=lambda: _env_int("RELAYCHAT_PORT", 3001))

    # Completion provider
    llm_provider: str = Field(default_factory=lambda: os.getenv("LLM_PROVIDER", "openai").lower())
    openai_api_key: str | None = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    openai_model: str = Field(default_factory=lambda: os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo"))
    deepseek_api_key: str | None = Field(default_factory=lambda: os.getenv("DEEPSEEK_API_KEY"))
    deepseek_model: str = Field(default_factory=lambda: os.getenv("DEEPSEEK_MODEL", "deepseek-chat"))
    anthropic_api_key: str | None = Field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY"))
    anthropic_model: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
    )

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(
        default_factory=lambda: os.getenv("RELAYCHAT_CORS_ALLOW_ORIGINS", "*")
    )

    @property
    def cors_allow_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    def provider_config(self) -> dict[str, str] | None:
        """Keyword arguments for ``create_llm_provider``, or None without a key."""
        if self.llm_provider == "openai":
            api_key, model = self.openai_api_key, self.openai_model
        elif self.llm_provider == "deepseek":
            api_key, model = self.deepseek_api_key, self.deepseek_model
        elif self.llm_provider in ("anthropic", "claude"):
            api_key, model = self.anthropic_api_key, self.anthropic_model
        else:
            raise ValueError(f"Unknown LLM provider: {self.llm_provider}")

        if not api_key:
            return None
        return {"api_key": api_key, "model": model}


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """Get cached settings instance."""
    return GatewaySettings()
