from typing import Any

from .base import LLMProvider
from .providers import AnthropicProvider, OpenAIProvider

DEEPSEEK_BASE_URL = "https://api.deepseek.com"

SUPPORTED_PROVIDERS = ("openai", "deepseek", "anthropic")


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create a streaming completion provider.

    Args:
        provider: Provider type ('openai', 'deepseek', 'anthropic' or 'claude')
        **config: Provider-specific configuration
            For OpenAI:
                - api_key: str (required)
                - model: str (default: 'gpt-3.5-turbo')
                - base_url: str | None
            For DeepSeek (OpenAI-compatible API):
                - api_key: str (required)
                - model: str (default: 'deepseek-chat')
                - base_url: str (default: 'https://api.deepseek.com')
            For Anthropic:
                - api_key: str (required)
                - model: str (default: 'claude-sonnet-4-20250514')

    Returns:
        Initialized provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider("openai", api_key="sk-...")
        >>> provider = create_llm_provider("deepseek", api_key="sk-...")
    """
    provider_lower = provider.lower()

    if provider_lower not in SUPPORTED_PROVIDERS + ("claude",):
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: 'openai', 'deepseek', 'anthropic'"
        )

    if "api_key" not in config:
        raise TypeError(f"{provider_lower} provider requires 'api_key' in config")

    if provider_lower == "openai":
        return OpenAIProvider(**config)

    if provider_lower == "deepseek":
        config.setdefault("model", "deepseek-chat")
        config.setdefault("base_url", DEEPSEEK_BASE_URL)
        return OpenAIProvider(**config)

    return AnthropicProvider(**config)
