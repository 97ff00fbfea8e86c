"""Provider factory: returns the provider instance for a name."""

from __future__ import annotations

import logging

from contract_core.core.config import get_settings

from .base import BaseProvider, ProviderConfigError, ProviderResult
from .claude import ClaudeProvider
from .groq import GroqProvider
from .mock import MockProvider
from .openai import OpenAIProvider

logger = logging.getLogger(__name__)

__all__ = [
    "get_provider",
    "BaseProvider",
    "ProviderConfigError",
    "ProviderResult",
    "MockProvider",
]

# name -> (provider class, settings attribute holding its key, env var)
KEYED_PROVIDERS: dict[str, tuple[type[BaseProvider], str, str]] = {
    "openai": (OpenAIProvider, "openai_api_key", "OPENAI_API_KEY"),
    "claude": (ClaudeProvider, "anthropic_api_key", "ANTHROPIC_API_KEY"),
    "groq": (GroqProvider, "groq_api_key", "GROQ_API_KEY"),
}


def get_provider(provider_name: str) -> BaseProvider:
    """Return a provider instance for *provider_name*.

    Raises ``ProviderConfigError`` if the provider is not in the allowlist,
    unknown, or has no API key.
    """
    settings = get_settings()
    name = provider_name.lower().strip()

    if name not in settings.ai_allowed_providers:
        raise ProviderConfigError(f"Provider {name!r} not in allowlist {settings.ai_allowed_providers}")

    if name == "mock":
        return MockProvider()

    if name not in KEYED_PROVIDERS:
        raise ProviderConfigError(f"Unknown provider {name!r}")

    provider_cls, key_attr, env_name = KEYED_PROVIDERS[name]
    api_key = getattr(settings, key_attr)
    if not api_key:
        raise ProviderConfigError(f"{env_name} not set")

    logger.debug("Using AI provider %s", name)
    return provider_cls(api_key=api_key)
