"""LLM provider factory/registry."""

from __future__ import annotations

import logging

from pollhost.config import AppConfig
from pollhost.infra.providers.anthropic import AnthropicProvider
from pollhost.infra.providers.base import LLMProvider
from pollhost.infra.providers.llamacpp import LlamaCppProvider
from pollhost.infra.providers.openrouter import OpenRouterProvider
from pollhost.models.provider import ProviderType

logger = logging.getLogger(__name__)


def _build_provider(provider_type: ProviderType, config: AppConfig) -> LLMProvider:
    """Build a single provider instance."""
    prov_config = config.providers.get(provider_type.value)
    if provider_type == ProviderType.ANTHROPIC:
        return AnthropicProvider(
            api_key=prov_config.api_key if prov_config else "",
            model=prov_config.default_model if prov_config else "",
        )
    elif provider_type == ProviderType.OPENROUTER:
        if not prov_config or not prov_config.api_key:
            raise ValueError("OpenRouter selected but no API key configured")
        return OpenRouterProvider(
            api_key=prov_config.api_key,
            model=prov_config.default_model,
        )
    elif provider_type == ProviderType.LLAMACPP:
        return LlamaCppProvider(
            base_url=prov_config.base_url if prov_config and prov_config.base_url else "http://localhost:8080",
        )
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")


def get_provider(provider_type: ProviderType | str, config: AppConfig) -> LLMProvider:
    """Get an LLM provider instance by type, configured from AppConfig."""
    if isinstance(provider_type, str):
        provider_type = ProviderType(provider_type)
    logger.info("Using LLM provider: %s", provider_type.value)
    return _build_provider(provider_type, config)
