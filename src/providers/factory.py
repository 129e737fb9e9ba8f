"""Map a ModelConfig's sdk key to the provider class that speaks it."""

import dataclasses

from config.config_loader import ModelConfig
from src.providers.anthropic import AnthropicProvider
from src.providers.base import AIProvider, ProviderError
from src.providers.gemini import GeminiProvider
from src.providers.openai_provider import OpenAIProvider
from src.providers.xai import XAIProvider

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GeminiProvider,
    "xai": XAIProvider,
}


def create_provider(config: ModelConfig, model_name: str | None = None) -> AIProvider:
    """Build a provider for config, optionally overriding the model string.

    Raises:
        ProviderError: If the sdk is unknown or the provider cannot be built
            (e.g. missing API key).
    """
    provider_cls = PROVIDER_CLASSES.get(config.sdk)
    if provider_cls is None:
        raise ProviderError(config.name, f"Unsupported sdk: {config.sdk}")
    if model_name:
        config = dataclasses.replace(config, model=model_name)
    return provider_cls(config)
