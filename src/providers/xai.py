"""xAI Grok binding through its OpenAI-compatible endpoint."""

from openai import AsyncOpenAI

from src.providers.base import ProviderError
from src.providers.openai_provider import OpenAIProvider


class XAIProvider(OpenAIProvider):
    """Same request shape as OpenAIProvider, pointed at the configured base_url."""

    label = "xAI"

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        if not self._config.base_url:
            raise ProviderError(self._config.name, "base_url is required for xAI provider")
        return AsyncOpenAI(api_key=api_key, base_url=self._config.base_url)
