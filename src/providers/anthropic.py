"""Anthropic Messages API binding: the agent persona goes in the ``system`` parameter."""

import asyncio
import logging
import os
import time

import anthropic as anthropic_sdk

from config.config_loader import ModelConfig
from src.models import ModelResponse
from src.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


class AnthropicProvider(AIProvider):

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:
        start = time.monotonic()
        try:
            message = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    temperature=self._config.temperature,
                    system=system_prompt,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"No reply within {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"Model call failed: {exc}") from exc

        elapsed = time.monotonic() - start
        # Tool-use and thinking blocks are ignored; debate turns are plain text
        text = "\n".join(block.text for block in message.content or () if block.type == "text")
        if not text:
            raise ProviderError(self._config.name, "Model returned no text blocks")

        token_count = None
        if message.usage:
            token_count = message.usage.input_tokens + message.usage.output_tokens
        logger.debug("Anthropic turn on %s: %.2fs, %s tokens", self._config.model, elapsed, token_count)

        return ModelResponse(
            provider=self._config.name,
            model=self._config.model,
            content=text,
            latency_sec=elapsed,
            token_count=token_count,
        )
