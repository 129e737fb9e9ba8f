"""Gemini binding via google-genai; the persona is passed as ``system_instruction``."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ModelConfig
from src.models import ModelResponse
from src.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:
        start = time.monotonic()
        generation = genai_types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
        )
        try:
            reply = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model, contents=prompt, config=generation
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"No reply within {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"Model call failed: {exc}") from exc

        elapsed = time.monotonic() - start
        if not reply.text:
            raise ProviderError(self._config.name, "Model returned no text")

        token_count = reply.usage_metadata.total_token_count if reply.usage_metadata else None
        logger.debug("Gemini turn on %s: %.2fs, %s tokens", self._config.model, elapsed, token_count)

        return ModelResponse(
            provider=self._config.name,
            model=self._config.model,
            content=reply.text,
            latency_sec=elapsed,
            token_count=token_count,
        )
