"""Abstract base for all AI model providers."""

from abc import ABC, abstractmethod

from src.models import ModelResponse


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class AIProvider(ABC):
    """Abstract base for all AI model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the configured provider name (e.g. 'openai', 'anthropic')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:
        """Generate a response for the given persona and user prompt.

        Args:
            system_prompt: Persona instructions sent as the system message.
            prompt: The user-facing prompt text.

        Returns:
            ModelResponse dataclass with content and metadata.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...
