"""One debate participant: a persona bound to a model provider and a fixed tool set."""

import logging
from collections.abc import Sequence

from config.config_loader import PromptsConfig
from src.models import TranscriptEntry
from src.providers.base import AIProvider
from src.tools.registry import Tool
from src.tools.tool_calls import render_tool_manifest, resolve_tool_calls

logger = logging.getLogger(__name__)


def format_entries(entries: Sequence[TranscriptEntry]) -> str:
    """Render entries as '<agent>: <content>' blocks separated by blank lines."""
    return "\n\n".join(f"{e.agent}: {e.content}" for e in entries)


class Agent:
    """A named persona that answers, critiques and synthesizes through its provider.

    The provider is owned by this agent alone. The tool set is fixed at
    construction and never changes afterwards.
    """

    def __init__(
        self,
        name: str,
        role: str,
        system_prompt: str,
        provider: AIProvider,
        tools: Sequence[Tool] = (),
        prompts: PromptsConfig | None = None,
    ) -> None:
        self._name = name
        self._role = role
        self._system_prompt = system_prompt
        self._provider = provider
        self._tools: tuple[Tool, ...] = tuple(tools)
        self._prompts = prompts or PromptsConfig()

    def __repr__(self) -> str:
        return f"Agent(name={self._name!r}, provider={self._provider.name()!r}, tools={self.tool_names})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def role(self) -> str:
        return self._role

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def provider(self) -> AIProvider:
        return self._provider

    @property
    def tools(self) -> tuple[Tool, ...]:
        return self._tools

    @property
    def tool_names(self) -> list[str]:
        return [t.name for t in self._tools]

    def _persona(self) -> str:
        if not self._tools:
            return self._system_prompt
        return f"{self._system_prompt}\n\n{render_tool_manifest(self._tools)}"

    async def generate_response(
        self,
        prompt: str,
        context: Sequence[TranscriptEntry] | None = None,
    ) -> str:
        """Answer prompt, optionally after the given prior discussion.

        Raises:
            ProviderError: If the model call fails.
        """
        if context:
            user_prompt = (
                f"Previous discussion:\n{format_entries(context)}\n\n"
                f"Now respond to: {prompt}"
            )
        else:
            user_prompt = prompt

        response = await self._provider.generate(self._persona(), user_prompt)
        logger.debug("%s produced %d chars via %s", self._name, len(response.content), response.model)

        if not self._tools:
            return response.content
        return await resolve_tool_calls(response.content, self._tools)

    async def critique(self, other_entries: Sequence[TranscriptEntry], original_prompt: str) -> str:
        """Critique every entry not written by this agent."""
        others = [e for e in other_entries if e.agent != self._name]
        critique_prompt = self._prompts.critique.format(
            question=original_prompt,
            responses=format_entries(others),
        )
        return await self.generate_response(critique_prompt)

    async def synthesize(self, all_entries: Sequence[TranscriptEntry], original_prompt: str) -> str:
        """Produce the final answer from the whole transcript, own entries included."""
        synthesis_prompt = self._prompts.synthesis.format(
            question=original_prompt,
            responses=format_entries(all_entries),
        )
        return await self.generate_response(synthesis_prompt)
