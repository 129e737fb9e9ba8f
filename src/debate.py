"""Debate orchestration: parallel initial round, critique rounds, convergence, synthesis."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence

from config.config_loader import validate_debate_settings
from src.agent import Agent
from src.convergence import check_convergence, overlap_ratio
from src.models import DebateOutcome, Round, TranscriptEntry

logger = logging.getLogger(__name__)

_REASONING_PREVIEW_CHARS = 100


def select_first_agent(agents: Sequence[Agent]) -> Agent:
    """Default synthesizer policy: the agent registered first."""
    return agents[0]


def _extract_reasoning(rounds: Sequence[Round]) -> str:
    """Summarise every round as one '- agent: preview...' line per entry."""
    reasoning = "Debate Process:\n\n"
    for index, rnd in enumerate(rounds):
        reasoning += f"Round {index + 1}:\n"
        for entry in rnd.entries:
            reasoning += f"- {entry.agent}: {entry.content[:_REASONING_PREVIEW_CHARS]}...\n"
        reasoning += "\n"
    return reasoning


class DebateCoordinator:
    """Drives a set of agents through a debate and returns the synthesized outcome.

    Args:
        agents: Participating agents; registration order is significant.
        max_rounds: Total round budget, initial round included.
        convergence_threshold: Overlap ratio that must be exceeded to stop early.
        synthesizer_selector: Picks the agent that writes the final answer.
        on_round_complete: Optional callback invoked after each round completes.

    Raises:
        ValueError: If no agents are given, names collide, or settings are invalid.
    """

    def __init__(
        self,
        agents: Sequence[Agent],
        max_rounds: int = 3,
        convergence_threshold: float = 0.7,
        synthesizer_selector: Callable[[Sequence[Agent]], Agent] = select_first_agent,
        on_round_complete: Callable[[Round], None] | None = None,
    ) -> None:
        if not agents:
            raise ValueError("DebateCoordinator needs at least one agent")
        validate_debate_settings(max_rounds, convergence_threshold)
        self._agents: list[Agent] = []
        for agent in agents:
            self.add_agent(agent)
        self.max_rounds = max_rounds
        self.convergence_threshold = convergence_threshold
        self._select_synthesizer = synthesizer_selector
        self._on_round_complete = on_round_complete

    def add_agent(self, agent: Agent) -> None:
        if any(a.name == agent.name for a in self._agents):
            raise ValueError(f"Agent name already in use: {agent.name}")
        self._agents.append(agent)

    def remove_agent(self, name: str) -> None:
        self._agents = [a for a in self._agents if a.name != name]

    def list_agents(self) -> list[Agent]:
        return list(self._agents)

    async def _run_initial_round(self, agents: Sequence[Agent], prompt: str) -> Round:
        # All-or-nothing: the first failure propagates and aborts the debate
        responses = await asyncio.gather(*(a.generate_response(prompt) for a in agents))
        entries = tuple(
            TranscriptEntry(agent=agent.name, content=content, round_number=0)
            for agent, content in zip(agents, responses)
        )
        return Round(number=0, entries=entries)

    async def _run_critique_round(
        self,
        agents: Sequence[Agent],
        previous: Round,
        prompt: str,
        round_number: int,
    ) -> Round:
        entries: list[TranscriptEntry] = []
        for agent in agents:
            critique = await agent.critique(previous.entries, prompt)
            entries.append(TranscriptEntry(agent=agent.name, content=critique, round_number=round_number))
        return Round(number=round_number, entries=tuple(entries))

    def _complete_round(self, rnd: Round) -> None:
        logger.info("Round %d complete: %d entries", rnd.number, len(rnd.entries))
        if self._on_round_complete:
            self._on_round_complete(rnd)

    def _active_agents(self) -> list[Agent]:
        """Snapshot of the agent set, taken at each round boundary."""
        if not self._agents:
            raise ValueError("Cannot run a debate without agents")
        return list(self._agents)

    async def run_debate(self, prompt: str) -> DebateOutcome:
        """Run the full debate for prompt.

        Agents added or removed while a round is running join or leave at the
        next round boundary; synthesis uses the agent set as it stands then.

        Raises:
            ValueError: If the agent set is empty.
            ProviderError: If any model call fails.
        """
        agents = self._active_agents()
        start = time.monotonic()
        rounds: list[Round] = []

        logger.info("Starting round 0 with %d agents", len(agents))
        current = await self._run_initial_round(agents, prompt)
        rounds.append(current)
        self._complete_round(current)

        for round_number in range(1, self.max_rounds):
            agents = self._active_agents()
            logger.info("Starting round %d with %d agents", round_number, len(agents))
            current = await self._run_critique_round(agents, current, prompt, round_number)
            rounds.append(current)
            self._complete_round(current)

            if check_convergence(current.entries, self.convergence_threshold):
                logger.info(
                    "Convergence reached after %d rounds (overlap %.2f > %.2f)",
                    len(rounds),
                    overlap_ratio(current.entries),
                    self.convergence_threshold,
                )
                break

        synthesizer = self._select_synthesizer(self._active_agents())
        all_entries = [entry for rnd in rounds for entry in rnd.entries]
        logger.info("Running synthesis via %s", synthesizer.name)
        final_answer = await synthesizer.synthesize(all_entries, prompt)

        return DebateOutcome(
            prompt=prompt,
            final_answer=final_answer,
            reasoning=_extract_reasoning(rounds),
            consensus=len(rounds) < self.max_rounds,
            rounds=tuple(rounds),
            synthesizer=synthesizer.name,
            total_duration_sec=time.monotonic() - start,
        )
