"""Frozen dataclasses for the debate pipeline. No logic beyond flattening, no deps."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ModelResponse:
    provider: str          # configured provider key, e.g. "openai", "anthropic"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None


@dataclass(frozen=True)
class TranscriptEntry:
    agent: str
    content: str
    round_number: int      # 0 is the independent initial round
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class Round:
    number: int
    entries: tuple[TranscriptEntry, ...] = ()


@dataclass(frozen=True)
class DebateOutcome:
    prompt: str
    final_answer: str
    reasoning: str          # human-readable trace, diagnostic only
    consensus: bool         # True iff the debate stopped before exhausting max_rounds
    rounds: tuple[Round, ...]
    synthesizer: str
    total_duration_sec: float = 0.0

    def all_entries(self) -> list[TranscriptEntry]:
        """Flatten the transcript in round-then-registration order."""
        return [entry for rnd in self.rounds for entry in rnd.entries]
