"""Rich console output and markdown file save for debate outcomes."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from src.models import DebateOutcome, Round, TranscriptEntry

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _entry_preview(entry: TranscriptEntry, words: int = 50) -> str:
    """Return first N words of an entry."""
    all_words = entry.content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _round_label(number: int) -> str:
    return "Initial Responses" if number == 0 else "Critique"


def print_round_summary(rnd: Round) -> None:
    """Print a brief summary of one round to the console."""
    console.print(Rule(f"[bold cyan]Round {rnd.number}: {_round_label(rnd.number)}[/bold cyan]"))
    for entry in rnd.entries:
        console.print(
            Panel(
                _entry_preview(entry),
                title=f"[bold]{entry.agent}[/bold]",
                subtitle=entry.timestamp.strftime("%H:%M:%S"),
                border_style="dim",
            )
        )


def print_final_answer(outcome: DebateOutcome) -> None:
    """Print the synthesized answer to the console using Rich markdown."""
    console.print(Rule("[bold green]Final Answer[/bold green]"))
    console.print(
        Text(
            f"Synthesized by: {outcome.synthesizer} | "
            f"Duration: {outcome.total_duration_sec:.1f}s | "
            f"Rounds: {len(outcome.rounds)} | "
            f"Consensus: {'yes' if outcome.consensus else 'no'} | "
            f"Messages: {len(outcome.all_entries())}",
            style="dim",
        )
    )
    console.print(Markdown(outcome.final_answer))


def save_to_file(outcome: DebateOutcome, output_dir: Path, slug_override: str | None = None) -> Path:
    """Save the full debate transcript as a markdown file.

    Args:
        outcome: The completed DebateOutcome.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the prompt text.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(outcome.prompt)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    panel = ", ".join(e.agent for e in outcome.rounds[0].entries) if outcome.rounds else ""

    lines: list[str] = [
        f"# Debate: {outcome.prompt[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Agents:** {panel}",
        f"**Synthesizer:** {outcome.synthesizer}",
        f"**Rounds:** {len(outcome.rounds)}",
        f"**Consensus:** {'yes' if outcome.consensus else 'no'}",
        f"**Duration:** {outcome.total_duration_sec:.1f}s",
        "",
        "---",
        "",
    ]

    for rnd in outcome.rounds:
        lines.append(f"## Round {rnd.number}: {_round_label(rnd.number)}")
        lines.append("")
        for entry in rnd.entries:
            lines.append(f"### {entry.agent}")
            lines.append("")
            lines.append(entry.content)
            lines.append("")
            lines.append(f"*{entry.timestamp.strftime('%Y-%m-%d %H:%M:%S')}*")
            lines.append("")

    lines += [
        f"## Final Answer (by {outcome.synthesizer})",
        "",
        outcome.final_answer,
        "",
        "## Reasoning Trace",
        "",
        "```",
        outcome.reasoning.rstrip(),
        "```",
        "",
    ]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Debate saved to: %s", filepath)
    return filepath
