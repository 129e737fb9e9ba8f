"""Click CLI — orchestrates config loading, agent construction, debate, and output."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AgentConfig, AppConfig, ConfigError, load_config
from src.agent import Agent
from src.debate import DebateCoordinator
from src.healthcheck import run_health_checks
from src.models import DebateOutcome, Round
from src.output import print_final_answer, print_round_summary, save_to_file
from src.providers.base import AIProvider, ProviderError
from src.providers.factory import create_provider
from src.tools.builtin import build_default_registry
from src.tools.registry import ToolRegistry, UnknownToolError

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _select_agent_configs(config: AppConfig, agents_arg: str | None) -> list[AgentConfig]:
    """Agents named in --agents (in that order), or every configured agent."""
    if not agents_arg:
        return list(config.agents)
    by_name = {a.name: a for a in config.agents}
    selected: list[AgentConfig] = []
    for name in (n.strip() for n in agents_arg.split(",")):
        if name not in by_name:
            raise ConfigError(f"Unknown agent '{name}'. Configured: {', '.join(by_name)}")
        selected.append(by_name[name])
    return selected


def _build_providers(config: AppConfig, agent_configs: list[AgentConfig]) -> dict[str, AIProvider]:
    """Build one provider per agent, keyed by agent name. Agents without a usable key are skipped."""
    providers: dict[str, AIProvider] = {}
    for agent_cfg in agent_configs:
        if agent_cfg.model not in config.available_providers:
            logger.warning(
                "Agent '%s' skipped: provider '%s' has no API key", agent_cfg.name, agent_cfg.model
            )
            continue
        try:
            providers[agent_cfg.name] = create_provider(
                config.models[agent_cfg.model], agent_cfg.model_name
            )
        except ProviderError as exc:
            logger.warning("Agent '%s' skipped: %s", agent_cfg.name, exc)
    return providers


def _build_agents(
    config: AppConfig,
    agent_configs: list[AgentConfig],
    providers: dict[str, AIProvider],
    registry: ToolRegistry,
) -> list[Agent]:
    """Bind each agent to its provider and tool set.

    Raises:
        UnknownToolError: If an agent asks for a tool the registry lacks.
    """
    agents: list[Agent] = []
    for agent_cfg in agent_configs:
        provider = providers.get(agent_cfg.name)
        if provider is None:
            continue
        tools = registry.create_bound_set(agent_cfg.tools) if agent_cfg.use_tools else ()
        agents.append(
            Agent(
                name=agent_cfg.name,
                role=agent_cfg.role,
                system_prompt=agent_cfg.system_prompt,
                provider=provider,
                tools=tools,
                prompts=config.prompts,
            )
        )
    return agents


def _check_and_filter_providers(providers: dict[str, AIProvider]) -> dict[str, AIProvider]:
    """Run health checks, print results, and ask user what to do on failures.

    Returns the filtered dict of working providers. Exits if the user
    declines to continue or no providers pass.
    """
    console.print("\n[bold]Checking providers...[/bold]")
    results: dict[str, tuple[bool, str]] = asyncio.run(run_health_checks(providers))

    failed_names: list[str] = []
    for name in sorted(results):
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {short_err}")
            failed_names.append(name)

    if not failed_names:
        console.print()
        return providers

    working = {n: p for n, p in providers.items() if n not in failed_names}

    if not working:
        console.print("\n[bold red]Error:[/bold red] No providers passed the health check.")
        sys.exit(1)

    console.print(f"\n[yellow]{len(failed_names)} agent(s) failed:[/yellow] {', '.join(failed_names)}")
    console.print(f"Working agents: {', '.join(sorted(working))}")

    if not click.confirm("Continue with working agents only?", default=True):
        sys.exit(0)

    console.print()
    return working


async def _run_single(
    prompt: str,
    agents: list[Agent],
    max_rounds: int,
    convergence_threshold: float,
) -> DebateOutcome:
    """Run one debate with a progress spinner and return its outcome."""
    names = ", ".join(a.name for a in agents)
    console.print(f"\n[bold cyan]Debate[/bold cyan] — {len(agents)} agents, up to {max_rounds} rounds")
    console.print(f"Agents: {names}")
    console.print(f"Synthesizer: {agents[0].name}")
    console.print(f"Prompt: [italic]{prompt[:80]}{'...' if len(prompt) > 80 else ''}[/italic]\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:

        def on_round_complete(rnd: Round) -> None:
            progress.print(f"[green]OK[/green] Round {rnd.number} complete ({len(rnd.entries)} responses)")

        progress.add_task("Running debate rounds...", total=None)
        coordinator = DebateCoordinator(
            agents,
            max_rounds=max_rounds,
            convergence_threshold=convergence_threshold,
            on_round_complete=on_round_complete,
        )
        return await coordinator.run_debate(prompt)


@click.command()
@click.argument("prompt", required=False)
@click.option("--file", "prompt_file", type=click.Path(exists=True), help="Read the prompt from a text/markdown file")
@click.option("--rounds", default=None, type=click.IntRange(min=1), help="Maximum debate rounds (default: from config)")
@click.option("--threshold", default=None, type=float, help="Convergence threshold in (0, 1] (default: from config)")
@click.option("--agents", "agents_arg", default=None, help="Comma-separated agent names; first one synthesizes")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not write the markdown transcript")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    prompt: str | None,
    prompt_file: str | None,
    rounds: int | None,
    threshold: float | None,
    agents_arg: str | None,
    output_path: str | None,
    no_save: bool,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """Multi-agent debate -- several models answer, critique each other, then one synthesizes.

    \b
    Examples:
      python -m src.cli "What is the capital of Colombia?"
      python -m src.cli "Which files mention my ID number?" --agents Claude --rounds 1
      python -m src.cli --file question.md --rounds 4 --threshold 0.8
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
        agent_configs = _select_agent_configs(config, agents_arg)
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if prompt_file:
        prompt_text = Path(prompt_file).read_text(encoding="utf-8").strip()
    elif prompt:
        prompt_text = prompt
    else:
        console.print("[bold red]Error:[/bold red] Provide a PROMPT argument or --file.")
        sys.exit(1)

    max_rounds = rounds if rounds is not None else config.debate.max_rounds
    convergence_threshold = threshold if threshold is not None else config.debate.convergence_threshold
    output_dir = Path(output_path) if output_path else config.debate.output_dir

    providers = _build_providers(config, agent_configs)
    if not providers:
        console.print("[bold red]Error:[/bold red] No agents available. Check API keys in .env.")
        sys.exit(1)

    if not skip_health_check:
        providers = _check_and_filter_providers(providers)

    try:
        agents = _build_agents(config, agent_configs, providers, build_default_registry(config.tools))
        outcome = asyncio.run(_run_single(prompt_text, agents, max_rounds, convergence_threshold))
    except (UnknownToolError, ConfigError, ValueError) as exc:
        console.print(f"[bold red]Setup error:[/bold red] {exc}")
        sys.exit(1)
    except ProviderError as exc:
        console.print(f"[bold red]Debate failed:[/bold red] {exc}")
        sys.exit(1)

    for rnd in outcome.rounds:
        print_round_summary(rnd)

    print_final_answer(outcome)

    if not no_save:
        saved_path = save_to_file(outcome, output_dir)
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")


if __name__ == "__main__":
    main()
