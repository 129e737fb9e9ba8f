"""Load settings.yaml into typed dataclasses. Validates debate settings at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

DEFAULT_CRITIQUE_TEMPLATE = """
Original question: {question}

Other agents' responses:
{responses}

Please critique these responses and provide your own perspective. Focus on:
1. What you agree with
2. What you disagree with and why
3. What might be missing
4. Your alternative or refined approach
"""

DEFAULT_SYNTHESIS_TEMPLATE = """
Original question: {question}

All agents' responses from the debate:
{responses}

Based on this discussion, provide a final synthesized answer that incorporates the best insights from all perspectives. Be decisive and clear in your final recommendation.
"""


class ConfigError(ValueError):
    """Raised when settings.yaml contains invalid values."""


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    temperature: float = 0.7
    base_url: str | None = None


@dataclass
class AgentConfig:
    name: str
    role: str
    model: str             # key into AppConfig.models
    system_prompt: str
    model_name: str | None = None   # overrides ModelConfig.model for this agent
    tools: list[str] = field(default_factory=list)   # empty means every registered tool
    use_tools: bool = True


@dataclass
class PromptsConfig:
    critique: str = DEFAULT_CRITIQUE_TEMPLATE
    synthesis: str = DEFAULT_SYNTHESIS_TEMPLATE


@dataclass
class DebateConfig:
    max_rounds: int = 3
    convergence_threshold: float = 0.7
    output_dir: Path = Path("./output")


@dataclass
class ToolsConfig:
    local_files_dir: Path = Path("./context/local_files")
    web_search_api_key_env: str = "TAVILY_API_KEY"
    web_search_max_results: int = 5
    web_search_timeout_sec: int = 30


@dataclass
class AppConfig:
    debate: DebateConfig
    models: dict[str, ModelConfig]
    agents: list[AgentConfig]
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    prompts: PromptsConfig = field(default_factory=PromptsConfig)
    available_providers: set[str] = field(default_factory=set)


def validate_debate_settings(max_rounds: int, convergence_threshold: float) -> None:
    """Raise ConfigError unless rounds >= 1 and 0 < threshold <= 1."""
    if max_rounds < 1:
        raise ConfigError(f"max_rounds must be a positive integer, got {max_rounds}")
    if not 0 < convergence_threshold <= 1:
        raise ConfigError(
            f"convergence_threshold must be in (0, 1], got {convergence_threshold}"
        )


def _load_debate(raw: dict) -> DebateConfig:
    debate = DebateConfig(
        max_rounds=int(raw.get("max_rounds", 3)),
        convergence_threshold=float(raw.get("convergence_threshold", 0.7)),
        output_dir=Path(raw.get("output_dir", "./output")),
    )
    validate_debate_settings(debate.max_rounds, debate.convergence_threshold)
    return debate


def _load_tools(raw: dict) -> ToolsConfig:
    web_raw = raw.get("web_search", {}) or {}
    return ToolsConfig(
        local_files_dir=Path(raw.get("local_files_dir", "./context/local_files")),
        web_search_api_key_env=str(web_raw.get("api_key_env", "TAVILY_API_KEY")),
        web_search_max_results=int(web_raw.get("max_results", 5)),
        web_search_timeout_sec=int(web_raw.get("timeout_sec", 30)),
    )


def _load_agents(raw: list, models: dict[str, ModelConfig]) -> list[AgentConfig]:
    agents: list[AgentConfig] = []
    seen: set[str] = set()
    for agent_raw in raw:
        agent = AgentConfig(
            name=str(agent_raw["name"]),
            role=str(agent_raw.get("role", "")),
            model=str(agent_raw["model"]),
            system_prompt=str(agent_raw.get("system_prompt", "")).strip(),
            model_name=agent_raw.get("model_name"),
            tools=[str(t) for t in agent_raw.get("tools", []) or []],
            use_tools=bool(agent_raw.get("use_tools", True)),
        )
        if agent.name in seen:
            raise ConfigError(f"Duplicate agent name: {agent.name}")
        if agent.model not in models:
            raise ConfigError(f"Agent '{agent.name}' references unknown model '{agent.model}'")
        seen.add(agent.name)
        agents.append(agent)
    return agents


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ConfigError on invalid values.
    Logs missing API keys but does not raise — callers check available_providers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    debate = _load_debate(raw.get("debate", {}) or {})
    tools = _load_tools(raw.get("tools", {}) or {})

    prompts_raw = raw.get("prompts", {}) or {}
    prompts = PromptsConfig(
        critique=prompts_raw.get("critique", DEFAULT_CRITIQUE_TEMPLATE),
        synthesis=prompts_raw.get("synthesis", DEFAULT_SYNTHESIS_TEMPLATE),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in (raw.get("models", {}) or {}).items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            temperature=float(model_raw.get("temperature", 0.7)),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s — set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    agents = _load_agents(raw.get("agents", []) or [], models)

    return AppConfig(
        debate=debate,
        models=models,
        agents=agents,
        tools=tools,
        prompts=prompts,
        available_providers=available_providers,
    )
