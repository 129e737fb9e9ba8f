"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AgentConfig, AppConfig, DebateConfig, ModelConfig, PromptsConfig, ToolsConfig
from src.agent import Agent
from src.models import ModelResponse, Round, TranscriptEntry
from src.providers.base import AIProvider
from src.tools.registry import Tool, ToolError, ToolRegistry


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        base_url=None,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        critique="CRITIQUE. Question: {question}\n\nOthers said:\n{responses}",
        synthesis="SYNTHESIS. Question: {question}\n\nTranscript:\n{responses}",
    )


@pytest.fixture
def sample_app_config(tmp_path: Path, sample_prompts_config: PromptsConfig) -> AppConfig:
    model_cfg = ModelConfig(
        name="anthropic",
        sdk="anthropic",
        model="claude-3-haiku-20240307",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
        max_tokens=4096,
    )
    return AppConfig(
        debate=DebateConfig(max_rounds=2, convergence_threshold=0.7, output_dir=tmp_path / "output"),
        models={"anthropic": model_cfg},
        agents=[
            AgentConfig(name="Claude", role="assistant", model="anthropic",
                        system_prompt="Be helpful.", tools=["echo"]),
            AgentConfig(name="Plain", role="assistant", model="anthropic",
                        system_prompt="Be brief.", use_tools=False),
        ],
        tools=ToolsConfig(local_files_dir=tmp_path / "files"),
        prompts=sample_prompts_config,
        available_providers={"anthropic"},
    )


@pytest.fixture
def sample_entries() -> list[TranscriptEntry]:
    return [
        TranscriptEntry(agent="alpha", content="Use YAML for human-edited config.", round_number=0),
        TranscriptEntry(agent="beta", content="Use JSON for machine interchange.", round_number=0),
    ]


@pytest.fixture
def sample_round(sample_entries: list[TranscriptEntry]) -> Round:
    return Round(number=0, entries=tuple(sample_entries))


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because generate is defined in the class body below.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=ModelResponse(
                provider=provider_name,
                model="mock-model",
                content=response_content,
                latency_sec=0.1,
                token_count=10,
            )
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return ModelResponse(
            provider=self._name,
            model="mock-model",
            content=self._response_content,
            latency_sec=0.1,
            token_count=10,
        )


def make_response(content: str, provider: str = "mock") -> ModelResponse:
    return ModelResponse(provider=provider, model="mock-model", content=content, latency_sec=0.1, token_count=5)


def make_agent(name: str, content: str = "Mock response", tools: tuple[Tool, ...] = (),
               prompts: PromptsConfig | None = None) -> Agent:
    return Agent(
        name=name,
        role="tester",
        system_prompt=f"You are {name}.",
        provider=MockProvider(name, content),
        tools=tools,
        prompts=prompts,
    )


async def _echo(argument: str) -> str:
    return argument


async def _broken(argument: str) -> str:
    raise ToolError(f"cannot handle {argument}")


@pytest.fixture
def echo_tool() -> Tool:
    return Tool(name="echo", description="Returns its argument verbatim.", func=_echo)


@pytest.fixture
def broken_tool() -> Tool:
    return Tool(name="broken", description="Always fails.", func=_broken)


@pytest.fixture
def registry(echo_tool: Tool, broken_tool: Tool) -> ToolRegistry:
    return ToolRegistry([echo_tool, broken_tool])


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
