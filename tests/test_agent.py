"""Tests for src/agent.py."""

from unittest.mock import AsyncMock

import pytest

from src.agent import Agent, format_entries
from src.models import TranscriptEntry
from src.providers.base import ProviderError
from tests.conftest import MockProvider, make_response


def _sent(provider: MockProvider) -> tuple[str, str]:
    """(system_prompt, prompt) of the last generate call."""
    args = provider.generate.call_args.args
    return args[0], args[1]


def test_format_entries(sample_entries):
    assert format_entries(sample_entries) == (
        "alpha: Use YAML for human-edited config.\n\nbeta: Use JSON for machine interchange."
    )


async def test_tool_free_agent_returns_raw_text():
    provider = MockProvider("solo", "pong [CAPABILITY_CALL: echo] x [/CAPABILITY_CALL]")
    agent = Agent("solo", "tester", "You answer.", provider)
    result = await agent.generate_response("ping")
    assert result == "pong [CAPABILITY_CALL: echo] x [/CAPABILITY_CALL]"
    system_prompt, prompt = _sent(provider)
    assert system_prompt == "You answer."
    assert prompt == "ping"


async def test_tool_bound_agent_resolves_calls(echo_tool):
    provider = MockProvider("tooled", "see [CAPABILITY_CALL: echo] hi [/CAPABILITY_CALL]")
    agent = Agent("tooled", "tester", "You answer.", provider, tools=[echo_tool])
    assert await agent.generate_response("question") == "see [Tool Result from echo]: hi"


async def test_tool_manifest_appended_to_persona(echo_tool):
    provider = MockProvider("tooled", "ok")
    agent = Agent("tooled", "tester", "You answer.", provider, tools=[echo_tool])
    await agent.generate_response("question")
    system_prompt, _ = _sent(provider)
    assert system_prompt.startswith("You answer.\n\n")
    assert "- echo: Returns its argument verbatim." in system_prompt
    assert "[CAPABILITY_CALL: tool_name]" in system_prompt


async def test_context_prefixes_prompt(sample_entries):
    provider = MockProvider("ctx", "ok")
    agent = Agent("ctx", "tester", "p", provider)
    await agent.generate_response("What now?", context=sample_entries)
    _, prompt = _sent(provider)
    assert prompt == (
        "Previous discussion:\n"
        "alpha: Use YAML for human-edited config.\n\n"
        "beta: Use JSON for machine interchange.\n\n"
        "Now respond to: What now?"
    )


async def test_empty_context_uses_raw_prompt():
    provider = MockProvider("ctx", "ok")
    agent = Agent("ctx", "tester", "p", provider)
    await agent.generate_response("raw", context=[])
    assert _sent(provider)[1] == "raw"


async def test_critique_excludes_own_entries(sample_entries, sample_prompts_config):
    provider = MockProvider("alpha", "critique")
    agent = Agent("alpha", "tester", "p", provider, prompts=sample_prompts_config)
    assert await agent.critique(sample_entries, "YAML or JSON?") == "critique"
    _, prompt = _sent(provider)
    assert prompt.startswith("CRITIQUE. Question: YAML or JSON?")
    assert "beta: Use JSON for machine interchange." in prompt
    assert "alpha:" not in prompt


async def test_default_critique_template_asks_for_four_points(sample_entries):
    provider = MockProvider("alpha", "critique")
    agent = Agent("alpha", "tester", "p", provider)
    await agent.critique(sample_entries, "YAML or JSON?")
    _, prompt = _sent(provider)
    assert "Original question: YAML or JSON?" in prompt
    for point in ("agree with", "disagree with", "missing", "alternative or refined approach"):
        assert point in prompt


async def test_synthesize_includes_all_entries(sample_entries, sample_prompts_config):
    provider = MockProvider("alpha", "final")
    agent = Agent("alpha", "tester", "p", provider, prompts=sample_prompts_config)
    assert await agent.synthesize(sample_entries, "YAML or JSON?") == "final"
    _, prompt = _sent(provider)
    assert prompt.startswith("SYNTHESIS. Question: YAML or JSON?")
    assert "alpha: Use YAML for human-edited config." in prompt
    assert "beta: Use JSON for machine interchange." in prompt


async def test_default_synthesis_template_is_decisive(sample_entries):
    provider = MockProvider("alpha", "final")
    agent = Agent("alpha", "tester", "p", provider)
    await agent.synthesize(sample_entries, "YAML or JSON?")
    _, prompt = _sent(provider)
    assert "All agents' responses from the debate:" in prompt
    assert "Be decisive and clear" in prompt


async def test_tools_in_synthesis_output_are_resolved(echo_tool):
    provider = MockProvider("alpha", "final [CAPABILITY_CALL: echo] fact [/CAPABILITY_CALL]")
    agent = Agent("alpha", "tester", "p", provider, tools=[echo_tool])
    entries = [TranscriptEntry(agent="beta", content="x", round_number=0)]
    assert await agent.synthesize(entries, "q") == "final [Tool Result from echo]: fact"


async def test_provider_error_propagates():
    provider = MockProvider("flaky")
    provider.generate = AsyncMock(side_effect=ProviderError("flaky", "API error"))
    agent = Agent("flaky", "tester", "p", provider)
    with pytest.raises(ProviderError, match="API error"):
        await agent.generate_response("q")


def test_tool_set_is_fixed(echo_tool):
    tools = [echo_tool]
    agent = Agent("a", "r", "p", MockProvider("a"), tools=tools)
    tools.clear()
    assert agent.tool_names == ["echo"]
    assert isinstance(agent.tools, tuple)


async def test_response_content_is_taken_from_provider():
    provider = MockProvider("a")
    provider.generate = AsyncMock(return_value=make_response("from model", provider="a"))
    agent = Agent("a", "r", "p", provider)
    assert await agent.generate_response("q") == "from model"
