"""Unit tests for src/healthcheck.py — no real API calls."""

import asyncio
from unittest.mock import AsyncMock

import src.healthcheck as hc
from src.healthcheck import run_health_checks
from src.providers.base import ProviderError
from tests.conftest import MockProvider, make_response


async def test_all_providers_pass():
    """All providers succeed -> all marked ok, no errors."""
    providers = {"Claude": MockProvider("anthropic"), "Gemini": MockProvider("google")}
    providers["Claude"].generate = AsyncMock(return_value=make_response("OK", "anthropic"))
    providers["Gemini"].generate = AsyncMock(return_value=make_response("OK", "google"))

    results = await run_health_checks(providers)

    assert results["Claude"] == (True, "")
    assert results["Gemini"] == (True, "")


async def test_ping_sends_system_and_user_prompt():
    provider = MockProvider("openai")
    await run_health_checks({"GPT": provider})
    system_prompt, prompt = provider.generate.call_args.args
    assert system_prompt
    assert "OK" in prompt


async def test_one_provider_fails():
    """A provider that raises returns ok=False with the error message."""
    providers = {"Claude": MockProvider("anthropic"), "Grok": MockProvider("grok")}
    providers["Grok"].generate = AsyncMock(side_effect=ProviderError("grok", "403 Forbidden"))

    results = await run_health_checks(providers)

    assert results["Claude"] == (True, "")
    ok, err = results["Grok"]
    assert ok is False
    assert "403" in err


async def test_all_providers_fail():
    """All fail -> all marked False."""
    providers = {"GPT": MockProvider("openai"), "Gemini": MockProvider("google")}
    for name, p in providers.items():
        p.generate = AsyncMock(side_effect=Exception(f"{name} down"))

    results = await run_health_checks(providers)

    for name in providers:
        ok, err = results[name]
        assert ok is False
        assert name in err


async def test_empty_providers():
    """Empty provider dict returns empty results."""
    assert await run_health_checks({}) == {}


async def test_timeout_counts_as_failure(monkeypatch):
    """A provider that hangs past the timeout is marked as failed."""
    providers = {"slow": MockProvider("slow")}

    async def hang(*args, **kwargs):
        await asyncio.sleep(9999)

    providers["slow"].generate = AsyncMock(side_effect=hang)
    monkeypatch.setattr(hc, "_TIMEOUT_SEC", 0.05)

    results = await run_health_checks(providers)

    ok, err = results["slow"]
    assert ok is False
    assert err
