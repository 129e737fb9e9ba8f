"""Pre-debate reachability check for each agent's model binding."""

import asyncio
import logging

from src.providers.base import AIProvider

logger = logging.getLogger(__name__)

_PING_SYSTEM_PROMPT = "You are a connectivity check."
_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


async def _ping(agent_name: str, provider: AIProvider) -> tuple[str, bool, str]:
    try:
        await asyncio.wait_for(provider.generate(_PING_SYSTEM_PROMPT, _PING_PROMPT), timeout=_TIMEOUT_SEC)
    except Exception as exc:
        logger.debug("Agent %s failed its reachability check: %r", agent_name, exc)
        return agent_name, False, str(exc) or type(exc).__name__
    return agent_name, True, ""


async def run_health_checks(providers: dict[str, AIProvider]) -> dict[str, tuple[bool, str]]:
    """Ping every agent's model concurrently.

    Args:
        providers: Model bindings keyed by agent name.

    Returns:
        agent name -> (reachable, error text); the error text is "" on success.
    """
    outcomes = await asyncio.gather(*(_ping(name, p) for name, p in providers.items()))
    return {name: (ok, error) for name, ok, error in outcomes}
