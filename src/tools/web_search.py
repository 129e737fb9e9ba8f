"""Web search tool backed by the Tavily search API."""

import asyncio
import logging
import os

import requests

from src.tools.registry import Tool, ToolError

logger = logging.getLogger(__name__)

WEB_SEARCH = "web_search"

_TAVILY_URL = "https://api.tavily.com/search"


class WebSearchTool:
    """Callable that runs one Tavily query per invocation."""

    def __init__(self, api_key_env: str = "TAVILY_API_KEY", max_results: int = 5, timeout_sec: int = 30) -> None:
        self._api_key_env = api_key_env
        self._max_results = max_results
        self._timeout_sec = timeout_sec

    def _search(self, query: str) -> list[dict]:
        api_key = os.environ.get(self._api_key_env, "").strip()
        if not api_key:
            raise ToolError(f"Web search unavailable: {self._api_key_env} is not set")

        payload = {
            "api_key": api_key,
            "query": query,
            "max_results": self._max_results,
            "search_depth": "basic",
        }
        try:
            r = requests.post(_TAVILY_URL, json=payload, timeout=self._timeout_sec)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise ToolError(f"Web search request failed: {exc}") from exc
        return r.json().get("results", []) or []

    async def __call__(self, query: str) -> str:
        query = query.strip()
        if not query:
            raise ToolError("Empty search query")

        logger.info("Web search: %s", query)
        results = await asyncio.to_thread(self._search, query)

        if not results:
            return f'Web Search Result for "{query}": no results found.'

        lines = [f'Web Search Result for "{query}":']
        for i, hit in enumerate(results, start=1):
            title = hit.get("title", "").strip() or "(untitled)"
            lines.append(f"{i}. {title} - {hit.get('url', '')}")
            snippet = (hit.get("content") or "").strip()
            if snippet:
                lines.append(f"   {snippet}")
        return "\n".join(lines)


def build_web_search_tool(api_key_env: str = "TAVILY_API_KEY", max_results: int = 5, timeout_sec: int = 30) -> Tool:
    return Tool(
        name=WEB_SEARCH,
        description=(
            "Search the internet for information. Useful for finding current information, "
            "research, and real-time data. The argument is the search query."
        ),
        func=WebSearchTool(api_key_env, max_results, timeout_sec),
    )
