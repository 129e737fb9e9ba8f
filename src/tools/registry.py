"""Named tools an agent may invoke, and the registry that resolves them."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """Raised by a tool when it cannot produce a result."""


class UnknownToolError(KeyError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str) -> None:
        self.tool_name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown tool: {self.tool_name}"


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    func: Callable[[str], Awaitable[str]]

    async def invoke(self, argument: str) -> str:
        return await self.func(argument)


class ToolRegistry:
    """Explicit tool table, built once and handed to whatever builds agents."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug("Registered tool %s", tool.name)

    def resolve(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def create_bound_set(self, names: Sequence[str] | None = None) -> tuple[Tool, ...]:
        """Resolve the tools an agent is allowed to use.

        No names (None or empty) means full access: every registered tool, in
        registration order. Otherwise each name is resolved in order and the
        first unknown name raises UnknownToolError; no partial set is returned.
        """
        if not names:
            return tuple(self._tools.values())
        return tuple(self.resolve(name) for name in names)
