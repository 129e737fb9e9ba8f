"""Tool-call markers embedded in model output: manifest, parsing and substitution.

A model invokes a tool by writing

    [CAPABILITY_CALL: <tool name>] <argument> [/CAPABILITY_CALL]

in its reply. resolve_tool_calls() replaces every such marker with the tool's
output (or an error annotation) and then runs a loose fallback pass for models
that describe tool use in prose ("using web_search with <query>") instead of
emitting the marker. The fallback is a heuristic: it can fire on ordinary
prose that mentions a tool name, and it misses phrasings it does not expect.
"""

import logging
import re
from collections.abc import Sequence

from src.tools.registry import Tool

logger = logging.getLogger(__name__)

MARKER_KEYWORD = "CAPABILITY_CALL"

_MARKER_RE = re.compile(
    r"\[CAPABILITY_CALL:\s*(?P<name>[^\]]+?)\s*\](?P<argument>[^\[]*)\[/CAPABILITY_CALL\]",
    re.IGNORECASE,
)

# Lines holding any of these were already resolved (or are a malformed marker)
_RESOLVED_TOKENS = ("[tool result", "[tool error", MARKER_KEYWORD.lower())

# (start, end) of text substituted by a tool call
Span = tuple[int, int]


def render_tool_manifest(tools: Sequence[Tool]) -> str:
    """Describe the bound tools and the exact call syntax for the system prompt."""
    listing = "\n".join(f"- {tool.name}: {tool.description}" for tool in tools)
    return (
        "You have access to the following tools:\n"
        f"{listing}\n\n"
        "To use a tool, write the call exactly in this format:\n"
        f"[{MARKER_KEYWORD}: tool_name] argument [/{MARKER_KEYWORD}]\n"
        "Each call is replaced with the tool's output before your response is read. "
        "If you need information that a tool provides and you do not write the call "
        "in exactly this format, you will not receive that information."
    )


async def _invoke(tool: Tool, argument: str) -> str:
    try:
        result = await tool.invoke(argument)
    except Exception as exc:
        logger.warning("Tool %s failed for argument %r: %s", tool.name, argument, exc)
        return f"[Tool Error from {tool.name}]: {exc}"
    logger.debug("Tool %s returned %d chars", tool.name, len(result))
    return f"[Tool Result from {tool.name}]: {result}"


async def _resolve_markers(text: str, tools_by_name: dict[str, Tool]) -> tuple[str, list[Span]]:
    """Replace every marker; also return the spans of the substituted text."""
    parts: list[str] = []
    spans: list[Span] = []
    out_len = 0
    last = 0
    for match in _MARKER_RE.finditer(text):
        parts.append(text[last:match.start()])
        out_len += match.start() - last
        name = match.group("name").strip()
        tool = tools_by_name.get(name)
        if tool is None:
            logger.warning("Model requested unknown tool %r", name)
            replacement = f"[Tool Error]: Unknown tool '{name}'"
        else:
            replacement = await _invoke(tool, match.group("argument").strip())
        parts.append(replacement)
        spans.append((out_len, out_len + len(replacement)))
        out_len += len(replacement)
        last = match.end()
    parts.append(text[last:])
    return "".join(parts), spans


def _line_around(text: str, start: int, end: int) -> str:
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    return text[line_start:] if line_end == -1 else text[line_start:line_end]


def _is_resolved(line: str) -> bool:
    lowered = line.lower()
    return any(token in lowered for token in _RESOLVED_TOKENS)


def _overlaps(start: int, end: int, spans: Sequence[Span]) -> bool:
    return any(start < span_end and span_start < end for span_start, span_end in spans)


async def _resolve_prose(text: str, tool: Tool, protected: Sequence[Span]) -> tuple[str, list[Span]]:
    """Resolve narrated calls to tool outside protected spans.

    Returns the new text and the protected spans shifted into it, plus the
    spans this pass substituted.
    """
    pattern = re.compile(
        rf"(?:\busing\s+)?\b{re.escape(tool.name)}\b(?:\s+with)?\s+(?P<argument>[^.\n]+)",
        re.IGNORECASE,
    )
    parts: list[str] = []
    edits: list[tuple[int, int]] = []  # (end in input, length delta)
    spans: list[Span] = []
    shift = 0
    last = 0
    for match in pattern.finditer(text):
        argument = match.group("argument").strip()
        if (
            not argument
            or _overlaps(match.start(), match.end(), protected)
            or _is_resolved(_line_around(text, match.start(), match.end()))
        ):
            continue
        replacement = await _invoke(tool, argument)
        parts.append(text[last:match.start()])
        parts.append(replacement)
        spans.append((match.start() + shift, match.start() + shift + len(replacement)))
        delta = len(replacement) - (match.end() - match.start())
        edits.append((match.end(), delta))
        shift += delta
        last = match.end()
    parts.append(text[last:])

    for start, end in protected:
        offset = sum(delta for edit_end, delta in edits if edit_end <= start)
        spans.append((start + offset, end + offset))
    return "".join(parts), spans


async def resolve_tool_calls(text: str, tools: Sequence[Tool]) -> str:
    """Substitute tool output for every tool call found in text.

    Calls run one at a time, left to right. A failing tool or an unknown tool
    yields an inline error annotation and never aborts the remaining
    calls. Text that holds only annotations comes back unchanged, and text a
    tool returned is never scanned for further calls.
    """
    tools_by_name = {tool.name: tool for tool in tools}
    resolved, protected = await _resolve_markers(text, tools_by_name)
    for tool in tools:
        resolved, protected = await _resolve_prose(resolved, tool, protected)
    return resolved
