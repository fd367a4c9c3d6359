"""
Tool-Call Parser

Recognises a tool invocation in free-form model output. Several surface
forms are tried strictly in order and the first match wins:

1. Bracketed call list:  [name(a=1, b="x"), other()]   (first call only)
2. Bare single call:     name(a=1, b="x")
3. Embedded JSON object: {"tool": "name", "arguments": {...}}
   (after stripping XML-like tags and Markdown code fences)

Each grammar is a pure function ``text -> ToolCall | None``. Parsing never
raises: a grammar that fails for any reason counts as "no match" and the
next one is tried.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

from .models import ToolCall

logger = logging.getLogger(__name__)

Grammar = Callable[[str], ToolCall | None]

_BRACKET_LIST_RE = re.compile(r"^\s*\[(.*)\]\s*$", re.DOTALL)
_CALL_RE = re.compile(r"([a-zA-Z0-9_]+)\(([^)]*)\)")
_BARE_CALL_RE = re.compile(r"^\s*([a-zA-Z0-9_]+)\(([^)]*)\)\s*$")
_TAG_RE = re.compile(r"<[^>]+>")
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_QUOTES = ('"', "'")


def _strip_quotes(value: str) -> str:
    """Remove one layer of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def parse_call_arguments(args_str: str) -> dict[str, str]:
    """
    Split ``a=1, b="x"`` into a string-valued argument map.

    Pairs without ``=`` or with an empty key are skipped. Values are trimmed
    and lose one layer of surrounding quotes; they are never converted from
    strings.
    """
    args: dict[str, str] = {}
    if not args_str.strip():
        return args

    for pair in args_str.split(","):
        parts = pair.split("=")
        if len(parts) < 2:
            continue
        key = parts[0].strip()
        if not key:
            continue
        args[key] = _strip_quotes(parts[1].strip())
    return args


def parse_bracket_list(text: str) -> ToolCall | None:
    match = _BRACKET_LIST_RE.match(text)
    if not match:
        return None

    call = _CALL_RE.search(match.group(1))
    if not call:
        return None

    logger.info("Parsed tool call from bracket format: %s", call.group(1))
    return ToolCall(tool=call.group(1), arguments=parse_call_arguments(call.group(2)))


def parse_bare_call(text: str) -> ToolCall | None:
    match = _BARE_CALL_RE.match(text)
    if not match:
        return None

    logger.info("Parsed tool call from single function format: %s", match.group(1))
    return ToolCall(tool=match.group(1), arguments=parse_call_arguments(match.group(2)))


def _payload_to_call(payload: Any) -> ToolCall | None:
    if not isinstance(payload, dict):
        return None
    tool = payload.get("tool")
    arguments = payload.get("arguments")
    if not isinstance(tool, str) or not tool or not isinstance(arguments, dict):
        return None
    return ToolCall(tool=tool, arguments=arguments)


def parse_json_object(text: str) -> ToolCall | None:
    cleaned = _TAG_RE.sub("", text.strip())
    cleaned = cleaned.replace("```json", "").replace("```", "")
    logger.debug("Cleaned response text: %s", cleaned)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(cleaned)
        if not match:
            return None
        try:
            payload = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.debug("JSON parse error in substring: %s", e)
            return None
        call = _payload_to_call(payload)
        if call:
            logger.info("Parsed tool call from substring: %s", call.tool)
        return call

    call = _payload_to_call(payload)
    if call:
        logger.info("Parsed tool call: %s", call.tool)
    return call


DEFAULT_GRAMMARS: tuple[Grammar, ...] = (
    parse_bracket_list,
    parse_bare_call,
    parse_json_object,
)


class ToolCallParser:
    """Tries an ordered list of grammars and returns the first recognised call."""

    def __init__(self, grammars: Sequence[Grammar] = DEFAULT_GRAMMARS):
        self.grammars = tuple(grammars)

    def parse(self, response_text: str) -> ToolCall | None:
        logger.debug("Attempting to parse tool call from response")

        if not isinstance(response_text, str):
            return None

        for grammar in self.grammars:
            try:
                call = grammar(response_text)
            except Exception as e:
                logger.warning(
                    "Tool-call grammar %s failed: %s", getattr(grammar, "__name__", grammar), e
                )
                continue
            if call is not None:
                return call

        logger.info("No valid tool call found in response")
        return None


def parse_tool_call(response_text: str) -> ToolCall | None:
    """Parse with the default grammar order."""
    return _default_parser.parse(response_text)


_default_parser = ToolCallParser()
