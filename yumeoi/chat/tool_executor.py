"""
Tool Execution Handler

Maps a tool name to its handler, runs it, and returns a structured result.

Execution never raises: unknown tool names and handler exceptions are
converted into error results so they can be folded into the follow-up
prompt instead of aborting generation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .logging_utils import (
    log_tool_execution_error,
    log_tool_execution_start,
    log_tool_execution_success,
    log_tool_results,
)
from .models import ToolCall, ToolResult
from .tools import DEFAULT_TOOLS, ToolSpec

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Dispatches tool calls over a fixed name → handler table."""

    def __init__(self, tools: Iterable[ToolSpec] = DEFAULT_TOOLS):
        registry: dict[str, ToolSpec] = {}
        for spec in tools:
            if spec.name in registry:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            registry[spec.name] = spec
        self._registry: Mapping[str, ToolSpec] = MappingProxyType(registry)

    @property
    def tools(self) -> list[ToolSpec]:
        """Registered tools in registration order."""
        return list(self._registry.values())

    def has_tool(self, name: str) -> bool:
        return name in self._registry

    def execute(self, tool_call: ToolCall, user_id: str) -> ToolResult:
        """
        Execute a parsed tool call on behalf of a user.

        Args:
            tool_call: The recognised tool invocation
            user_id: Identifier of the requesting user

        Returns:
            ToolResult: success result from the handler, or an error result for
            unknown tools and handler failures
        """
        spec = self._registry.get(tool_call.tool)
        if spec is None:
            logger.warning("Unknown tool called: %s", tool_call.tool)
            return ToolResult.error(f'Tool "{tool_call.tool}" not found.')

        log_tool_execution_start(spec.name, dict(tool_call.arguments))
        try:
            result = spec.handler(MappingProxyType(dict(tool_call.arguments)), user_id)
        except Exception as e:
            error_msg = f"Tool execution error: {e!s}"
            log_tool_execution_error(spec.name, error_msg)
            return ToolResult.error(error_msg)

        if not isinstance(result, ToolResult):
            error_msg = f"Tool execution error: handler returned {type(result).__name__}"
            log_tool_execution_error(spec.name, error_msg)
            return ToolResult.error(error_msg)

        log_tool_execution_success(spec.name, result.message)
        log_tool_results(spec.name, result.data)
        return result
