"""
Chat Service Module

Two-phase generation pipeline: prompt building, tool-call parsing and
dispatch, backend streaming, and conversation persistence.
"""

from .conversation_manager import ConversationManager
from .generation_orchestrator import GenerationOrchestrator, collect_generation
from .models import (
    GenerationMetadata,
    HistoryTurn,
    PromptContext,
    StreamChunk,
    ToolCall,
    ToolResult,
    UsageStats,
)
from .tool_executor import ToolExecutor
from .tool_parser import ToolCallParser, parse_tool_call

__all__ = [
    "ConversationManager",
    "GenerationMetadata",
    "GenerationOrchestrator",
    "HistoryTurn",
    "PromptContext",
    "StreamChunk",
    "ToolCall",
    "ToolCallParser",
    "ToolExecutor",
    "ToolResult",
    "UsageStats",
    "collect_generation",
    "parse_tool_call",
]
