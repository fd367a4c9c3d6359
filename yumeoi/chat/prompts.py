"""
Prompt Construction

Builds the text prompts sent to the backend:
- the tool-declaring system instructions (Phase 1)
- prior conversation turns rendered as role-tagged blocks
- the follow-up prompt that embeds a tool result (Phase 2)
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from .models import HistoryTurn, ToolCall, ToolResult
from .tools import ToolSpec

DEFAULT_PERSONA = """You are Yumeoi. Your mission is to be a companion who guides young people to live a life with more purpose and joy, helping them overcome procrastination and excessive social media use.
Your personality:
Friendly and cute: Use simple, short, and direct language. Be personal, encouraging, and fun. Use emojis! ✨
Practical: Focus on small, real-world actions that take minimal effort to start.
Accessible: Converse in a short light and easy-to-understand way, two sentences max.
Reliable: Your suggestions are designed to genuinely help, with attention to detail.
Your objective:
To help the user who feels anxious, guilty, and unfocused. You don't judge them; instead, you offer a fun path to building better habits.
How to act:
You have already greeted your friend, and you know each other."""

_TOOL_GRAMMAR = """You have access to functions. If you decide to invoke any of the function(s), you MUST put it in the format of
[func_name1(params_name1=params_value1, params_name2=params_value2...), func_name2(params)]

You SHOULD NOT include any other text in the response if you call a function.
If none of the functions fit, answer the user directly.

Here is a list of functions in JSON format that you can invoke:"""


def build_tool_system_prompt(tools: Iterable[ToolSpec]) -> str:
    """Declare the call grammar and every registered tool."""
    declarations = [{"name": spec.name, "description": spec.description} for spec in tools]
    return f"{_TOOL_GRAMMAR}\n{json.dumps(declarations, indent=2)}\n"


def format_history(history: Sequence[HistoryTurn]) -> str:
    return "\n".join(f"<|{turn.role}|>\n{turn.content}" for turn in history)


def build_full_prompt(system_prompt: str, history: Sequence[HistoryTurn], user_prompt: str) -> str:
    """System instructions, then prior turns, then the new user turn."""
    parts: list[str] = []
    if system_prompt:
        parts.append(system_prompt)
    if history:
        parts.append(format_history(history))
    parts.append(f"<|user|>\n{user_prompt}")
    parts.append("<|assistant|>")
    return "\n".join(parts)


def render_tool_result(result: ToolResult) -> str:
    """Human-readable rendering of a tool result for the follow-up prompt."""
    if not result.is_success:
        return f"Error: {result.message}"

    rendered = result.message
    if result.data is not None:
        rendered += f"\nAdditional data: {json.dumps(result.data, default=str)}"
    return rendered


def build_follow_up_prompt(
    user_prompt: str,
    tool_call: ToolCall,
    tool_result: ToolResult,
    persona: str = DEFAULT_PERSONA,
) -> str:
    return (
        f'The user asked: "{user_prompt}"\n'
        f'You decided to use the tool "{tool_call.tool}".\n'
        f"The result of that tool call is: {render_tool_result(tool_result)}\n"
        f"\n{persona}\n"
    )
