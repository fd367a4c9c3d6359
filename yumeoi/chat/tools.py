"""
Habit Tools

Handlers the model may invoke through a tool call. Every handler reads only
its arguments and the requesting user id and returns a ToolResult; none of
them mutates shared state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from .models import ToolResult

ToolHandler = Callable[[Mapping[str, Any], str], ToolResult]


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: its name, what it is for, and how to run it."""

    name: str
    description: str
    handler: ToolHandler


def _today() -> date:
    return datetime.now(UTC).date()


def handle_weekly_habit_summary(arguments: Mapping[str, Any], user_id: str) -> ToolResult:
    today = _today()
    week_start = today - timedelta(days=today.weekday())
    summary = {
        "userId": user_id,
        "habits": [
            {"name": "Reading", "count": 5},
            {"name": "Exercise", "count": 3},
        ],
        "week": week_start.isoformat(),
    }
    return ToolResult.success("Weekly habit summary retrieved", summary)


def handle_daily_habit_summary(arguments: Mapping[str, Any], user_id: str) -> ToolResult:
    requested = arguments.get("date")
    # Raises ValueError on a malformed date; the executor turns it into an error result
    day = date.fromisoformat(str(requested)) if requested else _today()
    summary = {
        "userId": user_id,
        "habits": [
            {"name": "Reading", "done": True},
            {"name": "Exercise", "done": False},
        ],
        "date": day.isoformat(),
    }
    return ToolResult.success("Daily habit summary retrieved", summary)


def answer_normally(arguments: Mapping[str, Any], user_id: str) -> ToolResult:
    response_data = {
        "userId": user_id,
        "message": "This is a normal response without tool usage.",
    }
    return ToolResult.success("Normal response generated", response_data)


DEFAULT_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="handleWeeklyHabitSummary",
        description="retrieve user's weekly habit summary",
        handler=handle_weekly_habit_summary,
    ),
    ToolSpec(
        name="handleDailyHabitSummary",
        description="retrieve user's daily habit summary (optional date=YYYY-MM-DD)",
        handler=handle_daily_habit_summary,
    ),
    ToolSpec(
        name="answerNormally",
        description="answer the user normally without using any tools",
        handler=answer_normally,
    ),
)
