"""Tests for tool dispatch, the habit tools, and prompt rendering."""

from datetime import date

import pytest

from yumeoi.chat.models import HistoryTurn, ToolCall, ToolResult
from yumeoi.chat.prompts import (
    build_follow_up_prompt,
    build_full_prompt,
    build_tool_system_prompt,
    render_tool_result,
)
from yumeoi.chat.tool_executor import ToolExecutor
from yumeoi.chat.tools import DEFAULT_TOOLS, ToolSpec


@pytest.fixture
def executor():
    return ToolExecutor()


def test_unknown_tool_returns_error(executor):
    result = executor.execute(ToolCall(tool="X", arguments={}), "user-1")

    assert result == ToolResult(status="error", message='Tool "X" not found.')


def test_weekly_summary(executor):
    result = executor.execute(ToolCall(tool="handleWeeklyHabitSummary", arguments={}), "user-1")

    assert result.is_success
    assert result.message == "Weekly habit summary retrieved"
    assert result.data["userId"] == "user-1"
    assert {h["name"] for h in result.data["habits"]} == {"Reading", "Exercise"}
    assert date.fromisoformat(result.data["week"]).weekday() == 0


def test_daily_summary_with_date(executor):
    call = ToolCall(tool="handleDailyHabitSummary", arguments={"date": "2024-05-01"})

    result = executor.execute(call, "user-2")

    assert result.is_success
    assert result.message == "Daily habit summary retrieved"
    assert result.data["date"] == "2024-05-01"


def test_daily_summary_bad_date_becomes_error_result(executor):
    call = ToolCall(tool="handleDailyHabitSummary", arguments={"date": "yesterday"})

    result = executor.execute(call, "user-2")

    assert result.status == "error"
    assert result.message.startswith("Tool execution error: ")
    assert result.data is None


def test_answer_normally(executor):
    result = executor.execute(ToolCall(tool="answerNormally", arguments={}), "u")

    assert result.message == "Normal response generated"
    assert result.data["userId"] == "u"


def test_handler_exception_is_contained():
    def explode(arguments, user_id):
        raise RuntimeError("database offline")

    executor = ToolExecutor([ToolSpec("explode", "always fails", explode)])

    result = executor.execute(ToolCall(tool="explode", arguments={}), "u")

    assert result == ToolResult(status="error", message="Tool execution error: database offline")


def test_handler_cannot_mutate_arguments():
    def mutate(arguments, user_id):
        arguments["injected"] = True
        return ToolResult.success("done")

    executor = ToolExecutor([ToolSpec("mutate", "tries to mutate input", mutate)])
    call = ToolCall(tool="mutate", arguments={"a": "1"})

    result = executor.execute(call, "u")

    assert result.status == "error"
    assert call.arguments == {"a": "1"}


def test_handler_returning_wrong_type_is_error():
    executor = ToolExecutor([ToolSpec("bad", "returns a dict", lambda arguments, user_id: {})])

    result = executor.execute(ToolCall(tool="bad", arguments={}), "u")

    assert result.status == "error"


def test_success_without_data_omits_data():
    assert ToolResult.success("ok").data is None


@pytest.mark.parametrize("payload", [[], {}, 0, "", False])
def test_success_keeps_empty_or_falsy_data(payload):
    result = ToolResult.success("ok", payload)

    assert result.data == payload
    assert type(result.data) is type(payload)


def test_empty_data_is_rendered_in_follow_up():
    prompt = build_follow_up_prompt(
        "what did I do today?",
        ToolCall(tool="handleDailyHabitSummary", arguments={}),
        ToolResult.success("No habits logged", []),
    )

    assert "No habits logged\nAdditional data: []" in prompt


def test_duplicate_tool_names_rejected():
    spec = DEFAULT_TOOLS[0]

    with pytest.raises(ValueError, match="Duplicate tool name"):
        ToolExecutor([spec, spec])


def test_system_prompt_lists_every_registered_tool(executor):
    prompt = build_tool_system_prompt(executor.tools)

    for spec in DEFAULT_TOOLS:
        assert spec.name in prompt
        assert spec.description in prompt


def test_full_prompt_orders_system_history_and_user_turn():
    history = [HistoryTurn(role="user", content="hi"), HistoryTurn(role="assistant", content="hey")]

    prompt = build_full_prompt("SYSTEM", history, "how am I doing?")

    assert prompt == (
        "SYSTEM\n<|user|>\nhi\n<|assistant|>\nhey\n<|user|>\nhow am I doing?\n<|assistant|>"
    )


def test_render_tool_result_success_with_data():
    rendered = render_tool_result(ToolResult.success("Fetched", {"count": 2}))

    assert rendered == 'Fetched\nAdditional data: {"count": 2}'


def test_render_tool_result_error():
    assert render_tool_result(ToolResult.error("nope")) == "Error: nope"


def test_follow_up_prompt_embeds_prompt_tool_and_result():
    prompt = build_follow_up_prompt(
        "how was my week?",
        ToolCall(tool="handleWeeklyHabitSummary", arguments={}),
        ToolResult.error('Tool "x" not found.'),
        persona="PERSONA",
    )

    assert '"how was my week?"' in prompt
    assert '"handleWeeklyHabitSummary"' in prompt
    assert 'Error: Tool "x" not found.' in prompt
    assert prompt.rstrip().endswith("PERSONA")
