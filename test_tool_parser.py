"""Tests for tool-call recognition."""

import json

import pytest

from yumeoi.chat.models import ToolCall
from yumeoi.chat.tool_parser import (
    ToolCallParser,
    parse_bare_call,
    parse_bracket_list,
    parse_call_arguments,
    parse_json_object,
    parse_tool_call,
)


def test_bracket_list_without_arguments():
    assert parse_tool_call("[getWeeklyHabitSummary()]") == ToolCall(
        tool="getWeeklyHabitSummary", arguments={}
    )


def test_bracket_list_returns_only_first_call():
    call = parse_tool_call('[first(a=1), second(b="2")]')

    assert call == ToolCall(tool="first", arguments={"a": "1"})


def test_bracket_list_strips_one_layer_of_quotes():
    call = parse_tool_call("""  [handleDailyHabitSummary(date="2024-05-01", note='"hi"')]  """)

    assert call.arguments == {"date": "2024-05-01", "note": '"hi"'}


def test_bare_call_keeps_values_as_strings():
    call = parse_tool_call("handleDailyHabitSummary(count=3, flag=true)")

    assert call == ToolCall(
        tool="handleDailyHabitSummary", arguments={"count": "3", "flag": "true"}
    )


def test_argument_pairs_without_key_or_equals_are_skipped():
    assert parse_call_arguments('a=1, junk, =2, b = "x" ') == {"a": "1", "b": "x"}


def test_bare_call_must_be_whole_text():
    assert parse_bare_call("Sure! handleWeeklyHabitSummary()") is None
    assert parse_tool_call("Sure! I will call handleWeeklyHabitSummary() now.") is None


def test_json_object_preserves_native_types():
    text = json.dumps({"tool": "handleDailyHabitSummary", "arguments": {"days": 3, "ok": True}})

    assert parse_tool_call(text) == ToolCall(
        tool="handleDailyHabitSummary", arguments={"days": 3, "ok": True}
    )


def test_json_object_inside_code_fence_and_tags():
    text = '<tool_call>\n```json\n{"tool": "answerNormally", "arguments": {}}\n```\n</tool_call>'

    assert parse_tool_call(text) == ToolCall(tool="answerNormally", arguments={})


def test_json_object_embedded_in_prose():
    text = 'Let me check. {"tool": "handleWeeklyHabitSummary", "arguments": {"x": "y"}} Done.'

    assert parse_json_object(text) == ToolCall(
        tool="handleWeeklyHabitSummary", arguments={"x": "y"}
    )


@pytest.mark.parametrize(
    "text",
    [
        '{"tool": "answerNormally"}',
        '{"arguments": {}}',
        '{"tool": "", "arguments": {}}',
        '{"tool": "answerNormally", "arguments": null}',
        '{"tool": "answerNormally", "arguments": [1, 2]}',
        '{"tool": 5, "arguments": {}}',
    ],
)
def test_json_object_requires_tool_and_arguments(text):
    assert parse_tool_call(text) is None


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "Hello there, how are you today?",
        "[not a call]",
        "{broken json",
        "[]",
        "()",
        "}{",
    ],
)
def test_plain_or_malformed_text_is_not_a_call(text):
    assert parse_tool_call(text) is None


def test_non_string_input_returns_none():
    assert ToolCallParser().parse(None) is None


def test_grammar_order_first_match_wins():
    parser = ToolCallParser(
        [
            lambda text: ToolCall(tool="first", arguments={}),
            lambda text: ToolCall(tool="second", arguments={}),
        ]
    )

    assert parser.parse("[answerNormally()]").tool == "first"
    assert parse_bracket_list("[answerNormally()]") == parse_tool_call("[answerNormally()]")


def test_failing_grammar_falls_through_to_next():
    def broken(text):
        raise RuntimeError("boom")

    def fallback(text):
        return ToolCall(tool="fallback", arguments={})

    parser = ToolCallParser([broken, fallback])

    assert parser.parse("anything") == ToolCall(tool="fallback", arguments={})


@pytest.mark.parametrize(
    "render",
    [
        lambda name, args: "[" + name + "(" + ", ".join(f"{k}={v}" for k, v in args.items()) + ")]",
        lambda name, args: name + "(" + ", ".join(f'{k}="{v}"' for k, v in args.items()) + ")",
        lambda name, args: json.dumps({"tool": name, "arguments": args}),
    ],
    ids=["bracket", "bare", "json"],
)
def test_each_grammar_recovers_rendered_call(render):
    call = ToolCall(tool="handleDailyHabitSummary", arguments={"date": "2024-05-01", "mood": "calm"})

    assert parse_tool_call(render(call.tool, call.arguments)) == call
