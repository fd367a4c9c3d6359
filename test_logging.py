"""Tests for feature-gated logging and logger configuration."""

import logging

import pytest

from yumeoi.chat.logging_utils import (
    clear_module_features,
    log_http_request,
    log_llm_reply,
    log_tool_results,
    set_module_features,
    should_log_feature,
)
from yumeoi.main import _configure_advanced_logging


@pytest.fixture(autouse=True)
def reset_logging_state():
    names = ("", "yumeoi.chat", "yumeoi.clients", "yumeoi.history")
    levels = {name: logging.getLogger(name).level for name in names}
    clear_module_features()
    yield
    clear_module_features()
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_features_default_to_disabled():
    assert not should_log_feature("chat", "llm_replies")


def test_configure_sets_levels_and_features():
    _configure_advanced_logging(
        {
            "level": "WARNING",
            "modules": {
                "chat": {"level": "DEBUG", "enable_features": {"llm_replies": True}},
                "clients": {"level": "ERROR", "enable_features": {"http_requests": False}},
            },
        }
    )

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("yumeoi.chat").level == logging.DEBUG
    assert logging.getLogger("yumeoi.clients").level == logging.ERROR
    assert should_log_feature("chat", "llm_replies")
    assert not should_log_feature("clients", "http_requests")


def test_llm_reply_logged_only_when_enabled(caplog):
    with caplog.at_level(logging.INFO, logger="yumeoi.chat"):
        log_llm_reply("secret reply", "initial response", "phi3", {})
        assert "secret reply" not in caplog.text

        set_module_features("chat", {"llm_replies": True})
        log_llm_reply("visible reply", "initial response", "phi3", {})

    assert "visible reply" in caplog.text


def test_llm_reply_truncated_to_configured_length(caplog):
    set_module_features("chat", {"llm_replies": True})

    with caplog.at_level(logging.INFO, logger="yumeoi.chat"):
        log_llm_reply("x" * 50, "ctx", "phi3", {"logging": {"llm_reply": 10}})

    assert "x" * 10 + "..." in caplog.text
    assert "x" * 11 not in caplog.text


def test_tool_results_and_http_requests_gated(caplog):
    with caplog.at_level(logging.INFO):
        log_tool_results("answerNormally", {"k": "v"})
        log_http_request("POST", "/api/generate", 200, 12.5)
        assert caplog.text == ""

        set_module_features("chat", {"tool_results": True})
        set_module_features("clients", {"http_requests": True})
        log_tool_results("answerNormally", {"k": "v"})
        log_http_request("POST", "/api/generate", 200, 12.5)

    assert "results: {'k': 'v'}" in caplog.text
    assert "HTTP POST /api/generate | Status: 200 | Duration: 12.50ms" in caplog.text
