"""
Enhanced Chat Logging Utilities

Shared logging functionality with feature control and truncation.
Verbose content logging (model replies, tool payloads, raw stream records)
is gated by per-module feature flags set from the logging configuration.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

logger = logging.getLogger(__name__)

_module_features: dict[str, dict[str, bool]] = {}


def set_module_features(module: str, features: dict[str, bool]) -> None:
    """Store feature flags for a logging module (e.g. "chat", "clients")."""
    _module_features[module] = dict(features)


def clear_module_features() -> None:
    _module_features.clear()


def should_log_feature(module: str, feature: str) -> bool:
    """
    Check if a specific logging feature should be enabled.

    Uses cached feature flags for better performance during runtime.
    """
    return bool(_module_features.get(module, {}).get(feature, False))


def _truncate(text: str, limit: int) -> str:
    if limit > 0 and len(text) > limit:
        return text[:limit] + "..."
    return text


def log_llm_reply(content: str, context: str, model: str, chat_conf: dict[str, Any]) -> None:
    """
    LLM reply logging with feature control and configuration-based truncation.

    Args:
        content: Raw text returned by the backend
        context: Descriptive context for the log entry
        model: Backend model identifier
        chat_conf: Chat service configuration containing logging settings
    """
    if not should_log_feature("chat", "llm_replies"):
        return

    truncate_length = chat_conf.get("logging", {}).get("llm_reply", 500)
    logger.info(
        "LLM Reply (%s): Content: %s | Model: %s",
        context,
        _truncate(content, truncate_length),
        model,
    )


def log_tool_execution_start(tool_name: str, arguments: dict[str, Any]) -> None:
    if should_log_feature("chat", "tool_execution"):
        logger.info("→ Tool[%s]: executing with arguments %s", tool_name, arguments)
    else:
        logger.info("→ Tool[%s]: executing", tool_name)


def log_tool_execution_success(tool_name: str, message: str) -> None:
    logger.info("← Tool[%s]: success: %s", tool_name, message)


def log_tool_execution_error(tool_name: str, error_msg: str) -> None:
    """
    Log tool execution error with consistent formatting.

    Args:
        tool_name: Name of the tool that failed
        error_msg: Error message describing the failure
    """
    logger.error("← Tool[%s]: failed with error: %s", tool_name, error_msg)


def log_tool_results(tool_name: str, results: Any, truncate_length: int = 200) -> None:
    """Log tool result payloads when the tool_results feature is enabled."""
    if not should_log_feature("chat", "tool_results"):
        return

    logger.info("← Tool[%s]: results: %s", tool_name, _truncate(str(results), truncate_length))


def log_http_request(
    method: str,
    url: str,
    status_code: int | None = None,
    duration_ms: float | None = None,
) -> None:
    """Log HTTP request details if the clients http_requests feature is enabled."""
    if not should_log_feature("clients", "http_requests"):
        return

    message_parts = [f"HTTP {method} {url}"]
    if status_code is not None:
        message_parts.append(f"Status: {status_code}")
    if duration_ms is not None:
        message_parts.append(f"Duration: {duration_ms:.2f}ms")

    logger.info(" | ".join(message_parts))


@asynccontextmanager
async def log_performance(operation_name: str) -> AsyncIterator[None]:
    """Context manager to log performance metrics for operations."""
    start_time = time.monotonic()
    try:
        yield
    finally:
        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info("%s completed in %.2fms", operation_name, elapsed_ms)
