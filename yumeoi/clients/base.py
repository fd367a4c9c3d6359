"""
LLM Backend Interface

The transport contract the generation orchestrator consumes. Concrete
backends speak one vendor's wire format and translate every failure into
LLMClientError.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from yumeoi.chat.models import StreamChunk, UsageStats


@runtime_checkable
class LLMBackend(Protocol):
    """Protocol implemented by every backend client."""

    @property
    def model_name(self) -> str: ...

    async def complete_response(self, prompt: str) -> str:
        """
        Return the whole reply for a prompt.

        Raises:
            LLMClientError: On non-success status, network failure or bad reply
        """
        ...

    async def complete_with_usage(self, prompt: str) -> tuple[str, UsageStats | None]:
        """Like complete_response, plus any usage counters the reply carried."""
        ...

    def stream_response(self, prompt: str) -> AsyncIterator[StreamChunk]:
        """
        Lazily yield decoded chunks for a prompt.

        Failures at first-byte time raise LLMClientError; malformed records
        mid-stream are skipped by the decoder.
        """
        ...

    async def close(self) -> None: ...
