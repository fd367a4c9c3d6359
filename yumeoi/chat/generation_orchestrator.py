"""
Generation Orchestrator

Runs one generation request through its two phases:

1. Elicit: send the tool-declaring prompt (with history) and collect the
   complete reply, since tool-call detection needs the whole text.
2. If the reply is a tool call, dispatch it, build a follow-up prompt that
   embeds the result, and stream the second reply token by token.
   Otherwise the first reply is the answer and is emitted as one token.

The generator yields ``str`` tokens followed by exactly one trailing
GenerationMetadata. Any backend failure aborts the whole generation with
ServiceUnavailableError; the two phases are never resumed or retried.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterable
from contextlib import aclosing
from typing import TYPE_CHECKING, Any

from yumeoi.errors import LLMClientError, ServiceUnavailableError

from .logging_utils import log_llm_reply, log_performance
from .models import GenerationMetadata, PromptContext, StreamChunk, ToolCall, UsageStats
from .prompts import (
    DEFAULT_PERSONA,
    build_follow_up_prompt,
    build_full_prompt,
    build_tool_system_prompt,
)
from .tool_executor import ToolExecutor
from .tool_parser import ToolCallParser

if TYPE_CHECKING:
    from yumeoi.clients.base import LLMBackend

logger = logging.getLogger(__name__)

GenerationItem = str | GenerationMetadata


class GenerationOrchestrator:
    """Two-phase generation over one backend client."""

    def __init__(
        self,
        llm_client: LLMBackend,
        tool_executor: ToolExecutor | None = None,
        tool_parser: ToolCallParser | None = None,
        chat_conf: dict[str, Any] | None = None,
        tools_enabled: bool = True,
    ):
        self.llm_client = llm_client
        self.tool_executor = tool_executor or ToolExecutor()
        self.tool_parser = tool_parser or ToolCallParser()
        self.chat_conf = chat_conf or {}
        self.tools_enabled = tools_enabled

        self.system_prompt: str = self.chat_conf.get("system_prompt") or build_tool_system_prompt(
            self.tool_executor.tools
        )
        self.persona: str = self.chat_conf.get("persona") or DEFAULT_PERSONA

    @property
    def model_name(self) -> str:
        return self.llm_client.model_name

    async def generate(self, context: PromptContext) -> AsyncGenerator[GenerationItem]:
        """
        Generate a reply for one prompt.

        Yields:
            str: Text tokens in arrival order
            GenerationMetadata: Exactly once, after the last token

        Raises:
            ServiceUnavailableError: If any backend call fails
        """
        logger.info("→ Orchestrator: starting generation for user=%s", context.user_id)

        try:
            async with log_performance("Generation"):
                if self.tools_enabled:
                    stream = self._generate_with_tools(context)
                else:
                    stream = self._generate_direct(context)
                async with aclosing(stream) as items:
                    async for item in items:
                        yield item
        except LLMClientError as e:
            logger.error("Generation failed during backend call: %s", e)
            raise ServiceUnavailableError() from e

        logger.info("← Orchestrator: generation completed for user=%s", context.user_id)

    async def _generate_with_tools(self, context: PromptContext) -> AsyncGenerator[GenerationItem]:
        full_prompt = build_full_prompt(
            self.system_prompt, context.conversation_history, context.prompt
        )

        # Phase 1: the whole reply is needed before tool-call detection
        initial_response, initial_usage = await self.llm_client.complete_with_usage(full_prompt)
        log_llm_reply(initial_response, "initial response", self.model_name, self.chat_conf)

        tool_call = self.tool_parser.parse(initial_response)
        if tool_call is None:
            logger.info("No tool call detected. Emitting initial response.")
            yield initial_response
            yield GenerationMetadata.from_usage(self.model_name, initial_usage)
            return

        follow_up_prompt = self._handle_tool_call(context, tool_call)

        # Phase 2: starts only after Phase 1 has fully resolved
        logger.info("→ LLM: streaming final response after tool execution")
        chunks = self.llm_client.stream_response(follow_up_prompt)
        async with aclosing(self._stream_tokens(chunks)) as items:
            async for item in items:
                yield item

    async def _generate_direct(self, context: PromptContext) -> AsyncGenerator[GenerationItem]:
        """Stream a plain answer without declaring or dispatching tools."""
        prompt = build_full_prompt("", context.conversation_history, context.prompt)
        logger.info("→ LLM: streaming direct response")
        async with aclosing(self._stream_tokens(self.llm_client.stream_response(prompt))) as items:
            async for item in items:
                yield item

    def _handle_tool_call(self, context: PromptContext, tool_call: ToolCall) -> str:
        logger.info("Tool call detected: %s. Executing tool...", tool_call.tool)
        tool_result = self.tool_executor.execute(tool_call, context.user_id)
        return build_follow_up_prompt(context.prompt, tool_call, tool_result, self.persona)

    async def _stream_tokens(
        self, chunks: AsyncGenerator[StreamChunk]
    ) -> AsyncGenerator[GenerationItem]:
        last_usage: UsageStats | None = None
        token_count = 0

        async with aclosing(chunks) as stream:
            async for chunk in stream:
                if chunk.text_fragment:
                    token_count += 1
                    yield chunk.text_fragment
                if chunk.usage_stats is not None:
                    last_usage = chunk.usage_stats

        logger.info("← LLM: stream finished with %d tokens", token_count)
        yield GenerationMetadata.from_usage(self.model_name, last_usage)


async def collect_generation(
    stream: AsyncIterable[GenerationItem],
) -> tuple[str, GenerationMetadata | None]:
    """Drain a generation stream into its full text and trailing metadata."""
    parts: list[str] = []
    metadata: GenerationMetadata | None = None
    async for item in stream:
        if isinstance(item, GenerationMetadata):
            metadata = item
        else:
            parts.append(item)
    return "".join(parts), metadata
