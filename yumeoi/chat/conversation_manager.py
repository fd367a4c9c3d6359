"""
Conversation Management

Ties the history store to the generation orchestrator:
- Reads the conversation once and hands recent turns to the orchestrator
- Streams the generated reply to the caller
- Persists the user turn and the reply together, only after success
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing

from yumeoi.history import Conversation, ConversationService

from .generation_orchestrator import GenerationItem, GenerationOrchestrator, collect_generation
from .models import GenerationMetadata, HistoryTurn, PromptContext

logger = logging.getLogger(__name__)


class ConversationManager:
    """Runs one generation per user message against its stored conversation."""

    def __init__(
        self,
        conversation_service: ConversationService,
        generator: GenerationOrchestrator,
        history_limit: int = 20,
    ):
        self.conversation_service = conversation_service
        self.generator = generator
        self.history_limit = history_limit

    def _history_turns(self, conversation: Conversation | None) -> tuple[HistoryTurn, ...]:
        if conversation is None or self.history_limit == 0:
            return ()
        recent = conversation.messages[-self.history_limit :]
        return tuple(HistoryTurn(role=m.role, content=m.content) for m in recent)

    async def stream_reply(
        self, user_id: str, context: str, user_message: str
    ) -> AsyncGenerator[GenerationItem]:
        """
        Stream the reply to one user message.

        Yields the orchestrator's tokens and trailing GenerationMetadata. The
        exchange is saved once the metadata arrives and before it is yielded;
        nothing is saved if generation fails or is abandoned earlier.

        Raises:
            ServiceUnavailableError: If the backend fails; history is untouched
        """
        logger.debug("→ Repository: loading conversation for user=%s context=%s", user_id, context)
        conversation = await self.conversation_service.get(user_id, context)
        prompt_context = PromptContext(
            user_id=user_id,
            prompt=user_message,
            conversation_history=self._history_turns(conversation),
        )

        parts: list[str] = []
        async with aclosing(self.generator.generate(prompt_context)) as items:
            async for item in items:
                if isinstance(item, GenerationMetadata):
                    # Saved before the terminal item so a consumer may stop on it
                    await self._persist_exchange(
                        conversation, user_id, context, user_message, "".join(parts)
                    )
                else:
                    parts.append(item)
                yield item

    async def _persist_exchange(
        self,
        conversation: Conversation | None,
        user_id: str,
        context: str,
        user_message: str,
        reply: str,
    ) -> None:
        logger.info("→ Repository: persisting exchange for user=%s context=%s", user_id, context)
        await self.conversation_service.append_to(
            conversation,
            user_id,
            context,
            [("user", user_message), ("assistant", reply)],
        )

    async def get_ai_reply(
        self, user_id: str, context: str, user_message: str
    ) -> tuple[str, GenerationMetadata | None]:
        """Return the full reply text and its metadata."""
        async with aclosing(self.stream_reply(user_id, context, user_message)) as stream:
            return await collect_generation(stream)
