"""
Conversation Service

Read-modify-write of whole conversation snapshots. Every write persists the
complete conversation with a refreshed expiry; there is no cross-request
locking, so concurrent writers to the same (user, context) race and the
last save wins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import Conversation, Role
from .repository import ConversationRepository

logger = logging.getLogger(__name__)


class ConversationService:
    """Appends messages to per-(user, context) conversations."""

    def __init__(self, repository: ConversationRepository):
        self.repository = repository

    async def get(self, user_id: str, context: str) -> Conversation | None:
        return await self.repository.find_by_user_and_context(user_id, context)

    async def append(self, user_id: str, context: str, role: Role, content: str) -> Conversation:
        """
        Append one message and persist the snapshot.

        Creates the conversation on first use. Store failures propagate.
        """
        return await self.append_many(user_id, context, [(role, content)])

    async def append_many(
        self,
        user_id: str,
        context: str,
        messages: Iterable[tuple[Role, str]],
    ) -> Conversation:
        """Append several messages in order and persist them in a single write."""
        conversation = await self.get(user_id, context)
        return await self.append_to(conversation, user_id, context, messages)

    async def append_to(
        self,
        conversation: Conversation | None,
        user_id: str,
        context: str,
        messages: Iterable[tuple[Role, str]],
    ) -> Conversation:
        """
        Append to a snapshot the caller already read, without reading the store again.

        ``None`` means the caller found no conversation; a new one is created.
        """
        if conversation is None:
            conversation = Conversation(user_id=user_id, context=context)
            logger.info(
                "Creating conversation %s for user=%s context=%s",
                conversation.id,
                user_id,
                context,
            )
        elif (conversation.user_id, conversation.context) != (user_id, context):
            raise ValueError(
                f"Conversation {conversation.id} does not belong to user={user_id} context={context}"
            )

        for role, content in messages:
            conversation.add_message(role, content)

        await self.repository.save(conversation)
        return conversation
