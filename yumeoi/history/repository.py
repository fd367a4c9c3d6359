"""
Conversation Repository Interface

Defines the key-value store contract the history layer persists through,
and the repository that maps conversations onto it.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from .models import Conversation

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_KEY_PREFIX = "conversation"


# ---------- Store interface ----------


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for string stores with per-key expiry."""

    async def set_value(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value, replacing any previous one, and reset its expiry.

        Raises:
            PersistenceError: If the store does not confirm the write
        """
        ...

    async def get_value(self, key: str) -> str | None: ...

    async def close(self) -> None: ...


# ---------- Repository ----------


class ConversationRepository:
    """Reads and writes whole conversation snapshots keyed by (user, context)."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    def key_for(self, user_id: str, context: str) -> str:
        return f"{self.key_prefix}:{user_id}:{context}"

    async def find_by_user_and_context(self, user_id: str, context: str) -> Conversation | None:
        key = self.key_for(user_id, context)
        raw = await self.store.get_value(key)
        if raw is None:
            return None

        try:
            return Conversation.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable conversation snapshot %s: %s", key, e)
            return None

    async def save(self, conversation: Conversation) -> None:
        """Persist the full snapshot with a refreshed expiry."""
        key = self.key_for(conversation.user_id, conversation.context)
        await self.store.set_value(key, conversation.model_dump_json(), self.ttl_seconds)
        logger.debug(
            "Saved conversation %s (%d messages) under %s",
            conversation.id,
            len(conversation.messages),
            key,
        )
