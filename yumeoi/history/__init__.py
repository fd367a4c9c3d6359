"""History package: conversation snapshots and the stores that hold them."""

from __future__ import annotations

from .conversation_service import ConversationService
from .factory import create_key_value_store
from .memory_store import InMemoryKeyValueStore
from .models import ChatMessage, Conversation
from .redis_store import RedisKeyValueStore
from .repository import ConversationRepository, KeyValueStore
from .sqlite_store import SQLiteKeyValueStore

__all__ = [
    "ChatMessage",
    "Conversation",
    "ConversationRepository",
    "ConversationService",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "SQLiteKeyValueStore",
    "create_key_value_store",
]
