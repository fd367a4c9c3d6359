#!/usr/bin/env python3
"""
Store Factory

Factory function to create the key-value store named by configuration.
"""

from __future__ import annotations

import logging
from typing import Any

from .memory_store import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore
from .repository import KeyValueStore
from .sqlite_store import SQLiteKeyValueStore

logger = logging.getLogger(__name__)


def create_key_value_store(storage_config: dict[str, Any]) -> KeyValueStore:
    """Create the store selected by ``chat.storage.type``."""
    storage_type = storage_config.get("type", "memory")

    if storage_type == "memory":
        logger.info("Using in-memory conversation storage (data lost on restart)")
        return InMemoryKeyValueStore()
    if storage_type == "sqlite":
        db_path = storage_config.get("sqlite", {}).get("db_path", "conversations.db")
        logger.info("Using SQLite conversation storage at %s", db_path)
        return SQLiteKeyValueStore(db_path)
    if storage_type == "redis":
        url = storage_config.get("redis", {}).get("url")
        logger.info("Using Redis conversation storage")
        return RedisKeyValueStore(url)

    raise ValueError(f"Unknown storage type '{storage_type}'")
