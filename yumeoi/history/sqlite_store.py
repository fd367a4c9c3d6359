"""
SQLite Key-Value Store

CONFIG: chat.storage.type = "sqlite"
PURPOSE: Single-node persistence that survives restarts
FEATURES: Lazy schema init, expiry on read, purge of expired rows on write
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

import aiosqlite

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """aiosqlite-backed store; expiry uses wall-clock seconds so it survives restarts."""

    def __init__(self, db_path: str = "conversations.db", clock: Callable[[], float] = time.time):
        self.db_path = db_path
        self._clock = clock
        self._lock = asyncio.Lock()
        self._initialized = False

    async def _ensure_initialized(self):
        """Initialize database schema if not already done."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("PRAGMA journal_mode=WAL")
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        expires_at REAL NOT NULL
                    )
                """)
                await db.execute("""
                    CREATE INDEX IF NOT EXISTS idx_kv_expires
                    ON kv_store(expires_at)
                """)
                await db.commit()

            self._initialized = True
            logger.info("SQLite store initialized at %s", self.db_path)

    async def set_value(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._ensure_initialized()
        now = self._clock()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM kv_store WHERE expires_at <= ?", (now,))
            await db.execute(
                """
                INSERT INTO kv_store (key, value, expires_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, value, now + ttl_seconds),
            )
            await db.commit()

    async def get_value(self, key: str) -> str | None:
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT value FROM kv_store WHERE key = ? AND expires_at > ?",
                (key, self._clock()),
            )
            row = await cursor.fetchone()

        return row[0] if row else None

    async def close(self) -> None:
        # Connections are opened per operation
        pass
