"""
Conversation History Data Models

Pydantic models for the per-(user, context) conversation snapshot.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ChatMessage(BaseModel):
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=_utc_now)


class Conversation(BaseModel):
    """Complete snapshot of one conversation, persisted as a whole on every write."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), frozen=True)
    user_id: str = Field(frozen=True)
    context: str = Field(frozen=True)
    messages: list[ChatMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def add_message(self, role: Role, content: str) -> ChatMessage:
        """Append a message and bump updated_at."""
        timestamp = _utc_now()
        if self.messages and timestamp <= self.messages[-1].timestamp:
            # Keep ordering strict when the clock has not moved
            timestamp = self.messages[-1].timestamp + timedelta(microseconds=1)

        message = ChatMessage(role=role, content=content, timestamp=timestamp)
        self.messages.append(message)
        self.updated_at = timestamp
        return message
