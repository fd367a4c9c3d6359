"""
Chat Service Data Models

Data structures for the generation pipeline: prompt input, decoded stream
chunks, tool invocations and their results, and generation metadata.
All strongly typed with Pydantic for validation and type safety.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


# ==============================================================================
# PROMPT INPUT
# ==============================================================================


class HistoryTurn(BaseModel):
    """One prior turn supplied to the orchestrator as context."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class PromptContext(BaseModel):
    """Immutable input to one generation call."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    prompt: str
    conversation_history: tuple[HistoryTurn, ...] = ()


# ==============================================================================
# STREAMING MODELS
# ==============================================================================


class UsageStats(BaseModel):
    """Usage counters reported by a backend on its terminal chunk."""

    total_duration: int = Field(default=0, ge=0)
    prompt_eval_count: int = Field(default=0, ge=0)
    eval_count: int = Field(default=0, ge=0)


class StreamChunk(BaseModel):
    """One decoded unit of backend output."""

    text_fragment: str | None = None
    is_final: bool = False
    usage_stats: UsageStats | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> StreamChunk:
        """Build a chunk from an Ollama-style NDJSON record."""
        is_final = bool(record.get("done", False))
        usage = None
        if is_final:
            usage = UsageStats(
                total_duration=record.get("total_duration") or 0,
                prompt_eval_count=record.get("prompt_eval_count") or 0,
                eval_count=record.get("eval_count") or 0,
            )
        return cls(
            text_fragment=record.get("response") or None,
            is_final=is_final,
            usage_stats=usage,
        )


# ==============================================================================
# TOOLS
# ==============================================================================


class ToolCall(BaseModel):
    """A structured tool invocation recognised in model output."""

    model_config = ConfigDict(frozen=True)

    tool: str = Field(min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Result of dispatching a tool call."""

    status: Literal["success", "error"]
    message: str
    data: Any | None = None

    @classmethod
    def success(cls, message: str, data: Any | None = None) -> ToolResult:
        return cls(status="success", message=message, data=data)

    @classmethod
    def error(cls, message: str) -> ToolResult:
        return cls(status="error", message=message)

    @property
    def is_success(self) -> bool:
        return self.status == "success"


# ==============================================================================
# GENERATION OUTPUT
# ==============================================================================


class GenerationMetadata(BaseModel):
    """Trailing record produced after all tokens of a generation."""

    model_used: str
    total_duration: int = Field(default=0, ge=0)
    prompt_eval_count: int = Field(default=0, ge=0)
    eval_count: int = Field(default=0, ge=0)

    @classmethod
    def from_usage(cls, model_used: str, usage: UsageStats | None) -> GenerationMetadata:
        if usage is None:
            return cls(model_used=model_used)
        return cls(
            model_used=model_used,
            total_duration=usage.total_duration,
            prompt_eval_count=usage.prompt_eval_count,
            eval_count=usage.eval_count,
        )
