"""Yumeoi backend: tool-aware LLM generation with persisted conversation history."""

__version__ = "0.1.0"
