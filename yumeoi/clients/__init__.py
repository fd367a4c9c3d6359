"""Clients package containing the LLM backend transports."""

from __future__ import annotations

from .base import LLMBackend
from .factory import create_llm_client
from .gemini_client import GeminiClient
from .ollama_client import OllamaClient
from .stream_decoder import decode_ndjson_stream

__all__ = [
    "GeminiClient",
    "LLMBackend",
    "OllamaClient",
    "create_llm_client",
    "decode_ndjson_stream",
]
