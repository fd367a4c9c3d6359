"""
Backend Factory

Selects the backend client from configuration. The variant is chosen once,
at construction time, from an explicit provider name.
"""

from __future__ import annotations

import logging

from yumeoi.config import Configuration

from .base import LLMBackend
from .gemini_client import GeminiClient
from .ollama_client import OllamaClient

logger = logging.getLogger(__name__)


def create_llm_client(configuration: Configuration) -> LLMBackend:
    """Create the backend client named by ``llm.active``."""
    llm_config = configuration.get_llm_config()
    provider = llm_config["provider"]

    if provider == "ollama":
        logger.info("Using Ollama backend at %s", llm_config.get("base_url"))
        return OllamaClient(llm_config)
    if provider == "gemini":
        logger.info("Using Gemini backend for model %s", llm_config.get("model"))
        return GeminiClient(llm_config, configuration.llm_api_key)

    raise ValueError(f"Unknown LLM provider '{provider}'")
