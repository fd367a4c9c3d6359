"""
Ollama HTTP client.

Talks to Ollama's /api/generate endpoint in both of its wire formats:
- stream=false: one JSON object carrying the whole reply
- stream=true: newline-delimited JSON records, decoded lazily
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import Any

import httpx
from pydantic import ValidationError

from yumeoi.chat.logging_utils import log_http_request
from yumeoi.chat.models import StreamChunk, UsageStats
from yumeoi.errors import LLMClientError

from .stream_decoder import decode_ndjson_stream

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"


class OllamaClient:
    """Backend client for a local or remote Ollama server."""

    def __init__(
        self,
        config: dict[str, Any],
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config: dict[str, Any] = config
        self._model: str = config.get("model", "phi3")

        self.client = httpx.AsyncClient(
            base_url=config.get("base_url", "http://localhost:11434"),
            headers={"Content-Type": "application/json"},
            timeout=config.get("timeout", 120.0),
            transport=transport,
            trust_env=False,
        )
        logger.info("Ollama client initialized with model: %s", self._model)

    @property
    def model_name(self) -> str:
        return self._model

    def _build_payload(self, prompt: str, stream: bool) -> dict[str, Any]:
        """Build the request body, passing through generation options from config."""
        payload: dict[str, Any] = {
            "model": self._model,
            "prompt": prompt,
            "stream": stream,
        }
        options = self.config.get("options")
        if options:
            payload["options"] = options
        keep_alive = self.config.get("keep_alive")
        if keep_alive is not None:
            payload["keep_alive"] = keep_alive
        return payload

    async def complete_response(self, prompt: str) -> str:
        text, _ = await self.complete_with_usage(prompt)
        return text

    async def complete_with_usage(self, prompt: str) -> tuple[str, UsageStats | None]:
        """Return the whole reply and the usage counters Ollama reports with it."""
        logger.info("→ LLM: requesting complete response from '%s'", self._model)
        payload = self._build_payload(prompt, stream=False)

        try:
            start_time = time.monotonic()
            response = await self.client.post(GENERATE_PATH, json=payload)
            duration_ms = (time.monotonic() - start_time) * 1000
            log_http_request("POST", GENERATE_PATH, response.status_code, duration_ms)

            if not response.is_success:
                logger.error("Ollama request failed: %s", response.text[:1000])
                raise LLMClientError(
                    f"Ollama API returned status {response.status_code}",
                    status_code=response.status_code,
                )
            result = response.json()
        except LLMClientError:
            raise
        except httpx.HTTPError as e:
            logger.error("HTTP error: %s", e)
            raise LLMClientError(f"HTTP error: {e!s}") from e
        except ValueError as e:
            logger.error("Invalid JSON in Ollama reply: %s", e)
            raise LLMClientError(f"Invalid JSON in reply: {e!s}") from e

        text = result.get("response") if isinstance(result, dict) else None
        if not isinstance(text, str):
            raise LLMClientError("Unexpected response format: missing 'response' text")

        logger.info("← LLM: complete response received, length=%d", len(text))
        return text, self._extract_usage(result)

    @staticmethod
    def _extract_usage(result: dict[str, Any]) -> UsageStats | None:
        if not result.get("done"):
            return None
        try:
            return StreamChunk.from_record(result).usage_stats
        except ValidationError as e:
            logger.warning("Ignoring malformed usage counters: %s", e.errors())
            return None

    async def stream_response(self, prompt: str) -> AsyncGenerator[StreamChunk]:
        logger.info("→ LLM: starting streaming request to '%s'", self._model)
        payload = self._build_payload(prompt, stream=True)
        chunk_count = 0

        try:
            async with self.client.stream("POST", GENERATE_PATH, json=payload) as response:
                log_http_request("POST", GENERATE_PATH, response.status_code)
                if not response.is_success:
                    await response.aread()
                    logger.error("Ollama stream request failed: %s", response.text[:1000])
                    raise LLMClientError(
                        f"Ollama API returned status {response.status_code}",
                        status_code=response.status_code,
                    )

                async with aclosing(decode_ndjson_stream(response.aiter_bytes())) as chunks:
                    async for chunk in chunks:
                        chunk_count += 1
                        yield chunk
        except LLMClientError:
            # Includes StreamDecodeError raised by the decoder
            raise
        except httpx.HTTPError as e:
            logger.error("HTTP error during streaming: %s", e)
            raise LLMClientError(f"HTTP error: {e!s}") from e
        finally:
            logger.info("← LLM: streaming finished after %d chunks", chunk_count)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> OllamaClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()
