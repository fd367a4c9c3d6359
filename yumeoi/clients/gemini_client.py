"""
Gemini HTTP client.

Calls the Generative Language REST API (generateContent), which answers
with a single JSON document. The API is not streamed here; stream_response
performs one call and yields the whole reply as a single final chunk so the
orchestrator can treat every backend the same way.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from yumeoi.chat.logging_utils import log_http_request
from yumeoi.chat.models import StreamChunk, UsageStats
from yumeoi.errors import LLMClientError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Backend client for Gemini / Gemma models served by Google."""

    def __init__(
        self,
        config: dict[str, Any],
        api_key: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config: dict[str, Any] = config
        self._model: str = config.get("model", "gemma-3-12b-it")

        self.client = httpx.AsyncClient(
            base_url=config.get("base_url", "https://generativelanguage.googleapis.com/v1beta"),
            headers={
                "x-goog-api-key": api_key,
                "Content-Type": "application/json",
            },
            timeout=config.get("timeout", 60.0),
            transport=transport,
            trust_env=False,
        )
        logger.info("Gemini client initialized with model: %s", self._model)

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def _endpoint(self) -> str:
        return f"/models/{self._model}:generateContent"

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        generation_config = self.config.get("options")
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def _generate(self, prompt: str) -> tuple[str, UsageStats | None]:
        try:
            start_time = time.monotonic()
            response = await self.client.post(self._endpoint, json=self._build_payload(prompt))
            duration_ms = (time.monotonic() - start_time) * 1000
            log_http_request("POST", self._endpoint, response.status_code, duration_ms)

            if not response.is_success:
                logger.error("Gemini request failed: %s", response.text[:1000])
                raise LLMClientError(
                    f"Gemini API returned status {response.status_code}",
                    status_code=response.status_code,
                )
            result = response.json()
        except LLMClientError:
            raise
        except httpx.HTTPError as e:
            logger.error("HTTP error: %s", e)
            raise LLMClientError(f"HTTP error: {e!s}") from e
        except ValueError as e:
            logger.error("Invalid JSON in Gemini reply: %s", e)
            raise LLMClientError(f"Invalid JSON in reply: {e!s}") from e

        try:
            text = result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMClientError("No response text from Gemini") from e
        if not isinstance(text, str) or not text:
            raise LLMClientError("No response text from Gemini")

        return text, self._extract_usage(result, duration_ms)

    @staticmethod
    def _extract_usage(result: dict[str, Any], duration_ms: float) -> UsageStats | None:
        usage = result.get("usageMetadata")
        if not isinstance(usage, dict):
            return None
        try:
            return UsageStats(
                # Nanoseconds, like Ollama's total_duration
                total_duration=max(int(duration_ms * 1_000_000), 0),
                prompt_eval_count=usage.get("promptTokenCount") or 0,
                eval_count=usage.get("candidatesTokenCount") or 0,
            )
        except ValueError as e:
            logger.warning("Ignoring malformed usageMetadata: %s", e)
            return None

    async def complete_response(self, prompt: str) -> str:
        text, _ = await self.complete_with_usage(prompt)
        return text

    async def complete_with_usage(self, prompt: str) -> tuple[str, UsageStats | None]:
        logger.info("→ LLM: requesting complete response from '%s'", self._model)
        text, usage = await self._generate(prompt)
        logger.info("← LLM: complete response received, length=%d", len(text))
        return text, usage

    async def stream_response(self, prompt: str) -> AsyncGenerator[StreamChunk]:
        logger.info("→ LLM: requesting single-shot response from '%s'", self._model)
        text, usage = await self._generate(prompt)
        yield StreamChunk(text_fragment=text, is_final=True, usage_stats=usage)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()
