"""
Error Taxonomy

Exceptions shared across the generation pipeline:
- Backend transport failures (recovered into a uniform service failure)
- Stream decoding failures caused by the transport
- The single user-facing "AI service failed" error
- Persistence failures (propagated to the caller)
"""

from __future__ import annotations


class YumeoiError(Exception):
    """Base class for all application errors."""


class LLMClientError(YumeoiError):
    """A backend call failed: network error, non-success status or bad reply."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StreamDecodeError(LLMClientError):
    """The transport failed while a response stream was being decoded."""


class ServiceUnavailableError(YumeoiError):
    """Uniform failure surfaced to the end user when generation cannot complete."""

    def __init__(self, message: str = "The AI service failed."):
        super().__init__(message)


class PersistenceError(YumeoiError):
    """The key-value store did not confirm a write."""
