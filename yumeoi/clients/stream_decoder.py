"""
NDJSON Stream Decoder

Turns a raw byte stream of newline-delimited JSON records into a lazy
sequence of StreamChunk objects.

Records may span reads, and a single read may carry zero, one or many
complete records. Malformed records are logged and skipped; a transport
read error aborts decoding and surfaces as StreamDecodeError. The byte
source is closed on every exit path, including early abandonment by the
consumer.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from typing import Any

from pydantic import ValidationError

from yumeoi.chat.logging_utils import should_log_feature
from yumeoi.chat.models import StreamChunk
from yumeoi.errors import StreamDecodeError

logger = logging.getLogger(__name__)

RecordParser = Callable[[dict[str, Any]], StreamChunk]

_LOG_FRAGMENT_LIMIT = 200


async def decode_ndjson_stream(
    byte_stream: AsyncIterator[bytes],
    parse_record: RecordParser = StreamChunk.from_record,
) -> AsyncGenerator[StreamChunk]:
    """
    Decode newline-delimited JSON records from an async byte iterator.

    Args:
        byte_stream: Async iterator of raw bytes (e.g. httpx aiter_bytes())
        parse_record: Maps one decoded JSON object to a StreamChunk

    Yields:
        StreamChunk: One per valid record, in arrival order

    Raises:
        StreamDecodeError: If reading from the underlying transport fails
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    record_count = 0
    skipped_count = 0

    try:
        try:
            async for raw in byte_stream:
                buffer += decoder.decode(raw)
                *complete, buffer = buffer.split("\n")
                for fragment in complete:
                    chunk = _parse_fragment(fragment, parse_record)
                    if chunk is None:
                        skipped_count += int(bool(fragment.strip()))
                        continue
                    record_count += 1
                    yield chunk
        except StreamDecodeError:
            raise
        except Exception as e:
            logger.error("Transport read failed while decoding stream: %s", e)
            raise StreamDecodeError(f"Stream read failed: {e!s}") from e

        # Final flush of whatever the transport left without a trailing newline
        buffer += decoder.decode(b"", final=True)
        chunk = _parse_fragment(buffer, parse_record)
        if chunk is not None:
            record_count += 1
            yield chunk
        elif buffer.strip():
            skipped_count += 1

        logger.debug(
            "← Stream: decoded %d records, skipped %d malformed",
            record_count,
            skipped_count,
        )
    finally:
        aclose = getattr(byte_stream, "aclose", None)
        if aclose is not None:
            await aclose()


def _parse_fragment(fragment: str, parse_record: RecordParser) -> StreamChunk | None:
    """Parse one NDJSON fragment, returning None for empty or malformed input."""
    text = fragment.strip()
    if not text:
        return None

    try:
        record = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(
            "Failed to parse JSON record from stream (%s): %s",
            e.msg,
            text[:_LOG_FRAGMENT_LIMIT],
        )
        return None

    if not isinstance(record, dict):
        logger.warning("Ignoring non-object stream record: %s", text[:_LOG_FRAGMENT_LIMIT])
        return None

    try:
        chunk = parse_record(record)
    except ValidationError as e:
        logger.warning("Ignoring stream record with invalid fields: %s", e.errors())
        return None

    if should_log_feature("clients", "stream_records"):
        logger.debug("← Stream record: %s", text[:_LOG_FRAGMENT_LIMIT])
    return chunk
