"""Framing helpers shared by the backend stream parsers.

Two disciplines are normalized here into "zero or more JSON events":

- Line-delimited event framing: newline separated lines, ``data:`` lines carry
  JSON, a sentinel payload ends the stream, other lines are ignored.
- Typed-event framing: the same lines, but read as raw byte chunks that may
  hold several lines and a trailing partial line.

A malformed JSON payload is noise: it is logged and skipped, never fatal.
The same goes for well-formed events whose fields have an unexpected shape;
parsers read nested fields through ``object_field`` and ``object_items``.
"""

import codecs
import json
import logging
from collections.abc import Iterable, Iterator
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class LineBuffer:
    """Splits arbitrary text chunks into complete lines.

    The trailing partial line of each chunk is held back and prefixed to the
    next one.
    """

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, chunk: str) -> list[str]:
        parts = (self._pending + chunk).split("\n")
        self._pending = parts.pop()
        return [part.rstrip("\r") for part in parts]

    def flush(self) -> list[str]:
        """Return the held partial line (if any) at end of stream."""
        rest, self._pending = self._pending, ""
        rest = rest.rstrip("\r")
        return [rest] if rest else []

    @property
    def pending(self) -> str:
        return self._pending


def iter_lines(chunks: Iterable[bytes | str]) -> Iterator[str]:
    """Turn a stream of byte (or text) chunks into complete lines.

    UTF-8 sequences split across chunk boundaries are decoded incrementally.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = LineBuffer()
    for chunk in chunks:
        text = decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        yield from buffer.feed(text)
    yield from buffer.feed(decoder.decode(b"", final=True))
    yield from buffer.flush()


def data_payload(line: str) -> str | None:
    """Return the payload of a ``data:`` line, or None for any other line."""
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload


def iter_data_events(
    lines: Iterable[str],
    *,
    sentinel: str | None = DONE_SENTINEL,
) -> Iterator[dict[str, Any]]:
    """Yield decoded JSON objects from ``data:`` lines.

    Args:
        lines: Complete lines, in stream order
        sentinel: Payload that ends the stream normally (None: run to EOF)

    Yields:
        One dict per well-formed event
    """
    for line in lines:
        payload = data_payload(line)
        if payload is None:
            continue
        if sentinel is not None and payload.strip() == sentinel:
            return
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed stream line: %.120s", payload)
            continue
        if isinstance(event, dict):
            yield event
        else:
            logger.debug("Skipping non-object stream payload: %.120s", payload)


def object_field(event: dict[str, Any], key: str) -> dict[str, Any]:
    """``event[key]`` if it is a JSON object, else an empty dict."""
    value = event.get(key)
    if value is None or isinstance(value, dict):
        return value or {}
    logger.debug("Ignoring %r field of unexpected type %s", key, type(value).__name__)
    return {}


def object_items(value: Any) -> list[dict[str, Any]]:
    """The JSON objects of an array field; anything else in it is skipped."""
    if value is None:
        return []
    if not isinstance(value, list):
        logger.debug("Ignoring non-array field of type %s", type(value).__name__)
        return []
    items = [item for item in value if isinstance(item, dict)]
    if len(items) != len(value):
        logger.debug("Skipped %d non-object array item(s)", len(value) - len(items))
    return items
