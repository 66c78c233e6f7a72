"""Anthropic Claude provider implementation.

Talks to the Messages API over raw HTTP.
Reference: https://docs.anthropic.com/en/api/messages-streaming

The stream is read as raw byte chunks. A chunk may hold zero, one or several
complete ``data:`` lines plus a trailing partial line, which is buffered until
the next chunk completes it.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

import httpx

from ..base import LLMProvider
from ..errors import APIError
from ..framing import iter_data_events, iter_lines, object_field
from ..models import Message, ModelDescriptor
from ..transport import StreamingBody

API_BASE = "https://api.anthropic.com"
API_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 4096


def parse_message_stream(chunks: Iterable[bytes | str], provider: str = "Claude") -> Iterator[str]:
    """Yield the text of ``content_block_delta`` events.

    Lifecycle events (message_start, content_block_start, ping, ...) are
    consumed silently. ``message_stop`` ends the stream.

    Raises:
        APIError: On an ``error`` event
    """
    for event in iter_data_events(iter_lines(chunks), sentinel=None):
        event_type = event.get("type")
        if event_type == "content_block_delta":
            text = object_field(event, "delta").get("text")
            if isinstance(text, str) and text:
                yield text
        elif event_type == "message_stop":
            return
        elif event_type == "error":
            error = event.get("error") or {}
            detail = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise APIError(provider, None, detail)


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider.

    Hidden design decisions:
    - ``x-api-key`` authentication and API version header
    - ``max_tokens`` is mandatory for the Messages API
    - Typed-event framing read in byte chunks
    """

    name = "claude"
    display_name = "Claude"
    fallback_models = (
        ModelDescriptor(id="claude-3-5-sonnet-20241022", display_name="Claude 3.5 Sonnet", description="Balanced intelligence and speed"),
        ModelDescriptor(id="claude-3-5-haiku-20241022", display_name="Claude 3.5 Haiku", description="Fast and efficient"),
        ModelDescriptor(id="claude-3-opus-20240229", display_name="Claude 3 Opus", description="Most capable"),
        ModelDescriptor(id="claude-3-sonnet-20240229", display_name="Claude 3 Sonnet", description="Balanced performance"),
    )

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self._api_key, "anthropic-version": API_VERSION}

    def build_request(self, history: Sequence[Message]) -> httpx.Request:
        body = {
            "model": self._model,
            "messages": [message.to_wire() for message in history],
            "max_tokens": DEFAULT_MAX_TOKENS,
            "stream": True,
        }
        return self._client.build_request(
            "POST",
            f"{API_BASE}/v1/messages",
            json=body,
            headers={**self._headers(), "Content-Type": "application/json"},
        )

    def parse_stream(self, body: StreamingBody) -> Iterator[str]:
        return parse_message_stream(body.chunks(), self.display_name)

    def build_models_request(self) -> httpx.Request | None:
        return self._client.build_request("GET", f"{API_BASE}/v1/models", headers=self._headers())

    def parse_models(self, payload: Any) -> list[ModelDescriptor]:
        return [
            ModelDescriptor(id=item["id"], display_name=item.get("display_name") or item["id"])
            for item in payload.get("data") or []
            if item.get("id")
        ]
