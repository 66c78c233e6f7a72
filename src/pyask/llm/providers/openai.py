"""OpenAI-compatible chat completion backends.

ChatGPT, DeepSeek, Mistral and Qwen all speak the same wire format: a POST
of ``{model, messages, stream}`` answered by line-delimited ``data:`` events
ending with ``[DONE]``. One driver serves them all; each backend is a small
subclass carrying its endpoint, fallback models and discovery filter.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, ClassVar

import httpx

from ..errors import APIError
from ..framing import iter_data_events, object_field, object_items
from ..models import Message, ModelDescriptor
from ..base import LLMProvider
from ..transport import StreamingBody


def parse_chat_completion_stream(lines: Iterable[str], provider: str = "backend") -> Iterator[str]:
    """Yield ``choices[0].delta.content`` of each event up to ``[DONE]``.

    Args:
        lines: Complete lines of the response body
        provider: Display name used in errors

    Raises:
        APIError: If the backend reports an error object mid-stream
    """
    for event in iter_data_events(lines):
        if "error" in event:
            error = event["error"]
            detail = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise APIError(provider, None, detail)
        choices = object_items(event.get("choices"))
        if not choices:
            continue
        content = object_field(choices[0], "delta").get("content")
        if isinstance(content, str) and content:
            yield content


class OpenAICompatibleProvider(LLMProvider):
    """Driver for chat-completion backends with OpenAI framing.

    Hidden design decisions:
    - Bearer authentication
    - Message format (already the canonical ``{role, content}`` pairs)
    - Discovery via ``GET /v1/models``
    """

    base_url: ClassVar[str]
    completions_path: ClassVar[str] = "/v1/chat/completions"
    models_path: ClassVar[str | None] = "/v1/models"

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def build_request(self, history: Sequence[Message]) -> httpx.Request:
        body = {
            "model": self._model,
            "messages": [message.to_wire() for message in history],
            "stream": True,
        }
        return self._client.build_request(
            "POST",
            self.base_url + self.completions_path,
            json=body,
            headers={**self.auth_headers(), "Content-Type": "application/json"},
        )

    def parse_stream(self, body: StreamingBody) -> Iterator[str]:
        return parse_chat_completion_stream(body.lines(), self.display_name)

    def build_models_request(self) -> httpx.Request | None:
        if self.models_path is None:
            return None
        return self._client.build_request(
            "GET", self.base_url + self.models_path, headers=self.auth_headers()
        )

    def accepts_model(self, model_id: str) -> bool:
        """Filter for discovered ids (all accepted by default)."""
        return True

    def parse_models(self, payload: Any) -> list[ModelDescriptor]:
        models = []
        for item in payload.get("data") or []:
            model_id = self.normalize_model_id(item.get("id", ""))
            if model_id and self.accepts_model(model_id):
                models.append(ModelDescriptor(id=model_id, display_name=model_id))
        return models


class ChatGPTProvider(OpenAICompatibleProvider):
    """OpenAI ChatGPT models."""

    name = "chatgpt"
    display_name = "ChatGPT"
    base_url = "https://api.openai.com"
    fallback_models = (
        ModelDescriptor(id="gpt-4o", display_name="GPT-4o", description="Most capable multimodal model"),
        ModelDescriptor(id="gpt-4o-mini", display_name="GPT-4o Mini", description="Fast and affordable"),
        ModelDescriptor(id="gpt-4-turbo", display_name="GPT-4 Turbo", description="Advanced reasoning"),
        ModelDescriptor(id="o1-preview", display_name="o1 Preview", description="Reasoning model"),
        ModelDescriptor(id="o1-mini", display_name="o1 Mini", description="Lightweight reasoning"),
    )

    def accepts_model(self, model_id: str) -> bool:
        # Only chat models; embeddings, audio and image models are listed too
        return "gpt" in model_id or "o1" in model_id
