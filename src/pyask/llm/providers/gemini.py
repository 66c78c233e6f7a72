"""Google Gemini LLM provider implementation.

Uses the Generative Language REST API with server-sent events
(``streamGenerateContent?alt=sse``).
Reference: https://ai.google.dev/api/generate-content

Note: Gemini can return empty or blocked responses due to safety filtering.
Relaxed safety settings are sent with every request, and a stream that ends
without content is reported as an error rather than an empty success.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

import httpx

from ..base import LLMProvider
from ..errors import APIError, ContentBlockedError
from ..framing import iter_data_events, object_field, object_items
from ..models import Message, ModelDescriptor, Role
from ..transport import StreamingBody

API_BASE = "https://generativelanguage.googleapis.com/v1beta"
MODEL_PREFIX = "models/"

# Default safety settings - relaxed to avoid blocking code-related content
DEFAULT_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_ONLY_HIGH"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_ONLY_HIGH"},
]

# Finish reasons of a normally completed candidate
NORMAL_FINISH_REASONS = {None, "", "FINISH_REASON_UNSPECIFIED", "STOP", "MAX_TOKENS"}


def parse_generate_stream(lines: Iterable[str], provider: str = "Gemini") -> Iterator[str]:
    """Yield candidate text parts until the stream ends (no sentinel).

    Raises:
        ContentBlockedError: If the prompt or a candidate was blocked
        APIError: If the stream ended without any content
    """
    has_content = False
    for event in iter_data_events(lines, sentinel=None):
        feedback = object_field(event, "promptFeedback")
        if feedback.get("blockReason"):
            raise ContentBlockedError(
                provider, None, f"prompt blocked (reason: {feedback['blockReason']})"
            )
        for candidate in object_items(event.get("candidates")):
            content = object_field(candidate, "content")
            for part in object_items(content.get("parts")):
                text = part.get("text")
                if isinstance(text, str) and text:
                    has_content = True
                    yield text
            reason = candidate.get("finishReason")
            if isinstance(reason, str) and reason not in NORMAL_FINISH_REASONS:
                raise ContentBlockedError(
                    provider,
                    None,
                    f"response blocked (reason: {reason}). This may be due to safety filters",
                )
    if not has_content:
        raise APIError(
            provider, None, "no content received from model - response may have been filtered"
        )


class GeminiProvider(LLMProvider):
    """Google Gemini provider.

    Hidden design decisions:
    - ``x-goog-api-key`` authentication
    - Message format conversion (assistant turns use the ``model`` role)
    - ``models/`` namespace prefix stripped from ids
    - Relaxed safety settings
    """

    name = "gemini"
    display_name = "Gemini"
    fallback_models = (
        ModelDescriptor(id="gemini-2.5-flash", display_name="Gemini 2.5 Flash", description="Fast and versatile"),
        ModelDescriptor(id="gemini-2.5-pro", display_name="Gemini 2.5 Pro", description="Advanced reasoning"),
        ModelDescriptor(id="gemini-2.0-flash", display_name="Gemini 2.0 Flash", description="Previous generation fast model"),
        ModelDescriptor(id="gemini-flash-latest", display_name="Gemini Flash Latest", description="Latest Flash release"),
    )

    @classmethod
    def normalize_model_id(cls, model_id: str) -> str:
        model_id = model_id.strip()
        if model_id.startswith(MODEL_PREFIX):
            model_id = model_id[len(MODEL_PREFIX):]
        return model_id

    @staticmethod
    def _convert_messages(history: Sequence[Message]) -> list[dict[str, Any]]:
        return [
            {
                "role": "model" if message.role is Role.ASSISTANT else "user",
                "parts": [{"text": message.content}],
            }
            for message in history
        ]

    def build_request(self, history: Sequence[Message]) -> httpx.Request:
        body = {
            "contents": self._convert_messages(history),
            "safetySettings": DEFAULT_SAFETY_SETTINGS,
        }
        return self._client.build_request(
            "POST",
            f"{API_BASE}/models/{self._model}:streamGenerateContent",
            params={"alt": "sse"},
            json=body,
            headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
        )

    def parse_stream(self, body: StreamingBody) -> Iterator[str]:
        return parse_generate_stream(body.lines(), self.display_name)

    def build_models_request(self) -> httpx.Request | None:
        return self._client.build_request(
            "GET",
            f"{API_BASE}/models",
            params={"pageSize": 1000},
            headers={"x-goog-api-key": self._api_key},
        )

    def parse_models(self, payload: Any) -> list[ModelDescriptor]:
        models = []
        for item in payload.get("models") or []:
            if "generateContent" not in (item.get("supportedGenerationMethods") or []):
                continue
            model_id = self.normalize_model_id(item.get("name", ""))
            if model_id:
                models.append(ModelDescriptor(
                    id=model_id,
                    display_name=item.get("displayName") or model_id,
                    description=item.get("description") or "",
                ))
        return models
