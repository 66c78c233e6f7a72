import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Any, ClassVar

import httpx

from .errors import APIError, AskError, TransportError, classify_status
from .models import Message, ModelDescriptor, StreamOutcome
from .sinks import StreamSink
from .transport import (
    DEFAULT_TRANSPORT,
    StreamingBody,
    TransportSettings,
    create_http_client,
    describe_http_error,
    open_stream,
)

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which backend is talking.
    Each backend is a small driver supplying:
    - build_request: endpoint, auth headers and JSON body for a history
    - parse_stream: the backend's framing turned into text fragments
    - classify_error: HTTP status to error class

    Everything else (transport, error translation, sink forwarding, model
    discovery fallback) is shared here.

    An instance is bound to one credential and one model id; switching model
    means constructing a new instance.

    Supports the context manager protocol for resource cleanup:
        with provider:
            outcome = provider.stream_with_history(history, sink)
    """

    name: ClassVar[str]
    display_name: ClassVar[str]
    fallback_models: ClassVar[tuple[ModelDescriptor, ...]]

    def __init__(
        self,
        api_key: str,
        model: str = "",
        *,
        http_client: httpx.Client | None = None,
        settings: TransportSettings | None = None,
    ):
        """Initialize the provider.

        Args:
            api_key: Static credential for the backend
            model: Model id (empty uses the first fallback model)
            http_client: Pre-built client (tests inject a mock transport)
            settings: Timeouts for the default client
        """
        self._api_key = api_key
        self._model = self.normalize_model_id(model) or self.fallback_models[0].id
        self._settings = settings or DEFAULT_TRANSPORT
        self._owns_client = http_client is None
        self._client = http_client or create_http_client(self._settings)

    @property
    def model(self) -> str:
        """Get the selected model id."""
        return self._model

    @classmethod
    def normalize_model_id(cls, model_id: str) -> str:
        """Strip structural prefixes so the id can be used as a plain selector."""
        return model_id.strip()

    @abstractmethod
    def build_request(self, history: Sequence[Message]) -> httpx.Request:
        """Build the streaming request carrying the full history."""

    @abstractmethod
    def parse_stream(self, body: StreamingBody) -> Iterator[str]:
        """Translate the backend's framing into text fragments."""

    def classify_error(self, status: int, body: str) -> APIError:
        return classify_status(self.display_name, status, body)

    def build_models_request(self) -> httpx.Request | None:
        """Request for model discovery, or None when the backend has none."""
        return None

    def parse_models(self, payload: Any) -> list[ModelDescriptor]:
        return []

    def stream(self, history: Sequence[Message]) -> Iterator[str]:
        """Stream text fragments for ``history``.

        Fragments are yielded as soon as they are parsed. Failures raise
        a subclass of AskError; nothing is yielded after an error status.
        """
        request = self.build_request(history)
        logger.debug(
            "%s: streaming %d message(s) with model %s",
            self.display_name, len(history), self._model,
        )
        try:
            with open_stream(
                self._client, request, self.display_name, self.classify_error, self._settings
            ) as body:
                yield from self.parse_stream(body)
        except httpx.HTTPError as exc:
            raise TransportError(self.display_name, describe_http_error(exc)) from exc

    def stream_with_history(self, history: Sequence[Message], sink: StreamSink) -> StreamOutcome:
        """Send the full history and forward fragments into ``sink``.

        Returns:
            StreamOutcome with the delivered text, and the error if the
            call failed part way (or before any fragment)
        """
        parts: list[str] = []
        try:
            for fragment in self.stream(history):
                parts.append(fragment)
                sink.write(fragment)
        except AskError as exc:
            logger.info("%s: turn failed: %s", self.display_name, exc)
            return StreamOutcome(text="".join(parts), error=exc)
        return StreamOutcome(text="".join(parts))

    def list_models(self) -> list[ModelDescriptor]:
        """Discover available models.

        Never fails: any network error, non-success status, unreadable
        payload or empty result yields the fixed fallback list.
        """
        fallback = list(self.fallback_models)
        if not self._api_key:
            return fallback
        request = self.build_models_request()
        if request is None:
            return fallback

        try:
            response = self._client.send(request)
        except (httpx.HTTPError, RuntimeError) as exc:
            # RuntimeError: the client was closed
            logger.debug("%s: model discovery failed (%s), using fallback", self.display_name, exc)
            return fallback
        if not response.is_success:
            logger.debug(
                "%s: model discovery returned %d, using fallback",
                self.display_name, response.status_code,
            )
            return fallback
        try:
            models = self.parse_models(response.json())
        except (ValueError, TypeError, AttributeError) as exc:
            logger.debug("%s: unreadable model list (%s), using fallback", self.display_name, exc)
            return fallback
        return models or fallback

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "LLMProvider":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self._model!r})"
