"""Pytest configuration and shared fixtures."""
import json
import os
import threading
from collections.abc import Callable, Iterable

import httpx
import pytest

from pyask.llm.errors import AskError
from pyask.llm.models import Message, ModelDescriptor, StreamOutcome

PROVIDER_ENV_VARS = (
    "ASK_DEFAULT_PROVIDER",
    "ASK_PROFILES",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "DEEPSEEK_API_KEY",
    "DEEPSEEK_MODEL",
    "MISTRAL_API_KEY",
    "MISTRAL_MODEL",
    "DASHSCOPE_API_KEY",
    "DASHSCOPE_MODEL",
    "LOG_LEVEL",
)


def sse(*payloads: object, done: bool = False) -> bytes:
    """Encode payloads as ``data:`` lines (dicts are JSON encoded)."""
    lines = []
    for payload in payloads:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        lines.append(f"data: {text}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def openai_delta(content: str) -> dict:
    return {"choices": [{"index": 0, "delta": {"content": content}}]}


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """httpx client whose requests are answered by ``handler``."""
    return httpx.Client(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """Mock transport handler returning canned responses and recording requests."""

    def __init__(self, *responses: httpx.Response | Exception):
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


class FakeProvider:
    """Scripted stand-in for a provider facade.

    Each call to ``stream_with_history`` consumes the next script entry: a
    list of fragments (success) or a tuple ``(fragments, error)``. When
    ``gate`` is set, the call blocks after ``started`` is signalled until
    the gate opens.
    """

    display_name = "Fake"

    def __init__(
        self,
        name: str = "fake",
        model: str = "fake-model",
        script: Iterable[list[str] | tuple[list[str], AskError]] = (),
        models: Iterable[str] = ("fake-model", "fake-large"),
        gate: threading.Event | None = None,
    ):
        self.name = name
        self.model = model
        self._script = list(script)
        self._models = [ModelDescriptor(id=m, display_name=m) for m in models]
        self.gate = gate
        self.started = threading.Event()
        self.histories: list[list[Message]] = []
        self.closed = False

    def stream_with_history(self, history, sink) -> StreamOutcome:
        self.histories.append(list(history))
        self.started.set()
        if self.gate is not None:
            self.gate.wait(5)
        entry = self._script.pop(0) if self._script else ["ok"]
        fragments, error = entry if isinstance(entry, tuple) else (entry, None)
        for fragment in fragments:
            sink.write(fragment)
        return StreamOutcome(text="".join(fragments), error=error)

    def list_models(self) -> list[ModelDescriptor]:
        return list(self._models)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider settings inherited from the developer's environment."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY"),
        "chatgpt": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY"),
    }
