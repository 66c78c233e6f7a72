"""Session core shared by the blocking and event-loop front ends.

Hides the session state machine: command dispatch, turn execution with
rollback, and the one-turn-at-a-time policy. Front ends only decide where
input comes from and how output is rendered.

Turn lifecycle::

    turn = core.begin_turn(text)      # Idle -> Querying (fast, any thread)
    result = core.execute_turn(turn, sink)   # network call, Querying -> Idle

``run_turn`` does both in one call.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from ..llm.base import LLMProvider
from ..llm.errors import (
    AskError,
    AuthError,
    BillingError,
    ContentBlockedError,
    RateLimitedError,
    TransportError,
    TurnInProgressError,
    is_model_not_found,
)
from ..llm.models import Message, ModelDescriptor, Role
from ..llm.sinks import StreamSink
from .commands import HELP_TEXT, Command, CommandKind, parse_command
from .conversation import Conversation

logger = logging.getLogger(__name__)

# Builds the facade for a /model argument, given the current provider name
ProviderSwitcher = Callable[[str, str], LLMProvider]

BUSY_NOTICE = "A request is still in progress; wait for it to finish."


class CommandResult(BaseModel):
    """What a front end should show (or do) after a command."""

    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    message: str = ""
    is_error: bool = False
    exit: bool = False
    models: list[ModelDescriptor] = Field(default_factory=list)


@dataclass(frozen=True)
class Turn:
    """A turn that has entered the Querying state."""

    message: Message
    history: list[Message]
    provider: LLMProvider


class TurnResult(BaseModel):
    """Outcome of one turn as seen by a front end."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    text: str = ""
    error: AskError | None = None
    error_message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_exception(cls, exc: Exception) -> "TurnResult":
        """Failed result for an exception that escaped the provider."""
        error = exc if isinstance(exc, AskError) else AskError(f"{type(exc).__name__}: {exc}")
        return cls(error=error, error_message=describe_error(error))


def describe_error(error: AskError, model: str = "") -> str:
    """User-facing text for a failed turn.

    Model-not-found failures get a distinct hint.
    """
    if is_model_not_found(error):
        name = f"'{model}' " if model else ""
        return (
            f"Model {name}not found: {error}\n"
            "Use /models to list available models, or /model <name> to switch."
        )
    if isinstance(error, AuthError):
        return f"Authentication failed: {error}\nCheck your API key."
    if isinstance(error, BillingError):
        return f"Billing problem: {error}\nCheck your account balance."
    if isinstance(error, RateLimitedError):
        return f"Rate limited: {error}\nWait a moment and send the message again."
    if isinstance(error, ContentBlockedError):
        return f"Response blocked: {error}"
    if isinstance(error, TransportError):
        return f"Connection failed: {error}"
    return f"Error: {error}"


class SessionCore:
    """Conversation plus the provider facade it talks to.

    Only one turn may be in flight. While it is, every input (message or
    command) is rejected with TurnInProgressError; nothing is queued.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        switcher: ProviderSwitcher | None = None,
        conversation: Conversation | None = None,
    ):
        self._provider = provider
        self._switcher = switcher
        self._conversation = conversation or Conversation()
        self._turn_lock = threading.Lock()

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @property
    def model(self) -> str:
        return self._provider.model

    @property
    def model_label(self) -> str:
        return f"{self._provider.name}/{self._provider.model}"

    @property
    def conversation(self) -> Conversation:
        return self._conversation

    @property
    def busy(self) -> bool:
        return self._turn_lock.locked()

    def _ensure_idle(self) -> None:
        if self.busy:
            raise TurnInProgressError(BUSY_NOTICE)

    # Commands

    def dispatch(self, text: str) -> CommandResult:
        """Execute a command line.

        Raises:
            TurnInProgressError: If a turn is in flight
            ValueError: If ``text`` is not a command
        """
        command = parse_command(text)
        if command is None:
            raise ValueError(f"not a command: {text!r}")
        return self.execute_command(command)

    def execute_command(self, command: Command) -> CommandResult:
        self._ensure_idle()
        logger.debug("Command %s %r", command.name, command.argument)

        if command.kind is CommandKind.HELP:
            return CommandResult(kind=command.kind, message=HELP_TEXT)
        if command.kind is CommandKind.CLEAR:
            self._conversation.clear()
            return CommandResult(kind=command.kind, message="Conversation cleared.")
        if command.kind is CommandKind.EXIT:
            return CommandResult(kind=command.kind, message="Goodbye!", exit=True)
        if command.kind is CommandKind.MODEL:
            if not command.argument:
                return CommandResult(kind=command.kind, message=f"Current model: {self.model_label}")
            return self.switch_model(command.argument)
        if command.kind is CommandKind.MODELS:
            return self.list_models()
        return CommandResult(
            kind=command.kind,
            message=f"Unknown command: {command.name}. Type /help for available commands.",
            is_error=True,
        )

    def switch_model(self, spec: str) -> CommandResult:
        """Replace the facade; the conversation history is kept."""
        self._ensure_idle()
        if self._switcher is None:
            return CommandResult(
                kind=CommandKind.MODEL, message="Model switching is not available.", is_error=True
            )
        try:
            new_provider = self._switcher(spec, self.provider_name)
        except AskError as exc:
            logger.info("Model switch to %r failed: %s", spec, exc)
            return CommandResult(kind=CommandKind.MODEL, message=f"Cannot switch model: {exc}", is_error=True)

        old_provider, self._provider = self._provider, new_provider
        if old_provider is not new_provider:
            old_provider.close()
        logger.info("Switched model to %s", self.model_label)
        return CommandResult(kind=CommandKind.MODEL, message=f"Switched to {self.model_label}")

    def list_models(self) -> CommandResult:
        """Discover models while holding the turn guard.

        Discovery may run off the UI thread; holding the guard rejects a
        /model switch that would close the provider mid-request.

        Raises:
            TurnInProgressError: If a turn or another discovery is in flight
        """
        if not self._turn_lock.acquire(blocking=False):
            raise TurnInProgressError(BUSY_NOTICE)
        try:
            models = self._provider.list_models()
        finally:
            self._turn_lock.release()
        lines = [f"Models for {self._provider.display_name}:"]
        for descriptor in models:
            marker = "*" if descriptor.id == self.model else " "
            label = descriptor.id
            if descriptor.display_name and descriptor.display_name != descriptor.id:
                label += f"  ({descriptor.display_name})"
            lines.append(f" {marker} {label}")
        return CommandResult(kind=CommandKind.MODELS, message="\n".join(lines), models=models)

    # Turns

    def begin_turn(self, text: str) -> Turn:
        """Append the user message and enter the Querying state.

        Raises:
            ValueError: If ``text`` is empty
            TurnInProgressError: If a turn is already in flight
        """
        content = text.strip()
        if not content:
            raise ValueError("empty input")
        if not self._turn_lock.acquire(blocking=False):
            raise TurnInProgressError(BUSY_NOTICE)
        message = Message(role=Role.USER, content=content)
        self._conversation.append(message)
        return Turn(message=message, history=self._conversation.snapshot(), provider=self._provider)

    def execute_turn(self, turn: Turn, sink: StreamSink) -> TurnResult:
        """Run the network call of ``turn`` and return to Idle.

        On success the assistant reply is committed. On failure the pending
        user message is rolled back so the same input can be retried.
        """
        try:
            outcome = turn.provider.stream_with_history(turn.history, sink)
        except Exception:
            self._conversation.remove_last(turn.message)
            self._turn_lock.release()
            raise

        try:
            if outcome.ok:
                self._conversation.append(Message(role=Role.ASSISTANT, content=outcome.text))
                return TurnResult(text=outcome.text)
            self._conversation.remove_last(turn.message)
            return TurnResult(
                text=outcome.text,
                error=outcome.error,
                error_message=describe_error(outcome.error, turn.provider.model),
            )
        finally:
            self._turn_lock.release()

    def run_turn(self, text: str, sink: StreamSink) -> TurnResult:
        return self.execute_turn(self.begin_turn(text), sink)

    def close(self) -> None:
        self._provider.close()
