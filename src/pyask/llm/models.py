from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .errors import AskError


class Role(str, Enum):
    """Conversation roles understood by every backend."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single conversation turn.

    Messages are immutable once appended; the ordered sequence is replayed
    verbatim to the backend on every call.
    """

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Role of the message sender: 'user' or 'assistant'")
    content: str = Field(description="Content of the message")

    def to_wire(self) -> dict[str, str]:
        """Return the ``{role, content}`` pair used by chat-completion APIs."""
        return {"role": self.role.value, "content": self.content}


class ModelDescriptor(BaseModel):
    """A model offered by a backend.

    Only ``id`` is interpreted programmatically; it is passed back verbatim
    as the selected model.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Model identifier used as selector")
    display_name: str = Field(default="", description="Human readable name")
    description: str = Field(default="", description="Short description")


class StreamOutcome(BaseModel):
    """Result of a streaming call.

    Either the fully delivered text with no error, or the partial (possibly
    empty) text together with the classified error.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    text: str = ""
    error: AskError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
