from .base import LLMProvider
from .errors import (
    APIError,
    AskError,
    AuthError,
    BillingError,
    ContentBlockedError,
    ModelNotFoundError,
    RateLimitedError,
    TransportError,
    TurnInProgressError,
    UnknownProviderError,
)
from .factory import (
    DEFAULT_MODELS,
    SUPPORTED_PROVIDERS,
    canonical_provider_name,
    create_llm_provider,
)
from .models import Message, ModelDescriptor, Role, StreamOutcome
from .sinks import BufferSink, CallbackSink, StreamSink
from .transport import TransportSettings

__all__ = [
    "APIError",
    "AskError",
    "AuthError",
    "BillingError",
    "BufferSink",
    "CallbackSink",
    "ContentBlockedError",
    "DEFAULT_MODELS",
    "LLMProvider",
    "Message",
    "ModelDescriptor",
    "ModelNotFoundError",
    "RateLimitedError",
    "Role",
    "SUPPORTED_PROVIDERS",
    "StreamOutcome",
    "StreamSink",
    "TransportError",
    "TransportSettings",
    "TurnInProgressError",
    "UnknownProviderError",
    "canonical_provider_name",
    "create_llm_provider",
]
