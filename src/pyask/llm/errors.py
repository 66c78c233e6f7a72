"""Error hierarchy for backend calls.

Transport and HTTP failures are classified here so that callers can react
to them without looking at status codes. None of these are retried
automatically; retrying is left to the user (re-issue the turn).
"""

MODEL_NOT_FOUND_PHRASES = (
    "model not found",
    "model_not_found",
    "not_found_error",
    "does not exist",
    "invalid model",
    "unknown model",
    "no such model",
    "is not found",
    "not supported for generatecontent",
)


class AskError(Exception):
    """Base for all pyask errors."""


class TransportError(AskError):
    """Connect, TLS, timeout or read failure while talking to a backend."""

    def __init__(self, provider: str, detail: str) -> None:
        self.provider = provider
        self.detail = detail
        super().__init__(f"{provider}: {detail}")


class APIError(AskError):
    """A backend answered with a non-success status (GenericAPIError)."""

    def __init__(self, provider: str, status: int | None, body: str) -> None:
        self.provider = provider
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"{provider} API error: {body}")
        else:
            super().__init__(f"{provider} API error (status {status}): {body}")


class AuthError(APIError):
    """HTTP 401: the credential is invalid."""


class BillingError(APIError):
    """HTTP 402: insufficient balance."""


class RateLimitedError(APIError):
    """HTTP 429: too many requests."""


class ModelNotFoundError(APIError):
    """The backend rejected the selected model id."""


class ContentBlockedError(APIError):
    """The backend refused to produce content (safety filters)."""


class TurnInProgressError(AskError):
    """A turn is already in flight; only one may run at a time."""


class UnknownProviderError(AskError):
    """No backend is registered under the requested name."""

    def __init__(self, provider: str, supported: tuple[str, ...] = ()) -> None:
        self.provider = provider
        self.supported = supported
        message = f"unknown provider: {provider!r}"
        if supported:
            message += f" (supported: {', '.join(supported)})"
        super().__init__(message)


def looks_like_model_not_found(text: str) -> bool:
    """Return True if an error text matches a known model-not-found phrase."""
    lowered = text.lower()
    return any(phrase in lowered for phrase in MODEL_NOT_FOUND_PHRASES)


def classify_status(provider: str, status: int, body: str) -> APIError:
    """Map a terminal HTTP status to the matching error class.

    Args:
        provider: Display name of the backend
        status: HTTP status code (non-2xx)
        body: Raw response body

    Returns:
        The classified error; never raises
    """
    if status == 401:
        return AuthError(provider, status, body)
    if status == 402:
        return BillingError(provider, status, body)
    if status == 429:
        return RateLimitedError(provider, status, body)
    if status == 404 or looks_like_model_not_found(body):
        return ModelNotFoundError(provider, status, body)
    return APIError(provider, status, body)


def is_model_not_found(error: BaseException) -> bool:
    """Semantic check used when presenting errors to the user."""
    if isinstance(error, ModelNotFoundError):
        return True
    return looks_like_model_not_found(str(error))
