"""HTTP transport for backend calls.

Hides the design decisions about:
- TLS configuration (certificate verification is never disabled)
- Timeout layering (connect / read / overall deadline)
- Translation of httpx failures into pyask errors
"""

import ssl
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TypeVar

import httpx

from .errors import APIError, TransportError

T = TypeVar("T")


@dataclass(frozen=True)
class TransportSettings:
    """Timeouts applied to every backend request, in seconds.

    ``read_timeout`` bounds both the wait for response headers and the idle
    gap between body bytes, so a long but healthy stream is only bounded by
    ``total_timeout``.
    """

    total_timeout: float = 120.0
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    write_timeout: float = 30.0
    pool_timeout: float = 10.0
    keepalive_expiry: float = 90.0

    def httpx_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.pool_timeout,
        )


DEFAULT_TRANSPORT = TransportSettings()


def create_ssl_context() -> ssl.SSLContext:
    """Certificate-verifying context with TLS 1.2 as the floor."""
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


def create_http_client(settings: TransportSettings = DEFAULT_TRANSPORT) -> httpx.Client:
    """Create the client shared by all calls of one provider instance."""
    return httpx.Client(
        verify=create_ssl_context(),
        timeout=settings.httpx_timeout(),
        limits=httpx.Limits(keepalive_expiry=settings.keepalive_expiry),
    )


def describe_http_error(exc: httpx.HTTPError) -> str:
    """Short, user-facing description of an httpx failure."""
    if isinstance(exc, httpx.ConnectTimeout):
        return "connection timed out"
    if isinstance(exc, httpx.ReadTimeout):
        return "timed out waiting for the response"
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    if isinstance(exc, httpx.ConnectError):
        return f"connection failed: {exc}" if str(exc) else "connection failed"
    detail = str(exc)
    return f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__


def with_deadline(items: Iterable[T], provider: str, deadline: float) -> Iterator[T]:
    """Re-yield ``items`` until the monotonic ``deadline`` passes."""
    for item in items:
        if time.monotonic() > deadline:
            raise TransportError(provider, "request exceeded the overall timeout")
        yield item


class StreamingBody:
    """Body of a successful streaming response, bounded by a deadline."""

    def __init__(self, response: httpx.Response, provider: str, deadline: float) -> None:
        self._response = response
        self._provider = provider
        self._deadline = deadline

    def lines(self) -> Iterator[str]:
        """Line-scanned body; partial lines are held until completed."""
        return with_deadline(self._response.iter_lines(), self._provider, self._deadline)

    def chunks(self) -> Iterator[bytes]:
        """Raw byte chunks as delivered by the transport."""
        return with_deadline(self._response.iter_bytes(), self._provider, self._deadline)


@contextmanager
def open_stream(
    client: httpx.Client,
    request: httpx.Request,
    provider: str,
    classify: Callable[[int, str], APIError],
    settings: TransportSettings = DEFAULT_TRANSPORT,
) -> Iterator[StreamingBody]:
    """Send ``request`` and yield its body once a success status is known.

    A non-success status is classified and raised before any byte of the
    body is handed out. httpx failures are translated into TransportError.
    """
    deadline = time.monotonic() + settings.total_timeout
    try:
        response = client.send(request, stream=True)
    except httpx.HTTPError as exc:
        raise TransportError(provider, describe_http_error(exc)) from exc

    try:
        if not response.is_success:
            try:
                body = response.read().decode("utf-8", errors="replace")
            except httpx.HTTPError:
                body = ""
            raise classify(response.status_code, body)
        yield StreamingBody(response, provider, deadline)
    except httpx.HTTPError as exc:
        raise TransportError(provider, describe_http_error(exc)) from exc
    finally:
        response.close()
