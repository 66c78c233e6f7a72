"""Unit tests for the HTTP transport helpers."""
import ssl
import time

import httpx
import pytest
from conftest import RecordingHandler, mock_client

from pyask.llm.errors import AuthError, TransportError, classify_status
from pyask.llm.transport import (
    TransportSettings,
    create_ssl_context,
    describe_http_error,
    open_stream,
    with_deadline,
)


def classify(status: int, body: str):
    return classify_status("Test", status, body)


class TestTransportSettings:
    """Tests for TransportSettings."""

    def test_defaults(self):
        settings = TransportSettings()

        assert settings.total_timeout == 120.0
        assert settings.connect_timeout == 10.0

    def test_httpx_timeout(self):
        timeout = TransportSettings(connect_timeout=3, read_timeout=7).httpx_timeout()

        assert timeout.connect == 3
        assert timeout.read == 7

    def test_tls_verification_kept(self):
        context = create_ssl_context()

        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.minimum_version >= ssl.TLSVersion.TLSv1_2


class TestOpenStream:
    """Tests for open_stream."""

    def test_success_yields_lines(self):
        client = mock_client(RecordingHandler(httpx.Response(200, content=b"a\nb\n")))
        request = client.build_request("GET", "https://example.test/stream")

        with open_stream(client, request, "Test", classify) as body:
            assert list(body.lines()) == ["a", "b"]

    def test_error_status_raised_before_body(self):
        client = mock_client(RecordingHandler(httpx.Response(401, text="invalid key")))
        request = client.build_request("GET", "https://example.test/stream")

        with pytest.raises(AuthError) as excinfo:
            with open_stream(client, request, "Test", classify):
                pytest.fail("body must not be handed out")
        assert excinfo.value.body == "invalid key"

    def test_timeout_translated(self):
        client = mock_client(RecordingHandler(httpx.ConnectTimeout("slow")))
        request = client.build_request("GET", "https://example.test/stream")

        with pytest.raises(TransportError, match="connection timed out"):
            with open_stream(client, request, "Test", classify):
                pass


class TestDeadline:
    """Tests for the overall deadline."""

    def test_expired_deadline_raises(self):
        with pytest.raises(TransportError, match="overall timeout"):
            list(with_deadline(iter([1, 2]), "Test", time.monotonic() - 1))

    def test_open_deadline_passes_items(self):
        assert list(with_deadline(iter([1, 2]), "Test", time.monotonic() + 60)) == [1, 2]


class TestDescribeHttpError:
    """Tests for describe_http_error."""

    def test_read_timeout(self):
        assert describe_http_error(httpx.ReadTimeout("x")) == "timed out waiting for the response"

    def test_other_error_names_type(self):
        assert describe_http_error(httpx.RemoteProtocolError("peer closed")) == (
            "RemoteProtocolError: peer closed"
        )
