"""
Tests for the exception hierarchy and error mapping.
"""

import asyncio

import aiohttp
import pytest

from haproxy_statsd.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    ContentError,
    ErrorHandler,
    FieldCountError,
    HAProxyStatsdError,
    HTTPError,
    NetworkError,
    NotFoundError,
    ParseError,
    RowWidthError,
    ServerError,
    SinkError,
    TimeoutError,
    ValueParseError,
)

URL = "http://lb/stats;csv"


class TestHierarchy:
    """Test every error can be caught at the cycle boundary."""

    @pytest.mark.parametrize(
        "error_class",
        [NetworkError, ConnectionError, ContentError, SinkError, ConfigurationError, ParseError],
    )
    def test_base_class(self, error_class):
        assert issubclass(error_class, HAProxyStatsdError)

    @pytest.mark.parametrize("error_class", [RowWidthError, FieldCountError, ValueParseError])
    def test_parse_errors(self, error_class):
        assert issubclass(error_class, ParseError)

    def test_details(self):
        error = HAProxyStatsdError("failed", url=URL, attempt=2)
        assert str(error) == "failed"
        assert error.url == URL
        assert error.details == {"attempt": 2}

    def test_value_parse_error_attributes(self):
        error = ValueParseError("bad", field="scur", value="x", line_number=4)
        assert (error.field, error.value, error.line_number) == ("scur", "x", 4)


class TestHandleAiohttpError:
    """Test mapping of aiohttp failures."""

    def test_timeout(self):
        error = ErrorHandler.handle_aiohttp_error(asyncio.TimeoutError(), URL)
        assert isinstance(error, TimeoutError)
        assert error.url == URL

    def test_server_timeout_is_timeout(self):
        error = ErrorHandler.handle_aiohttp_error(aiohttp.ServerTimeoutError("slow"), URL)
        assert isinstance(error, TimeoutError)

    def test_connection(self):
        error = ErrorHandler.handle_aiohttp_error(aiohttp.ClientConnectionError("refused"), URL)
        assert isinstance(error, ConnectionError)

    def test_payload(self):
        error = ErrorHandler.handle_aiohttp_error(aiohttp.ClientPayloadError("short"), URL)
        assert isinstance(error, ContentError)

    def test_invalid_url(self):
        error = ErrorHandler.handle_aiohttp_error(aiohttp.InvalidURL("::"), URL)
        assert isinstance(error, NetworkError)

    def test_unknown(self):
        error = ErrorHandler.handle_aiohttp_error(aiohttp.ClientError("odd"), URL)
        assert type(error) is NetworkError

    def test_existing_error_returned(self):
        original = SinkError("closed")
        assert ErrorHandler.handle_aiohttp_error(original) is original


class TestHandleHttpStatusError:
    """Test mapping of status codes."""

    @pytest.mark.parametrize(
        "status, error_class",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (500, ServerError),
            (502, ServerError),
            (429, HTTPError),
        ],
    )
    def test_status(self, status, error_class):
        error = ErrorHandler.handle_http_status_error(status, "message", URL, {"Server": "haproxy"})
        assert type(error) is error_class
        assert error.status_code == status
        assert error.headers == {"Server": "haproxy"}
