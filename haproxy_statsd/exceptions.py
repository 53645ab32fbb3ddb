"""
Exception hierarchy for the HAProxy to StatsD bridge.

This module provides custom exceptions and the error mapping used to turn
aiohttp failures and HTTP status codes into errors that the collector can
log and isolate per polling cycle.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import aiohttp


class HAProxyStatsdError(Exception):
    """
    Base exception for all collector operations.

    Attributes:
        message: Human-readable error message
        url: URL that caused the error (if applicable)
        details: Additional error details as keyword arguments
    """

    def __init__(self, message: str, url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.details = kwargs


class NetworkError(HAProxyStatsdError):
    """
    Raised for network-related errors.

    Covers DNS resolution failures, malformed request URLs and other
    low-level problems that prevent the request from being made.
    """

    pass


class TimeoutError(HAProxyStatsdError):
    """
    Raised when fetching the statistics report times out.

    Attributes:
        timeout_value: The timeout value that was exceeded (in seconds)
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_value: Optional[float] = None,
    ) -> None:
        super().__init__(message, url)
        self.timeout_value = timeout_value


class ConnectionError(HAProxyStatsdError):
    """Raised when the statistics endpoint cannot be reached."""

    pass


class HTTPError(HAProxyStatsdError):
    """Raised when the statistics endpoint answers with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code
        self.headers = headers or {}


class AuthenticationError(HTTPError):
    """Raised for authentication-related errors (401, 403)."""

    pass


class NotFoundError(HTTPError):
    """Raised when the statistics page is not found (404)."""

    pass


class ServerError(HTTPError):
    """Raised for server errors (5xx)."""

    pass


class ContentError(HAProxyStatsdError):
    """Raised when the report body cannot be read to the end."""

    pass


class ParseError(HAProxyStatsdError):
    """
    Raised when a report line violates the CSV contract.

    Attributes:
        line_number: 1-based line number in the report (if known)
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, url, **kwargs)
        self.line_number = line_number


class RowWidthError(ParseError):
    """Raised when a row has fewer fields than the extractor reads."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        width: int = 0,
        required: int = 0,
    ) -> None:
        super().__init__(message, line_number)
        self.width = width
        self.required = required


class FieldCountError(ParseError):
    """Raised when a row's width differs from the first row of the report."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        width: int = 0,
        expected: int = 0,
    ) -> None:
        super().__init__(message, line_number)
        self.width = width
        self.expected = expected


class ValueParseError(ParseError):
    """Raised when a numeric field does not hold a base-10 integer."""

    def __init__(
        self,
        message: str,
        field: str,
        value: str,
        line_number: Optional[int] = None,
    ) -> None:
        super().__init__(message, line_number)
        self.field = field
        self.value = value


class SinkError(HAProxyStatsdError):
    """Raised when the StatsD client cannot be set up or used."""

    pass


class ConfigurationError(HAProxyStatsdError):
    """Raised when configuration is missing, unreadable or invalid."""

    pass


class ErrorHandler:
    """
    Utility class for categorizing transport errors.

    Converts aiohttp exceptions and HTTP status codes to the custom
    exception hierarchy.
    """

    @staticmethod
    def handle_aiohttp_error(
        error: Exception, url: Optional[str] = None
    ) -> HAProxyStatsdError:
        """
        Convert aiohttp exceptions to custom HAProxyStatsdError subclasses.

        Args:
            error: The original aiohttp exception
            url: The URL that caused the error

        Returns:
            Appropriate HAProxyStatsdError subclass
        """
        if isinstance(error, HAProxyStatsdError):
            return error

        elif isinstance(error, asyncio.TimeoutError):
            return TimeoutError(f"Request timed out: {error}", url=url)

        elif isinstance(error, aiohttp.ClientConnectionError):
            return ConnectionError(f"Connection error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientPayloadError):
            return ContentError(f"Payload error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientResponseError):
            return ErrorHandler.handle_http_status_error(
                error.status, str(error), url, getattr(error, "headers", None)
            )

        elif isinstance(error, aiohttp.InvalidURL):
            return NetworkError(f"Invalid URL: {error}", url=url)

        else:
            return NetworkError(f"Unexpected network error: {error}", url=url)

    @staticmethod
    def handle_http_status_error(
        status_code: int,
        message: str,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HTTPError:
        """
        Create appropriate HTTPError subclass based on status code.

        Args:
            status_code: HTTP status code
            message: Error message
            url: The URL that caused the error
            headers: Response headers

        Returns:
            Appropriate HTTPError subclass
        """
        if status_code == 401:
            return AuthenticationError(
                f"Authentication required: {message}", status_code, url, headers
            )

        elif status_code == 403:
            return AuthenticationError(
                f"Access forbidden: {message}", status_code, url, headers
            )

        elif status_code == 404:
            return NotFoundError(
                f"Statistics page not found: {message}", status_code, url, headers
            )

        elif 500 <= status_code < 600:
            return ServerError(f"Server error: {message}", status_code, url, headers)

        else:
            return HTTPError(
                f"Unexpected status {status_code}: {message}", status_code, url, headers
            )
