"""
Unit tests for the fetcher module.

Tests for the StatsFetcher class, basic authentication and the mapping of
transport failures onto the exception hierarchy.
"""

import asyncio

import aiohttp
import pytest
from yarl import URL

from conftest import STATS_URL
from haproxy_statsd import __version__
from haproxy_statsd.config import StatsSourceConfig
from haproxy_statsd.exceptions import (
    AuthenticationError,
    ConnectionError,
    ContentError,
    HTTPError,
    NotFoundError,
    ServerError,
    TimeoutError,
)
from haproxy_statsd.fetcher import StatsFetcher


async def read_report(fetcher: StatsFetcher) -> str:
    async with fetcher.open_report() as stream:
        return (await stream.read()).decode("utf-8")


class TestStatsFetcher:
    """Test the StatsFetcher class."""

    @pytest.mark.asyncio
    async def test_context_manager(self, source_config):
        """Test the session lives exactly as long as the context."""
        async with StatsFetcher(source_config) as fetcher:
            assert fetcher._session is not None

        assert fetcher._session is None

    @pytest.mark.asyncio
    async def test_fetch_success(self, source_config, mock_aiohttp, sample_report):
        """Test the body is streamed back unchanged."""
        mock_aiohttp.get(STATS_URL, status=200, body=sample_report)

        async with StatsFetcher(source_config) as fetcher:
            body = await read_report(fetcher)

        assert body == sample_report

    @pytest.mark.asyncio
    async def test_stream_lines(self, source_config, mock_aiohttp):
        """Test the stream can be iterated line by line."""
        mock_aiohttp.get(STATS_URL, status=200, body="# header\nrow1\nrow2\n")

        async with StatsFetcher(source_config) as fetcher:
            async with fetcher.open_report() as stream:
                lines = [line async for line in stream]

        assert lines == [b"# header\n", b"row1\n", b"row2\n"]

    @pytest.mark.asyncio
    async def test_basic_auth_sent(self, source_config, mock_aiohttp):
        """Test credentials are passed as BasicAuth."""
        mock_aiohttp.get(STATS_URL, status=200, body="")

        async with StatsFetcher(source_config) as fetcher:
            await read_report(fetcher)

        call = mock_aiohttp.requests[("GET", URL(STATS_URL))][0]
        assert call.kwargs["auth"] == aiohttp.BasicAuth("admin", "s3cret")

    @pytest.mark.asyncio
    async def test_no_auth_without_credentials(self, mock_aiohttp):
        """Test empty credentials send no Authorization."""
        mock_aiohttp.get(STATS_URL, status=200, body="")
        config = StatsSourceConfig(url=STATS_URL)

        async with StatsFetcher(config) as fetcher:
            await read_report(fetcher)

        call = mock_aiohttp.requests[("GET", URL(STATS_URL))][0]
        assert call.kwargs["auth"] is None

    def test_user_agent(self, source_config):
        """Test the version is part of the User-Agent."""
        from haproxy_statsd.fetcher import USER_AGENT

        assert USER_AGENT == f"haproxy-statsd/{__version__}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_class",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (500, ServerError),
            (503, ServerError),
            (400, HTTPError),
        ],
    )
    async def test_http_status_errors(self, source_config, mock_aiohttp, status, error_class):
        """Test non-success statuses raise the matching HTTPError."""
        mock_aiohttp.get(STATS_URL, status=status)

        async with StatsFetcher(source_config) as fetcher:
            with pytest.raises(error_class) as exc_info:
                await read_report(fetcher)

        assert exc_info.value.status_code == status
        assert exc_info.value.url == STATS_URL

    @pytest.mark.asyncio
    async def test_connection_refused(self, source_config, mock_aiohttp):
        """Test unreachable sources raise ConnectionError."""
        mock_aiohttp.get(STATS_URL, exception=aiohttp.ClientConnectionError("Connection refused"))

        async with StatsFetcher(source_config) as fetcher:
            with pytest.raises(ConnectionError):
                await read_report(fetcher)

    @pytest.mark.asyncio
    async def test_timeout(self, source_config, mock_aiohttp):
        """Test timeouts raise TimeoutError."""
        mock_aiohttp.get(STATS_URL, exception=asyncio.TimeoutError())

        async with StatsFetcher(source_config) as fetcher:
            with pytest.raises(TimeoutError):
                await read_report(fetcher)

    @pytest.mark.asyncio
    async def test_payload_error(self, source_config, mock_aiohttp):
        """Test payload failures raise ContentError."""
        mock_aiohttp.get(STATS_URL, exception=aiohttp.ClientPayloadError("truncated"))

        async with StatsFetcher(source_config) as fetcher:
            with pytest.raises(ContentError):
                await read_report(fetcher)

    @pytest.mark.asyncio
    async def test_body_errors_pass_through(self, source_config, mock_aiohttp):
        """Test errors raised while consuming the stream are not rewrapped."""
        mock_aiohttp.get(STATS_URL, status=200, body="x\n")

        async with StatsFetcher(source_config) as fetcher:
            with pytest.raises(KeyError):
                async with fetcher.open_report():
                    raise KeyError("parser bug")

    @pytest.mark.asyncio
    async def test_oversized_line(self, source_config, mock_aiohttp):
        """Test a line over the stream buffer limit raises ContentError."""
        mock_aiohttp.get(STATS_URL, status=200, body="<html>" + "x" * 300_000 + "</html>\n")

        async with StatsFetcher(source_config) as fetcher:
            with pytest.raises(ContentError, match="Unreadable report body"):
                async with fetcher.open_report() as stream:
                    async for _ in stream:
                        pass
