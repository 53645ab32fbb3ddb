"""
HAProxy statistics fetcher using AIOHTTP.

This module provides the StatsFetcher class that performs the single GET of
the CSV statistics page per polling cycle and hands the response body to the
parser as a stream.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import aiohttp
from aiohttp import BasicAuth, ClientSession, ClientTimeout, TCPConnector

from . import __version__
from .config.models import StatsSourceConfig
from .exceptions import ContentError, ErrorHandler, HAProxyStatsdError

logger = logging.getLogger(__name__)

USER_AGENT = f"haproxy-statsd/{__version__}"


class StatsFetcher:
    """
    Fetcher for the HAProxy CSV statistics page.

    The fetcher owns one aiohttp session for the lifetime of the context
    manager. The collector opens a new fetcher for every cycle, so nothing
    is shared between cycles.

    Example:
        ```python
        async with StatsFetcher(config.source) as fetcher:
            async with fetcher.open_report() as stream:
                async for line in stream:
                    ...
        ```
    """

    def __init__(self, config: StatsSourceConfig):
        """
        Initialize the fetcher.

        Args:
            config: Statistics endpoint configuration
        """
        self.config = config
        self.url = str(config.url)
        self._auth: Optional[BasicAuth] = (
            BasicAuth(config.username, config.password)
            if config.has_credentials
            else None
        )
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> StatsFetcher:
        await self._create_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _create_session(self) -> None:
        """Create the aiohttp session; calling it twice has no effect."""
        if self._session is not None:
            return

        timeout = ClientTimeout(
            total=self.config.timeout,
            connect=self.config.connect_timeout,
        )
        connector = TCPConnector(limit=1, ssl=self.config.verify_ssl)

        self._session = ClientSession(
            timeout=timeout,
            connector=connector,
            headers={"User-Agent": USER_AGENT},
            raise_for_status=False,  # status handled in open_report
        )

    async def close(self) -> None:
        """Close the session and cleanup resources."""
        if self._session:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def open_report(self) -> AsyncIterator[aiohttp.StreamReader]:
        """
        GET the statistics page and yield its body as a line stream.

        The response is released when the context exits, whether the body
        was read to the end or parsing stopped early.

        Yields:
            The response body stream

        Raises:
            HAProxyStatsdError: Transport failure or non-success status,
                including failures while the body is being read (ContentError
                for lines too long to buffer)
        """
        if self._session is None:
            await self._create_session()
        assert self._session is not None

        logger.debug(f"Fetching statistics from {self.url}")
        try:
            async with self._session.get(self.url, auth=self._auth) as response:
                if not 200 <= response.status < 300:
                    raise ErrorHandler.handle_http_status_error(
                        response.status,
                        response.reason or "",
                        self.url,
                        dict(response.headers),
                    )
                yield response.content
        except HAProxyStatsdError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ErrorHandler.handle_aiohttp_error(e, self.url) from e
        except ValueError as e:
            # StreamReader raises a bare ValueError for lines over its limit
            raise ContentError(f"Unreadable report body: {e}", url=self.url) from e
