#!/usr/bin/env python3
"""
ColorWall Engine - HTTP Fetcher

Thin wrapper over a shared aiohttp session. Every call is a single GET with
its own timeout; there are no retries. Failures of any kind surface as
TransportError so callers only have one exception type to handle.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from config_loader import HttpConfig
from exceptions import TransportError

logger = logging.getLogger("colorwall")


class HttpFetcher:
    """
    Shared request executor for all source adapters.

    Usage:
        async with HttpFetcher(config) as fetcher:
            html = await fetcher.get_text(url, params={"q": "sky"}, timeout=15)

    An existing ClientSession can be injected; it is then left open on close().
    """

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or HttpConfig()
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=self.config.connector_limit)
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this fetcher created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def get_text(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        GET ``url`` and return the decoded body.

        Args:
            url: Absolute URL to fetch.
            params: Query string parameters.
            headers: Extra headers, merged over the configured User-Agent and
                Accept-Language.
            timeout: Total timeout in seconds. Defaults to http.timeout_sec.

        Raises:
            TransportError: timeout, connection error or non-2xx status.
        """
        merged_headers = self.config.base_headers()
        if headers:
            merged_headers.update(headers)

        total = timeout if timeout is not None else self.config.timeout_sec
        session = self._get_session()

        try:
            async with session.get(
                url,
                params=params,
                headers=merged_headers,
                timeout=aiohttp.ClientTimeout(total=total),
            ) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(
                        f"HTTP {response.status} for {url}",
                        url=url,
                        status=response.status,
                    )

                text = await response.text(errors="replace")
                logger.debug(f"GET {url} -> {response.status} ({len(text)} chars)")
                return text

        except asyncio.TimeoutError as e:
            raise TransportError(f"Timed out after {total:g}s fetching {url}", url=url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e
