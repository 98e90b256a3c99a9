#!/usr/bin/env python3
"""
Source Adapter Base

Every site adapter follows the same shape:

    build_request -> GET listing -> BeautifulSoup -> parse_listing -> (resolve)

Subclasses only describe their site: URL, headers, listing selectors and,
optionally, how to upgrade a thumbnail from its detail page. Selectors live
in the subclass module so a markup change on one site stays contained there.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from bs4 import BeautifulSoup

from config_loader import HttpConfig
from exceptions import EmptyResultError, PreconditionError, ResolutionError, TransportError
from http_fetcher import HttpFetcher
from models import FilterOptions, ResolvedAsset, WallpaperItem, WallpaperSource

logger = logging.getLogger("colorwall")


class SourceAdapter(ABC):
    """Fetches one site's search listing and parses it into WallpaperItems."""

    source: WallpaperSource
    label: str
    base_url: str

    # Most sites have no browse page we can use without a search term
    requires_query: bool = True

    # Sites with a resolution stage override resolve() and set this
    supports_resolution: bool = False

    def __init__(
        self,
        fetcher: HttpFetcher,
        http_config: Optional[HttpConfig] = None,
        resolve_workers: int = 5,
    ):
        self.fetcher = fetcher
        self.http_config = http_config or HttpConfig()
        self.resolve_workers = max(1, resolve_workers)

    @property
    def timeout(self) -> float:
        return self.http_config.timeout_for(self.source.value)

    @property
    def extra_headers(self) -> dict[str, str]:
        """Headers added on top of the shared User-Agent / Accept-Language."""
        return {}

    # -------------------------------------------------------------------------
    # Site-specific hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def build_request(
        self, query: Optional[str], options: FilterOptions
    ) -> tuple[str, Optional[dict[str, Any]]]:
        """Return (url, query params) for the listing page."""

    @abstractmethod
    def parse_listing(
        self, soup: BeautifulSoup, limit: int, options: FilterOptions
    ) -> list[WallpaperItem]:
        """Walk the listing nodes, stopping once ``limit`` items are collected."""

    async def resolve(self, detail_url: str) -> Optional[ResolvedAsset]:
        """Best asset on a detail page, or None to keep the listing data."""
        return None

    # -------------------------------------------------------------------------
    # Shared flow
    # -------------------------------------------------------------------------

    async def fetch(
        self,
        query: Optional[str],
        limit: int,
        options: Optional[FilterOptions] = None,
    ) -> list[WallpaperItem]:
        """
        Search this source.

        Raises:
            PreconditionError: the site needs a query and none was given.
            TransportError: the listing page could not be fetched.
            EmptyResultError: the page parsed to zero wallpapers.
        """
        options = options or FilterOptions()

        if self.requires_query and not query:
            raise PreconditionError(f"{self.label} search requires a query.", self.source.value)

        url, params = self.build_request(query, options)
        html = await self._get_html(url, params)

        items = self.parse_listing(self._soup(html), limit, options)
        if not items:
            raise EmptyResultError(f"{self.label} returned no results.", self.source.value)

        logger.info(f"[{self.label}] Search '{query or ''}' parsed {len(items)} items")

        if self.supports_resolution:
            items = await self.resolve_items(items)

        return items

    async def _get_html(self, url: str, params: Optional[dict[str, Any]] = None) -> str:
        try:
            return await self.fetcher.get_text(
                url,
                params=params,
                headers=self.extra_headers,
                timeout=self.timeout,
            )
        except TransportError as e:
            raise TransportError(
                f"{self.label} request failed: {e}",
                self.source.value,
                url=e.url,
                status=e.status,
            ) from e

    @staticmethod
    def _soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    # -------------------------------------------------------------------------
    # Resolution stage
    # -------------------------------------------------------------------------

    async def resolve_items(self, items: list[WallpaperItem]) -> list[WallpaperItem]:
        """
        Upgrade every item from its detail page, a bounded number at a time.

        Output order matches input order. A failed resolution leaves that
        item exactly as the listing produced it.
        """
        semaphore = asyncio.Semaphore(self.resolve_workers)
        resolved = await asyncio.gather(
            *(self._resolve_one(item, semaphore) for item in items)
        )

        upgraded = sum(1 for item in resolved if item.metadata.resolved_from)
        logger.info(f"[{self.label}] Resolved {upgraded}/{len(items)} items to full resolution")
        return list(resolved)

    async def _resolve_one(self, item: WallpaperItem, semaphore: asyncio.Semaphore) -> WallpaperItem:
        detail_url = item.metadata.detail_url
        if not detail_url:
            return item

        async with semaphore:
            try:
                asset = await self.resolve(detail_url)
            except Exception as e:
                error = ResolutionError(detail_url, e, self.source.value)
                logger.warning(f"[{self.label}] {error}")
                return item

        if asset is None or not asset.image_url:
            logger.debug(f"[{self.label}] No better asset on {detail_url}")
            return item

        return item.with_resolution(asset, detail_url)
