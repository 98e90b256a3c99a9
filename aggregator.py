#!/usr/bin/env python3
"""
ColorWall Engine - Multi-Source Wallpaper Aggregator

Searches several wallpaper sites at once and merges what they return into a
single list of WallpaperItems.

Features:
- Parallel fan-out: one task per source, bounded by a worker pool
- Partial failure isolation: a failing source adds an error string and
  never cancels or fails its siblings
- Normalization: id dedupe plus optional shuffle of the merged list

Author: ColorWall
Version: 1.0.0
"""

import argparse
import asyncio
import json
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from config_loader import ConfigLoader, get_config
from dedup_manager import normalize
from exceptions import EmptyResultError, ScrapeError
from http_fetcher import HttpFetcher
from models import FilterOptions, SearchRequest, SearchResponse, WallpaperItem, WallpaperSource
from wallpaper_sources import SourceAdapter, build_adapters

logger = logging.getLogger("colorwall")


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(log_dir: Optional[Path] = Path("./logs")) -> logging.Logger:
    """Configure console and (optionally) file logging for the colorwall logger."""
    colorwall_logger = logging.getLogger("colorwall")
    colorwall_logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    colorwall_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(log_dir / f"search_{timestamp}.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        colorwall_logger.addHandler(file_handler)

    return colorwall_logger


# =============================================================================
# AGGREGATOR
# =============================================================================

class WallpaperAggregator:
    """
    Coordinates searches across all wallpaper sources.

    Every requested source runs as its own task. All tasks are awaited to
    completion (no fail-fast); each failure becomes one entry in
    SearchResponse.errors and successful sources still contribute items.

    Usage:
        async with WallpaperAggregator() as aggregator:
            response = await aggregator.search(SearchRequest(query="sunset"))
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        fetcher: Optional[HttpFetcher] = None,
        adapters: Optional[dict[WallpaperSource, SourceAdapter]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or get_config()
        self.http_config = self.config.get_http_config()
        self.search_config = self.config.get_search_config()
        self.concurrency = self.config.get_concurrency_config()

        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or HttpFetcher(self.http_config)
        self.adapters = adapters or build_adapters(self.fetcher, self.http_config, self.concurrency)
        self.rng = rng

    async def __aenter__(self) -> "WallpaperAggregator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self._owns_fetcher:
            await self.fetcher.close()

    def request_from_options(self, options: Optional[dict[str, Any]] = None) -> SearchRequest:
        """SearchRequest from a camelCase option bag, with config.yaml defaults."""
        return SearchRequest.from_options(
            options or {},
            sources=list(self.search_config.sources),
            per_source_limit=self.search_config.per_source_limit,
            randomize=self.search_config.randomize,
        )

    async def search(self, request: Optional[SearchRequest] = None) -> SearchResponse:
        """
        Search every requested source concurrently and merge the results.

        Items keep source-request order then parse order before the optional
        shuffle. This never raises for a source failure.
        """
        request = request or self.request_from_options()
        options = request.filter_options()
        semaphore = asyncio.Semaphore(self.concurrency.max_source_workers)

        logger.info(
            f"Searching {len(request.sources)} sources for '{request.query or ''}' "
            f"(limit {request.per_source_limit}/source, page {request.page})"
        )

        results = await asyncio.gather(
            *(
                self._run_source(source, request.query, request.per_source_limit, options, semaphore)
                for source in request.sources
            ),
            return_exceptions=True,
        )

        items: list[WallpaperItem] = []
        errors: list[str] = []

        for source, result in zip(request.sources, results):
            if isinstance(result, BaseException):
                errors.append(self._describe_failure(source, result))
            else:
                logger.info(f"  - {source.value}: {len(result)} items")
                items.extend(result)

        final_items = normalize(items, request.randomize, self.rng)
        logger.info(f"Search complete: {len(final_items)} items, {len(errors)} failed sources")

        return SearchResponse(items=final_items, errors=errors)

    async def fetch_video_previews(
        self,
        query: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> SearchResponse:
        """Moewalls alone, with preview videos as the primary asset."""
        source = WallpaperSource.MOEWALLS
        options = FilterOptions(include_videos=True)
        semaphore = asyncio.Semaphore(1)

        try:
            items = await self._run_source(
                source, query, limit or self.search_config.video_preview_limit, options, semaphore
            )
        except Exception as e:
            return SearchResponse(items=[], errors=[self._describe_failure(source, e)])

        return SearchResponse(items=normalize(items, randomize=False))

    async def _run_source(
        self,
        source: WallpaperSource,
        query: Optional[str],
        limit: int,
        options: FilterOptions,
        semaphore: asyncio.Semaphore,
    ) -> list[WallpaperItem]:
        adapter = self.adapters[source]
        async with semaphore:
            items = await adapter.fetch(query, limit, options)

        # An adapter that quietly returns nothing is reported like any other failure
        if not items:
            raise EmptyResultError(f"{adapter.label} returned no results.", source.value)
        return items

    def _describe_failure(self, source: WallpaperSource, error: BaseException) -> str:
        if isinstance(error, ScrapeError):
            logger.warning(f"{source.value} failed: {error}")
            return str(error)

        if not isinstance(error, Exception):
            # CancelledError / KeyboardInterrupt must not be turned into data
            raise error

        label = self.adapters[source].label if source in self.adapters else source.value
        logger.error(f"{label} failed unexpectedly: {error}", exc_info=error)
        return f"{label} failed: {error}"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

async def search_wallpapers(
    request: Union[SearchRequest, dict[str, Any], None] = None,
) -> SearchResponse:
    """One-shot search with a fresh aggregator and HTTP session."""
    async with WallpaperAggregator() as aggregator:
        if not isinstance(request, SearchRequest):
            request = aggregator.request_from_options(request)
        return await aggregator.search(request)


async def fetch_video_previews(query: Optional[str] = None) -> SearchResponse:
    """One-shot live wallpaper listing from moewalls."""
    async with WallpaperAggregator() as aggregator:
        return await aggregator.fetch_video_previews(query)


# =============================================================================
# STANDALONE TEST
# =============================================================================

async def _test_search(args: argparse.Namespace) -> None:
    """Run one live search and print the merged response."""
    if args.videos:
        response = await fetch_video_previews(args.query)
    else:
        response = await search_wallpapers({
            "query": args.query,
            "sources": args.sources,
            "limitPerSource": args.limit,
            "randomize": not args.ordered,
        })

    print(json.dumps(response.to_dict(), indent=2))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Live smoke test for the wallpaper aggregator")
    parser.add_argument("query", nargs="?", default=None)
    parser.add_argument("--sources", nargs="*", default=None, choices=[s.value for s in WallpaperSource])
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--ordered", action="store_true", help="Keep source order instead of shuffling")
    parser.add_argument("--videos", action="store_true", help="Moewalls preview videos only")

    setup_logging(log_dir=None)
    asyncio.run(_test_search(parser.parse_args()))
