"""
Wallhaven adapter.

HTML Structure:
- Listing: <section class="thumb-listing-page"><ul><li><figure class="thumb">
- Detail link: <a class="preview" href="https://wallhaven.cc/w/abc123">
- Thumbnail: <img data-src="https://th.wallhaven.cc/small/ab/abc123.jpg">
- PNG originals carry a badge: <div class="thumb-info"><span class="png"><span>PNG</span>

The full image lives at a predictable CDN path, so no detail fetch is needed.
"""

import logging
from typing import Any, Optional

from bs4 import BeautifulSoup

from models import FilterOptions, Provenance, WallpaperItem, WallpaperSource
from url_utils import absolute_url, pick_thumbnail, sanitize_id
from .base import SourceAdapter

logger = logging.getLogger("colorwall")

FULL_IMAGE_URL = "https://w.wallhaven.cc/full/{short}/wallhaven-{id}{ext}"


class WallhavenAdapter(SourceAdapter):
    source = WallpaperSource.WALLHAVEN
    label = "Wallhaven"
    base_url = "https://wallhaven.cc"

    def build_request(
        self, query: Optional[str], options: FilterOptions
    ) -> tuple[str, Optional[dict[str, Any]]]:
        params = {
            "q": query,
            "page": str(options.page),
            "purity": options.content_filter.purity_code,
            # 1 hides AI art, 0 shows it
            "ai_art_filter": "0" if options.ai_art_allowed else "1",
        }
        return f"{self.base_url}/search", params

    def parse_listing(
        self, soup: BeautifulSoup, limit: int, options: FilterOptions
    ) -> list[WallpaperItem]:
        items = []

        for node in soup.select(".thumb-listing-page ul li .thumb"):
            if len(items) >= limit:
                break

            preview = node.select_one(".preview")
            preview_href = preview.get("href") if preview else None
            if not preview_href:
                continue

            wallpaper_id = sanitize_id(preview_href)
            if not wallpaper_id:
                continue

            ext = ".png" if node.select_one(".thumb-info .png span") else ".jpg"
            image_url = FULL_IMAGE_URL.format(short=wallpaper_id[:2], id=wallpaper_id, ext=ext)

            thumb = absolute_url(pick_thumbnail(node.select_one("img")), self.base_url)

            items.append(WallpaperItem(
                id=f"wallhaven-{wallpaper_id}",
                source=self.source,
                title=wallpaper_id,
                image_url=image_url,
                thumbnail_url=thumb or None,
                metadata=Provenance(detail_url=absolute_url(preview_href, self.base_url)),
            ))

        return items
