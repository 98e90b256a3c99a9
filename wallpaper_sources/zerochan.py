"""
Zerochan adapter.

HTML Structure:
- Listing: <div id="wrapper"><div id="content"><ul><li>
- Detail link + thumbnail: <a href="/4123456"><img data-src="..." alt="Title"></a>
- Full image link: <p><a href="https://static.zerochan.net/Title.full.4123456.jpg">
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from models import FilterOptions, Provenance, WallpaperItem, WallpaperSource
from url_utils import absolute_url, pick_thumbnail, sanitize_id
from .base import SourceAdapter

logger = logging.getLogger("colorwall")

STATIC_HOST = "https://static.zerochan.net"
THUMB_HOST = "https://s1.zerochan.net"
DEFAULT_TITLE = "Zerochan Wallpaper"


class ZerochanAdapter(SourceAdapter):
    source = WallpaperSource.ZEROCHAN
    label = "Zerochan"
    base_url = "https://www.zerochan.net"

    def build_request(
        self, query: Optional[str], options: FilterOptions
    ) -> tuple[str, Optional[dict[str, Any]]]:
        return f"{self.base_url}/{quote(query or '')}", None

    def parse_listing(
        self, soup: BeautifulSoup, limit: int, options: FilterOptions
    ) -> list[WallpaperItem]:
        items = []

        for node in soup.select("#wrapper #content ul li"):
            if len(items) >= limit:
                break

            image_anchor = node.select_one("p a")
            image_link = image_anchor.get("href") if image_anchor else None
            if not image_link:
                continue

            anchor = node.select_one("a")
            anchor_href = anchor.get("href", "") if anchor else ""
            wallpaper_id = sanitize_id(anchor_href)
            if not wallpaper_id:
                logger.debug(f"[{self.label}] Skipping node without detail link")
                continue

            img = node.select_one("a img")
            title = (img.get("alt") if img else None) or DEFAULT_TITLE

            thumb_src = pick_thumbnail(img)
            if thumb_src:
                thumbnail_url = absolute_url(thumb_src, self.base_url)
            else:
                # CDN thumbnail path mirrors the static path: <name>.600.<id>.jpg
                static_path = image_link.replace(STATIC_HOST, "").lstrip("/")
                thumbnail_url = f"{THUMB_HOST}/{static_path}.600.{wallpaper_id}.jpg" if static_path else ""

            items.append(WallpaperItem(
                id=f"zerochan-{wallpaper_id}",
                source=self.source,
                title=title,
                image_url=absolute_url(image_link, STATIC_HOST),
                thumbnail_url=thumbnail_url or None,
                metadata=Provenance(detail_url=absolute_url(anchor_href, self.base_url)),
            ))

        return items
