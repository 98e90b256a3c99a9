"""
Wallpapers.com adapter.

HTML Structure (search page):
- Listing: <div class="tab-content"><ul class="kw-contents"><li>
- Metadata: <figure data-key="anime-girl-abc" data-title="Anime Girl">
- Detail link: <a href="/wallpapers/anime-girl-abc.html">
- Thumbnail: <img data-src="/images/thumbnail/anime-girl-abc.webp">

HTML Structure (detail page):
- Download links: <a href="/downloads/anime-girl-abc-1920x1080.jpg">
- Fallback: <meta property="og:image" content="...">

Listing thumbnails are small, so each item is resolved against its detail page
and upgraded to the largest download on offer.
"""

import logging
import re
from typing import Any, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from models import FilterOptions, Provenance, ResolvedAsset, WallpaperItem, WallpaperSource
from url_utils import absolute_url, pick_thumbnail
from .base import SourceAdapter

logger = logging.getLogger("colorwall")

IMAGE_HREF_PATTERN = re.compile(r"\.(png|jpg|jpeg|webp)$", re.IGNORECASE)
HREF_RESOLUTION_PATTERN = re.compile(r"(\d{3,4})x(\d{3,4})")


class WallpapersComAdapter(SourceAdapter):
    source = WallpaperSource.WALLPAPERS
    label = "Wallpapers.com"
    base_url = "https://wallpapers.com"
    supports_resolution = True

    def build_request(
        self, query: Optional[str], options: FilterOptions
    ) -> tuple[str, Optional[dict[str, Any]]]:
        return f"{self.base_url}/search/{quote(query or '')}", None

    def parse_listing(
        self, soup: BeautifulSoup, limit: int, options: FilterOptions
    ) -> list[WallpaperItem]:
        items = []

        for node in soup.select(".tab-content ul.kw-contents li"):
            if len(items) >= limit:
                break

            figure = node.select_one("figure")
            key = figure.get("data-key") if figure else None
            if not key:
                continue

            title = figure.get("data-title") or key
            anchor = node.select_one("a")
            detail_url = absolute_url(anchor.get("href", "") if anchor else "", self.base_url)

            thumb_src = pick_thumbnail(node.select_one("img"))
            thumbnail_url = absolute_url(thumb_src, self.base_url) if thumb_src else detail_url
            if not thumbnail_url:
                continue

            items.append(WallpaperItem(
                id=f"wallpapers-{key}",
                source=self.source,
                title=title,
                image_url=thumbnail_url,
                thumbnail_url=thumbnail_url,
                metadata=Provenance(detail_url=detail_url or None),
            ))

        return items

    async def resolve(self, detail_url: str) -> Optional[ResolvedAsset]:
        """
        Pick the largest download linked from the detail page.

        Candidates are image hrefs under /downloads/ or /images/; size comes
        from a WIDTHxHEIGHT token in the href. Equal sizes go to the later
        link. Falls back to og:image, then None.
        """
        html = await self._get_html(absolute_url(detail_url, self.base_url))
        return self.pick_best_download(self._soup(html))

    def pick_best_download(self, soup: BeautifulSoup) -> Optional[ResolvedAsset]:
        best_link = ""
        best_pixels = 0
        best_width = 0
        best_height = 0

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"]
            if "/downloads/" not in href and "/images/" not in href:
                continue
            if not IMAGE_HREF_PATTERN.search(href):
                continue

            width = height = 0
            match = HREF_RESOLUTION_PATTERN.search(href)
            if match:
                width = int(match.group(1))
                height = int(match.group(2))
            pixels = width * height

            if pixels >= best_pixels:
                best_pixels = pixels
                best_width = width
                best_height = height
                best_link = href

        if not best_link:
            og_image = soup.find("meta", attrs={"property": "og:image"})
            fallback = og_image.get("content", "") if og_image else ""
            if not fallback:
                return None
            best_link = fallback

        return ResolvedAsset(
            image_url=absolute_url(best_link, self.base_url),
            width=best_width or None,
            height=best_height or None,
        )
