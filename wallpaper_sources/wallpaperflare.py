"""
WallpaperFlare adapter.

HTML Structure (search page):
The grid markup changes often, so the listing is walked several ways and
whatever yields a (wallpaper link, media node) pair is used:
- <a href="/anime-girl-wallpaper-abcde"><img data-src="..." alt="..."></a>
- <a href="https://www.wallpaperflare.com/wallpaper/..."><picture><source srcset="..."></picture></a>
The same wallpaper shows up in more than one pass, so ids are tracked per call.

HTML Structure (detail page):
- Direct image: <a download href="...">, <img itemprop="contentUrl" src="...">
  or <meta property="og:image">
- Original size: <meta itemprop="description" content="... 3840x2160 ...">
- Download pages: <a href=".../download">, <a href=".../download/1920x1080">1920 x 1080</a>
"""

import logging
import re
from typing import Any, Optional
from urllib.parse import quote, urlparse

from bs4 import BeautifulSoup, Tag

from models import FilterOptions, Provenance, ResolvedAsset, WallpaperItem, WallpaperSource
from url_utils import absolute_url, parse_resolution, pick_image_source, pick_thumbnail, sanitize_id
from .base import SourceAdapter

logger = logging.getLogger("colorwall")

BASE_URL = "https://www.wallpaperflare.com"
DEFAULT_TITLE = "WallpaperFlare Wallpaper"
WALLPAPER_HREF = re.compile(r"/wallpaper/")
EXCLUDED_PATH_PREFIXES = ("/search", "/tag", "/page")


def normalize_wallpaper_href(raw: Optional[str]) -> Optional[str]:
    """Absolute wallpaper page URL, or None for search/tag/paging links."""
    if not raw:
        return None

    normalized = absolute_url(raw, BASE_URL)
    try:
        path = urlparse(normalized).path.lower()
    except ValueError:
        return None

    if not path or path == "/" or path.startswith(EXCLUDED_PATH_PREFIXES):
        return None
    if "wallpaper" not in path:
        return None

    return normalized


class WallpaperFlareAdapter(SourceAdapter):
    source = WallpaperSource.WALLPAPERFLARE
    label = "WallpaperFlare"
    base_url = BASE_URL
    supports_resolution = True

    @property
    def extra_headers(self) -> dict[str, str]:
        # Requests without a Referer get an empty grid
        return {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
            "Referer": f"{BASE_URL}/",
            "Upgrade-Insecure-Requests": "1",
        }

    def build_request(
        self, query: Optional[str], options: FilterOptions
    ) -> tuple[str, Optional[dict[str, Any]]]:
        return f"{self.base_url}/search?wallpaper={quote(query or '')}", None

    def parse_listing(
        self, soup: BeautifulSoup, limit: int, options: FilterOptions
    ) -> list[WallpaperItem]:
        items: list[WallpaperItem] = []
        seen_ids: set[str] = set()

        def collect(href: Optional[str], media: Optional[Tag]) -> None:
            if len(items) >= limit or media is None:
                return

            detail_url = normalize_wallpaper_href(href)
            if not detail_url:
                return

            thumb = pick_thumbnail(media)
            if not thumb:
                return

            wallpaper_id = sanitize_id(detail_url)
            if not wallpaper_id or wallpaper_id in seen_ids:
                return
            seen_ids.add(wallpaper_id)

            titled_parent = media.find_parent(attrs={"title": True})
            title = (
                media.get("alt")
                or media.get("title")
                or (titled_parent.get("title") if titled_parent else None)
                or DEFAULT_TITLE
            )

            thumbnail_url = absolute_url(thumb, self.base_url)
            items.append(WallpaperItem(
                id=f"wallpaperflare-{wallpaper_id}",
                source=self.source,
                title=title,
                image_url=thumbnail_url,
                thumbnail_url=thumbnail_url,
                metadata=Provenance(detail_url=detail_url),
            ))

        # Pass 1: explicit /wallpaper/ links
        for link in soup.find_all("a", href=WALLPAPER_HREF):
            if len(items) >= limit:
                return items
            collect(link.get("href"), link.select_one("img, source"))

        # Pass 2: any link whose path looks like a wallpaper page
        for link in soup.find_all("a", href=True):
            if len(items) >= limit:
                return items
            collect(link["href"], link.select_one("img, source"))

        # Pass 3 and 4: media first, climbing to the enclosing wallpaper link
        for tag_name in ("img", "source"):
            for media in soup.find_all(tag_name):
                if len(items) >= limit:
                    return items
                parent_link = media.find_parent("a", href=WALLPAPER_HREF)
                if parent_link is not None:
                    collect(parent_link.get("href"), media)

        return items

    async def resolve(self, detail_url: str) -> Optional[ResolvedAsset]:
        html = await self._get_html(absolute_url(detail_url, self.base_url))
        return self.pick_best_download(self._soup(html))

    def pick_best_download(self, soup: BeautifulSoup) -> Optional[ResolvedAsset]:
        """
        Choose the largest download candidate on a detail page.

        Each /download link gets its size from its own href, then its link
        text, then the page's meta description. Links without a size in the
        href are rewritten to the canonical <href>/<W>x<H> form when a size is
        known. Without any download link the page's direct image is used.
        """
        direct_link = self._direct_image(soup)

        description = soup.find("meta", attrs={"itemprop": "description"})
        page_resolution = parse_resolution(description.get("content", "") if description else "")

        candidates: list[ResolvedAsset] = []
        for anchor in soup.select('a[href*="/download"]'):
            normalized = absolute_url(anchor.get("href"), self.base_url)
            if "/download" not in normalized:
                continue

            from_href = parse_resolution(normalized)
            from_text = parse_resolution(anchor.get_text(" ", strip=True))

            width = from_href.get("width") or from_text.get("width") or page_resolution.get("width")
            height = from_href.get("height") or from_text.get("height") or page_resolution.get("height")

            candidate_url = normalized
            if not from_href and width and height:
                candidate_url = f"{normalized.rstrip('/')}/{width}x{height}"

            candidates.append(ResolvedAsset(image_url=candidate_url, width=width, height=height))

        if not candidates:
            if not direct_link:
                return None
            return ResolvedAsset(
                image_url=direct_link,
                width=page_resolution.get("width"),
                height=page_resolution.get("height"),
            )

        best = candidates[0]
        best_pixels = 0
        for candidate in candidates:
            pixels = (candidate.width or 0) * (candidate.height or 0)
            if pixels > best_pixels:
                best_pixels = pixels
                best = candidate

        return best

    def _direct_image(self, soup: BeautifulSoup) -> str:
        download = soup.find("a", attrs={"download": True, "href": True})
        content_img = soup.find("img", attrs={"itemprop": "contentUrl"})
        og_image = soup.find("meta", attrs={"property": "og:image"})

        link = (
            pick_image_source(download.get("href") if download else None)
            or pick_image_source(content_img.get("src") if content_img else None)
            or pick_image_source(og_image.get("content") if og_image else None)
        )
        return absolute_url(link, self.base_url) if link else ""
