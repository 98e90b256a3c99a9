"""
Moewalls adapter (live wallpapers).

HTML Structure:
- Listing: <main id="primary"><ul><li>
- Detail link: <a href="https://moewalls.com/anime/some-slug/" title="Some Title">
- Poster: <img src="https://moewalls.com/wp-content/uploads/2024/05/some-slug-thumb.jpg">

Posters follow a dated upload path that maps onto the preview video:
    /2024/05/some-slug-thumb.jpg -> videos/preview/2024/some-slug-preview.mp4
Unlike the other sites, moewalls has a browsable front page, so the query is
optional.
"""

import logging
import re
from typing import Any, Optional

from bs4 import BeautifulSoup

from models import FilterOptions, MediaType, Provenance, WallpaperItem, WallpaperSource
from url_utils import absolute_url, pick_thumbnail, slugify
from .base import SourceAdapter

logger = logging.getLogger("colorwall")

VIDEO_THUMB_PATTERN = re.compile(r"/(\d{4})/\d{2}/([a-z0-9-]+)-thumb", re.IGNORECASE)
PREVIEW_VIDEO_URL = "https://static.moewalls.com/videos/preview/{year}/{slug}-preview.mp4"
DEFAULT_TITLE = "Moewalls Live2D"


def derive_video_url(thumbnail: str) -> tuple[Optional[str], Optional[str]]:
    """Return (preview video URL, slug) for a dated poster path."""
    match = VIDEO_THUMB_PATTERN.search(thumbnail)
    if not match:
        return None, None
    return PREVIEW_VIDEO_URL.format(year=match.group(1), slug=match.group(2)), match.group(2)


def derive_high_res_image(thumbnail: str) -> str:
    """Strip -thumb / -thumb-N / -poster suffixes from the poster filename."""
    high_res = re.sub(r"-thumb(?:-\d+)?(?=\.)", "", thumbnail, flags=re.IGNORECASE)
    return re.sub(r"-poster(?=\.)", "", high_res, flags=re.IGNORECASE)


class MoewallsAdapter(SourceAdapter):
    source = WallpaperSource.MOEWALLS
    label = "Moewalls"
    base_url = "https://moewalls.com"
    requires_query = False

    def build_request(
        self, query: Optional[str], options: FilterOptions
    ) -> tuple[str, Optional[dict[str, Any]]]:
        if query:
            return self.base_url, {"s": query}
        return f"{self.base_url}/", None

    def parse_listing(
        self, soup: BeautifulSoup, limit: int, options: FilterOptions
    ) -> list[WallpaperItem]:
        items = []

        for node in soup.select("#primary ul li"):
            if len(items) >= limit:
                break

            thumbnail = absolute_url(pick_thumbnail(node.select_one("img")), self.base_url)
            if not thumbnail:
                continue

            anchor = node.select_one("a")
            title = (anchor.get("title") if anchor else None) or DEFAULT_TITLE
            page_url = absolute_url(anchor.get("href", "") if anchor else "", self.base_url)

            video_url, slug = derive_video_url(thumbnail)
            high_res_image = derive_high_res_image(thumbnail)
            as_video = options.include_videos and video_url is not None

            items.append(WallpaperItem(
                id=f"moewalls-{slug or slugify(title)}",
                source=self.source,
                title=title,
                image_url=video_url if as_video else high_res_image,
                thumbnail_url=thumbnail,
                type=MediaType.VIDEO if as_video else MediaType.IMAGE,
                metadata=Provenance(
                    detail_url=page_url or None,
                    video_url=video_url,
                    high_res_image=high_res_image,
                ),
            ))

        return items
