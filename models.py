#!/usr/bin/env python3
"""
ColorWall Engine - Data Models

Wallpaper items, search requests and responses shared by every source.
Items live for the duration of one search; nothing here is persisted.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


# =============================================================================
# ENUMS
# =============================================================================

class WallpaperSource(str, Enum):
    """The external sites the engine knows how to scrape."""
    WALLHAVEN = "wallhaven"
    ZEROCHAN = "zerochan"
    WALLPAPERS = "wallpapers"
    MOEWALLS = "moewalls"
    WALLPAPERFLARE = "wallpaperflare"


DEFAULT_SOURCES: list[WallpaperSource] = list(WallpaperSource)


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class ContentFilter(str, Enum):
    """Purity filter. Only wallhaven understands it."""
    SFW = "sfw"
    SKETCHY = "sketchy"
    BOTH = "both"

    @property
    def purity_code(self) -> str:
        """Wallhaven purity bitmask (sfw, sketchy, nsfw)."""
        return {
            ContentFilter.SFW: "100",
            ContentFilter.SKETCHY: "010",
            ContentFilter.BOTH: "110",
        }[self]


# =============================================================================
# WALLPAPER ITEMS
# =============================================================================

@dataclass
class Provenance:
    """Where an item's URLs came from."""
    detail_url: Optional[str] = None
    resolved_from: Optional[str] = None
    video_url: Optional[str] = None
    high_res_image: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        values = {
            "detailUrl": self.detail_url,
            "resolvedFrom": self.resolved_from,
            "videoUrl": self.video_url,
            "highResImage": self.high_res_image,
        }
        return {k: v for k, v in values.items() if v}


@dataclass
class ResolvedAsset:
    """Best asset found on a detail page."""
    image_url: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class WallpaperItem:
    """A single wallpaper candidate normalized from any source."""
    id: str
    source: WallpaperSource
    image_url: str
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    type: MediaType = MediaType.IMAGE
    width: Optional[int] = None
    height: Optional[int] = None
    tags: list[str] = field(default_factory=list)
    metadata: Provenance = field(default_factory=Provenance)

    def with_resolution(self, asset: ResolvedAsset, detail_url: str) -> "WallpaperItem":
        """Copy of this item upgraded to the resolved asset."""
        return replace(
            self,
            image_url=asset.image_url,
            width=asset.width if asset.width and asset.width > 0 else None,
            height=asset.height if asset.height and asset.height > 0 else None,
            metadata=replace(self.metadata, resolved_from=detail_url),
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire shape consumed by the host process."""
        data: dict[str, Any] = {
            "id": self.id,
            "source": self.source.value,
            "imageUrl": self.image_url,
            "type": self.type.value,
        }
        if self.title:
            data["title"] = self.title
        if self.thumbnail_url:
            data["thumbnailUrl"] = self.thumbnail_url
        if self.width:
            data["width"] = self.width
        if self.height:
            data["height"] = self.height
        if self.tags:
            data["tags"] = list(self.tags)
        metadata = self.metadata.to_dict()
        if metadata:
            data["metadata"] = metadata
        return data

    def __repr__(self) -> str:
        return f"WallpaperItem(id={self.id}, source={self.source.value}, type={self.type.value})"


# =============================================================================
# SEARCH REQUEST / RESPONSE
# =============================================================================

@dataclass
class FilterOptions:
    """Per-search filters handed to each source adapter."""
    page: int = 1
    content_filter: ContentFilter = ContentFilter.SFW
    ai_art_allowed: bool = False
    include_videos: bool = False
    exclude_tags: list[str] = field(default_factory=list)


@dataclass
class SearchRequest:
    """
    A multi-source search.

    exclude_tags is advisory: it is passed to every adapter but none of the
    sites' query protocols can express it.
    """
    query: Optional[str] = None
    exclude_tags: list[str] = field(default_factory=list)
    sources: list[WallpaperSource] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    page: int = 1
    content_filter: ContentFilter = ContentFilter.SFW
    ai_art_allowed: bool = False
    per_source_limit: int = 10
    randomize: bool = True

    def __post_init__(self):
        if self.query is not None:
            self.query = self.query.strip() or None

        if not self.sources:
            self.sources = list(DEFAULT_SOURCES)

        ordered: list[WallpaperSource] = []
        for source in self.sources:
            try:
                source = WallpaperSource(source)
            except ValueError:
                raise ValueError(f"Unknown wallpaper source: {source!r}") from None
            if source not in ordered:
                ordered.append(source)
        self.sources = ordered

        self.content_filter = ContentFilter(self.content_filter)

        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.per_source_limit <= 0:
            raise ValueError(f"per_source_limit must be > 0, got {self.per_source_limit}")

    @classmethod
    def from_options(cls, options: dict[str, Any], **defaults: Any) -> "SearchRequest":
        """
        Build a request from the host process's camelCase option bag.

        Keys: query, excludeTags, sources, page, type, aiArt, limitPerSource,
        randomize. Missing keys fall back to ``defaults`` and then to the
        dataclass defaults.
        """
        mapping = {
            "query": "query",
            "excludeTags": "exclude_tags",
            "sources": "sources",
            "page": "page",
            "type": "content_filter",
            "aiArt": "ai_art_allowed",
            "limitPerSource": "per_source_limit",
            "randomize": "randomize",
        }
        kwargs = dict(defaults)
        for key, attr in mapping.items():
            if options.get(key) is not None:
                kwargs[attr] = options[key]
        return cls(**kwargs)

    def filter_options(self, include_videos: bool = False) -> FilterOptions:
        return FilterOptions(
            page=self.page,
            content_filter=self.content_filter,
            ai_art_allowed=self.ai_art_allowed,
            include_videos=include_videos,
            exclude_tags=list(self.exclude_tags),
        )


@dataclass
class SearchResponse:
    """Merged result of a search. success is True iff no source failed."""
    items: list[WallpaperItem] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "items": [item.to_dict() for item in self.items],
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data
