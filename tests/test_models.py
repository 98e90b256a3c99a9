"""
Tests for request / response models
"""
import pytest

from models import (
    DEFAULT_SOURCES,
    ContentFilter,
    MediaType,
    Provenance,
    ResolvedAsset,
    SearchRequest,
    SearchResponse,
    WallpaperItem,
    WallpaperSource,
)


class TestSearchRequest:

    def test_defaults(self):
        request = SearchRequest()
        assert request.sources == DEFAULT_SOURCES
        assert request.page == 1
        assert request.content_filter is ContentFilter.SFW
        assert request.randomize is True

    def test_empty_sources_fall_back_to_all(self):
        request = SearchRequest(query="sky", sources=[])
        assert request.sources == list(WallpaperSource)
        assert len(request.sources) == 5

    def test_sources_coerced_and_deduplicated(self):
        request = SearchRequest(sources=["moewalls", WallpaperSource.WALLHAVEN, "moewalls"])
        assert request.sources == [WallpaperSource.MOEWALLS, WallpaperSource.WALLHAVEN]

    def test_unknown_source_rejected(self):
        with pytest.raises(ValueError, match="Unknown wallpaper source"):
            SearchRequest(sources=["deviantart"])

    def test_invalid_page_and_limit(self):
        with pytest.raises(ValueError):
            SearchRequest(page=0)
        with pytest.raises(ValueError):
            SearchRequest(per_source_limit=0)

    def test_blank_query_is_none(self):
        assert SearchRequest(query="   ").query is None

    def test_from_options(self):
        request = SearchRequest.from_options(
            {
                "query": "rain",
                "sources": ["wallhaven"],
                "type": "sketchy",
                "aiArt": True,
                "limitPerSource": 24,
                "randomize": False,
                "excludeTags": ["nsfw"],
                "page": 3,
            }
        )
        assert request.query == "rain"
        assert request.sources == [WallpaperSource.WALLHAVEN]
        assert request.content_filter is ContentFilter.SKETCHY
        assert request.ai_art_allowed is True
        assert request.per_source_limit == 24
        assert request.randomize is False
        assert request.exclude_tags == ["nsfw"]
        assert request.page == 3

    def test_from_options_uses_defaults_for_missing_keys(self):
        request = SearchRequest.from_options({"query": "sea"}, per_source_limit=7, randomize=False)
        assert request.per_source_limit == 7
        assert request.randomize is False

    def test_filter_options(self):
        request = SearchRequest(page=2, content_filter="both", ai_art_allowed=True, exclude_tags=["x"])
        options = request.filter_options(include_videos=True)
        assert options.page == 2
        assert options.content_filter.purity_code == "110"
        assert options.ai_art_allowed is True
        assert options.include_videos is True
        assert options.exclude_tags == ["x"]


class TestWallpaperItem:

    def _item(self) -> WallpaperItem:
        return WallpaperItem(
            id="wallpapers-sky",
            source=WallpaperSource.WALLPAPERS,
            title="Sky",
            image_url="https://wallpapers.com/images/thumbnail/sky.webp",
            thumbnail_url="https://wallpapers.com/images/thumbnail/sky.webp",
            metadata=Provenance(detail_url="https://wallpapers.com/wallpapers/sky.html"),
        )

    def test_with_resolution(self):
        item = self._item()
        upgraded = item.with_resolution(
            ResolvedAsset("https://wallpapers.com/downloads/sky-1920x1080.jpg", 1920, 1080),
            item.metadata.detail_url,
        )

        assert upgraded.image_url.endswith("sky-1920x1080.jpg")
        assert (upgraded.width, upgraded.height) == (1920, 1080)
        assert upgraded.metadata.resolved_from == item.metadata.detail_url
        assert upgraded.thumbnail_url == item.thumbnail_url
        # the listing item itself is untouched
        assert item.metadata.resolved_from is None
        assert item.width is None

    def test_with_resolution_drops_non_positive_sizes(self):
        upgraded = self._item().with_resolution(ResolvedAsset("https://x.com/a.jpg", 0, None), "d")
        assert upgraded.width is None
        assert upgraded.height is None

    def test_to_dict(self):
        data = self._item().to_dict()
        assert data["id"] == "wallpapers-sky"
        assert data["source"] == "wallpapers"
        assert data["imageUrl"].startswith("https://")
        assert data["thumbnailUrl"].startswith("https://")
        assert data["type"] == "image"
        assert data["metadata"] == {"detailUrl": "https://wallpapers.com/wallpapers/sky.html"}
        assert "width" not in data

    def test_video_type(self):
        item = WallpaperItem(id="m", source=WallpaperSource.MOEWALLS, image_url="https://v/x.mp4", type=MediaType.VIDEO)
        assert item.to_dict()["type"] == "video"


class TestSearchResponse:

    def test_success_iff_no_errors(self):
        assert SearchResponse().success is True
        assert SearchResponse(errors=["Zerochan returned no results."]).success is False

    def test_to_dict_omits_empty_errors(self):
        assert "errors" not in SearchResponse().to_dict()
        data = SearchResponse(errors=["boom"]).to_dict()
        assert data == {"success": False, "items": [], "errors": ["boom"]}
