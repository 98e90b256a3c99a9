"""
Tests for the detail-page resolution stage (wallpapers.com, wallpaperflare)
"""
import asyncio

import pytest

import html_fixtures as html
from conftest import FakeFetcher
from exceptions import TransportError
from wallpaper_sources import WallpaperFlareAdapter, WallpapersComAdapter


def detail_url(key: str) -> str:
    return f"https://wallpapers.com/wallpapers/{key}.html"


class TestWallpapersComBestDownload:

    def pick(self, page: str):
        adapter = WallpapersComAdapter(None)
        return adapter.pick_best_download(adapter._soup(page))

    def test_largest_download_wins(self):
        asset = self.pick(html.wallpapers_detail([
            "/downloads/sky-1280x720.jpg",
            "/downloads/sky-1920x1080.jpg",
            "/about",
        ]))
        assert asset.image_url == "https://wallpapers.com/downloads/sky-1920x1080.jpg"
        assert (asset.width, asset.height) == (1920, 1080)

    def test_equal_size_goes_to_later_link(self):
        asset = self.pick(html.wallpapers_detail([
            "/downloads/first-1920x1080.jpg",
            "/images/hd/second-1920x1080.png",
        ]))
        assert asset.image_url == "https://wallpapers.com/images/hd/second-1920x1080.png"

    def test_non_image_links_ignored(self):
        asset = self.pick(html.wallpapers_detail([
            "/downloads/sky-3840x2160.zip",
            "/downloads/sky-1280x720.webp",
        ]))
        assert asset.image_url.endswith("sky-1280x720.webp")

    def test_unsized_download_has_no_dimensions(self):
        asset = self.pick(html.wallpapers_detail(["/images/hd/sky.jpg"]))
        assert asset.image_url == "https://wallpapers.com/images/hd/sky.jpg"
        assert asset.width is None
        assert asset.height is None

    def test_og_image_fallback(self):
        asset = self.pick(html.wallpapers_detail([], og_image="https://wallpapers.com/images/featured/sky.jpg"))
        assert asset.image_url == "https://wallpapers.com/images/featured/sky.jpg"
        assert asset.width is None

    def test_nothing_found(self):
        assert self.pick(html.wallpapers_detail([])) is None


class TestWallpaperFlareBestDownload:

    def pick(self, body: str, head: str = ""):
        adapter = WallpaperFlareAdapter(None)
        page = f"<html><head>{head}</head><body>{body}</body></html>"
        return adapter.pick_best_download(adapter._soup(page))

    def test_size_from_page_description_synthesizes_url(self):
        asset = self.pick(
            '<a href="/anime-wallpaper-abc/download">Download</a>',
            head='<meta itemprop="description" content="Anime wallpaper 3840x2160 original">',
        )
        assert asset.image_url == "https://www.wallpaperflare.com/anime-wallpaper-abc/download/3840x2160"
        assert (asset.width, asset.height) == (3840, 2160)

    def test_size_from_link_text(self):
        asset = self.pick('<a href="/city-wallpaper/download/">2560 x 1440</a>')
        assert asset.image_url == "https://www.wallpaperflare.com/city-wallpaper/download/2560x1440"
        assert (asset.width, asset.height) == (2560, 1440)

    def test_largest_candidate_wins(self):
        asset = self.pick(
            '<a href="/x-wallpaper/download/1280x720">HD</a>'
            '<a href="/x-wallpaper/download/1920x1080">Full HD</a>'
            '<a href="/x-wallpaper/download/1366x768">Laptop</a>'
        )
        assert asset.image_url == "https://www.wallpaperflare.com/x-wallpaper/download/1920x1080"

    def test_href_size_is_kept_as_is(self):
        asset = self.pick(
            '<a href="/x-wallpaper/download/1920x1080">2560x1440</a>',
            head='<meta itemprop="description" content="3840x2160">',
        )
        assert asset.image_url.endswith("/download/1920x1080")
        assert asset.width == 1920

    def test_unsized_candidates_fall_back_to_first(self):
        asset = self.pick('<a href="/a-wallpaper/download">Get</a><a href="/b-wallpaper/download">Get</a>')
        assert asset.image_url == "https://www.wallpaperflare.com/a-wallpaper/download"
        assert asset.width is None

    def test_direct_image_without_download_links(self):
        asset = self.pick(
            '<img itemprop="contentUrl" src="https://c4.wallpaperflare.com/wallpaper/full/abc.jpg">',
            head='<meta itemprop="description" content="1920x1200 wallpaper">',
        )
        assert asset.image_url == "https://c4.wallpaperflare.com/wallpaper/full/abc.jpg"
        assert (asset.width, asset.height) == (1920, 1200)

    def test_download_attribute_beats_og_image(self):
        asset = self.pick(
            '<a download href="/files/abc-original.jpg">Save</a>',
            head='<meta property="og:image" content="https://c4.wallpaperflare.com/og.jpg">',
        )
        assert asset.image_url == "https://www.wallpaperflare.com/files/abc-original.jpg"

    def test_nothing_found(self):
        assert self.pick("<p>removed</p>") is None


class TestResolveItems:

    def listing_fetcher(self, keys) -> FakeFetcher:
        pages = {"https://wallpapers.com/search/anime%20sky": html.wallpapers_listing(keys)}
        for key in keys:
            pages[detail_url(key)] = html.wallpapers_detail([f"/downloads/{key}-1920x1080.jpg"])
        return FakeFetcher(pages)

    @pytest.mark.asyncio
    async def test_items_upgraded_in_order(self):
        keys = ["a-sky", "b-sky", "c-sky"]
        fetcher = self.listing_fetcher(keys)
        items = await WallpapersComAdapter(fetcher).fetch("anime sky", 10)

        assert [item.id for item in items] == [f"wallpapers-{key}" for key in keys]
        for key, item in zip(keys, items):
            assert item.image_url == f"https://wallpapers.com/downloads/{key}-1920x1080.jpg"
            assert item.width == 1920
            assert item.metadata.resolved_from == detail_url(key)
            # listing thumbnail survives the upgrade
            assert item.thumbnail_url == f"https://wallpapers.com/images/thumbnail/{key}.webp"

    @pytest.mark.asyncio
    async def test_failed_detail_keeps_listing_item(self):
        keys = ["a-sky", "b-sky", "c-sky"]
        fetcher = self.listing_fetcher(keys)
        fetcher.pages[detail_url("b-sky")] = TransportError("Timed out after 15s")

        items = await WallpapersComAdapter(fetcher).fetch("anime sky", 10)

        assert len(items) == 3
        failed = items[1]
        assert failed.image_url == "https://wallpapers.com/images/thumbnail/b-sky.webp"
        assert failed.metadata.resolved_from is None
        assert failed.width is None
        assert items[0].metadata.resolved_from and items[2].metadata.resolved_from

    @pytest.mark.asyncio
    async def test_unexpected_parse_error_keeps_listing_item(self, monkeypatch):
        fetcher = self.listing_fetcher(["a-sky"])
        adapter = WallpapersComAdapter(fetcher)

        def broken(soup):
            raise AttributeError("markup changed")

        monkeypatch.setattr(adapter, "pick_best_download", broken)
        items = await adapter.fetch("anime sky", 10)
        assert items[0].image_url.endswith("a-sky.webp")

    @pytest.mark.asyncio
    async def test_detail_without_candidates_keeps_listing_item(self):
        fetcher = self.listing_fetcher(["a-sky"])
        fetcher.pages[detail_url("a-sky")] = html.wallpapers_detail([])

        items = await WallpapersComAdapter(fetcher).fetch("anime sky", 10)
        assert items[0].metadata.resolved_from is None

    @pytest.mark.asyncio
    async def test_detail_fetches_are_bounded(self):

        class SlowFetcher(FakeFetcher):
            in_flight = 0
            peak = 0

            async def get_text(self, url, params=None, headers=None, timeout=None):
                if "/wallpapers/" not in url:
                    return await super().get_text(url, params, headers, timeout)
                SlowFetcher.in_flight += 1
                SlowFetcher.peak = max(SlowFetcher.peak, SlowFetcher.in_flight)
                try:
                    await asyncio.sleep(0.01)
                    return await super().get_text(url, params, headers, timeout)
                finally:
                    SlowFetcher.in_flight -= 1

        keys = [f"k{i}-sky" for i in range(8)]
        fetcher = SlowFetcher(self.listing_fetcher(keys).pages)

        items = await WallpapersComAdapter(fetcher, resolve_workers=2).fetch("anime sky", 10)

        assert len(items) == 8
        assert all(item.metadata.resolved_from for item in items)
        assert SlowFetcher.peak == 2

    @pytest.mark.asyncio
    async def test_flare_items_resolved_with_site_headers(self):
        slug = "anime-girl-wallpaper-abcde"
        detail = f"https://www.wallpaperflare.com/{slug}"
        fetcher = FakeFetcher({
            "https://www.wallpaperflare.com/search?wallpaper=anime": html.flare_listing([slug]),
            detail: html.page(
                '<meta itemprop="description" content="Anime girl 3840x2160">'
                f'<a href="/{slug}/download">Download</a>'
            ),
        })

        items = await WallpaperFlareAdapter(fetcher).fetch("anime", 10)

        assert fetcher.urls() == ["https://www.wallpaperflare.com/search?wallpaper=anime", detail]
        detail_call = fetcher.calls[1]
        assert detail_call["headers"]["Referer"] == "https://www.wallpaperflare.com/"
        assert detail_call["timeout"] == 20

        item = items[0]
        assert item.image_url == f"{detail}/download/3840x2160"
        assert (item.width, item.height) == (3840, 2160)
        assert item.metadata.resolved_from == detail
        assert item.thumbnail_url == f"https://c4.wallpaperflare.com/wallpaper/1/2/{slug}-thumb.jpg"
