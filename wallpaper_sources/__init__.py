"""
Wallpaper Sources

One adapter per site, looked up through a static source -> adapter mapping.
"""
from typing import Optional

from config_loader import ConcurrencyConfig, HttpConfig
from http_fetcher import HttpFetcher
from models import WallpaperSource

from .base import SourceAdapter
from .moewalls import MoewallsAdapter
from .wallhaven import WallhavenAdapter
from .wallpaperflare import WallpaperFlareAdapter
from .wallpapers_com import WallpapersComAdapter
from .zerochan import ZerochanAdapter

ADAPTERS: dict[WallpaperSource, type[SourceAdapter]] = {
    WallpaperSource.WALLHAVEN: WallhavenAdapter,
    WallpaperSource.ZEROCHAN: ZerochanAdapter,
    WallpaperSource.WALLPAPERS: WallpapersComAdapter,
    WallpaperSource.MOEWALLS: MoewallsAdapter,
    WallpaperSource.WALLPAPERFLARE: WallpaperFlareAdapter,
}


def build_adapters(
    fetcher: HttpFetcher,
    http_config: Optional[HttpConfig] = None,
    concurrency: Optional[ConcurrencyConfig] = None,
) -> dict[WallpaperSource, SourceAdapter]:
    """Instantiate every registered adapter around one shared fetcher."""
    concurrency = concurrency or ConcurrencyConfig()
    return {
        source: adapter_cls(fetcher, http_config, concurrency.max_resolve_workers)
        for source, adapter_cls in ADAPTERS.items()
    }


__all__ = [
    "ADAPTERS",
    "build_adapters",
    "SourceAdapter",
    "WallhavenAdapter",
    "ZerochanAdapter",
    "WallpapersComAdapter",
    "MoewallsAdapter",
    "WallpaperFlareAdapter",
]
