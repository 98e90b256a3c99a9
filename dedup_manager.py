#!/usr/bin/env python3
"""
ColorWall Engine - Deduplication Manager

Normalizes the merged output of all sources before it is returned:
1. Drops repeated wallpaper IDs (first occurrence wins)
2. Drops items without a usable image URL
3. Optionally shuffles the survivors

Duplicates are per response only; nothing is remembered between searches.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from models import WallpaperItem

logger = logging.getLogger("colorwall")


@dataclass
class DedupStats:
    """Counters for one normalize() pass."""
    input_count: int = 0
    duplicates: int = 0
    unusable: int = 0
    output_count: int = 0

    def __str__(self) -> str:
        return (
            f"{self.input_count} in, {self.duplicates} duplicates, "
            f"{self.unusable} without image, {self.output_count} out"
        )


def dedupe_by_id(items: list[WallpaperItem]) -> list[WallpaperItem]:
    """
    Remove repeated IDs, keeping the first occurrence.

    Order of first appearance is preserved, so applying this twice gives the
    same result as applying it once.
    """
    seen: dict[str, WallpaperItem] = {}
    for item in items:
        if item.id not in seen:
            seen[item.id] = item
    return list(seen.values())


def drop_unusable(items: list[WallpaperItem]) -> list[WallpaperItem]:
    """Remove items with an empty image URL."""
    return [item for item in items if item.image_url]


def shuffle_items(items: list[WallpaperItem], rng: Optional[random.Random] = None) -> list[WallpaperItem]:
    """Fisher-Yates shuffle of a copy of ``items``."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def normalize(
    items: list[WallpaperItem],
    randomize: bool,
    rng: Optional[random.Random] = None,
) -> list[WallpaperItem]:
    """Dedupe, drop unusable items, then shuffle iff ``randomize``."""
    stats = DedupStats(input_count=len(items))

    unique = dedupe_by_id(items)
    stats.duplicates = len(items) - len(unique)

    usable = drop_unusable(unique)
    stats.unusable = len(unique) - len(usable)
    stats.output_count = len(usable)

    logger.debug(f"Normalize: {stats}")

    if randomize:
        return shuffle_items(usable, rng)
    return usable
