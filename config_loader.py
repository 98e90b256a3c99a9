#!/usr/bin/env python3
"""
ColorWall Engine - Configuration Loader

Loads configuration from config.yaml with environment variable overrides.
Provides type-safe access to configuration values.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger("colorwall")


ALL_SOURCE_NAMES = ["wallhaven", "zerochan", "wallpapers", "moewalls", "wallpaperflare"]


@dataclass
class HttpConfig:
    """Outbound request settings shared by every source."""
    user_agent: str = "AnimeWallpaperApp/1.0"
    accept_language: str = "en-US,en;q=0.9"
    timeout_sec: float = 15.0
    source_timeouts: dict[str, float] = field(default_factory=lambda: {"wallpaperflare": 20.0})
    connector_limit: int = 20

    def timeout_for(self, source: str) -> float:
        """Per-source timeout, falling back to the shared default."""
        return float(self.source_timeouts.get(source, self.timeout_sec))

    def base_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
        }


@dataclass
class SearchConfig:
    """Defaults applied to search requests."""
    sources: list[str] = field(default_factory=lambda: list(ALL_SOURCE_NAMES))
    per_source_limit: int = 10
    randomize: bool = True
    video_preview_limit: int = 50


@dataclass
class ConcurrencyConfig:
    """Worker pool widths for source and resolution fan-out."""
    max_source_workers: int = 5
    max_resolve_workers: int = 5


class ConfigLoader:
    """
    Load configuration from YAML with environment variable overrides.

    Environment variables use the format: COLORWALL_<SECTION>_<KEY>
    Examples:
        COLORWALL_HTTP_TIMEOUT_SEC=30
        COLORWALL_SEARCH_PER_SOURCE_LIMIT=24
        COLORWALL_CONCURRENCY_MAX_RESOLVE_WORKERS=8
        COLORWALL_HTTP_SOURCE_TIMEOUTS_WALLPAPERFLARE=30
    """

    ENV_PREFIX = "COLORWALL_"

    # Mapping-valued keys: COLORWALL_HTTP_SOURCE_TIMEOUTS_WALLHAVEN -> http.source_timeouts.wallhaven
    NESTED_KEYS = {"http": ("source_timeouts",)}

    def __init__(self, config_path: Path = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Path to config.yaml file. Defaults to ./config.yaml
        """
        self.config_path = config_path or Path("./config.yaml")
        self.raw_config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if self.config_path.exists():
            with open(self.config_path) as f:
                self.raw_config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
        else:
            logger.warning(f"Config file not found: {self.config_path}, using defaults")
            self.raw_config = {}

        self._apply_env_overrides()
        self.raw_config = self._expand_env_vars(self.raw_config)

    def _apply_env_overrides(self) -> None:
        """Override configuration values from COLORWALL_* environment variables."""
        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            # COLORWALL_SECTION_KEY -> section.key
            parts = key[len(self.ENV_PREFIX):].lower().split("_")

            if len(parts) >= 2:
                section = parts[0]
                config_key = "_".join(parts[1:])

                typed_value = self._parse_value(value)

                if section not in self.raw_config:
                    self.raw_config[section] = {}

                if isinstance(self.raw_config[section], dict):
                    self._set_override(self.raw_config[section], section, config_key, typed_value)

    def _set_override(self, target: dict, section: str, config_key: str, value: Any) -> None:
        for nested_key in self.NESTED_KEYS.get(section, ()):
            prefix = f"{nested_key}_"
            if config_key.startswith(prefix) and len(config_key) > len(prefix):
                if not isinstance(target.get(nested_key), dict):
                    target[nested_key] = {}
                sub_key = config_key[len(prefix):]
                target[nested_key][sub_key] = value
                logger.debug(f"Config override: {section}.{nested_key}.{sub_key} = {value}")
                return

        target[config_key] = value
        logger.debug(f"Config override: {section}.{config_key} = {value}")

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate Python type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    def _expand_env_vars(self, obj: Any) -> Any:
        """Expand ${VAR} references in configuration values."""
        if isinstance(obj, str):
            pattern = r'\$\{([^}]+)\}'
            for var_name in re.findall(pattern, obj):
                env_value = os.environ.get(var_name, "")
                obj = obj.replace(f"${{{var_name}}}", env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._expand_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        return obj

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Args:
            path: Dot-separated path (e.g., 'http.timeout_sec')
            default: Default value if path not found

        Returns:
            Configuration value or default

        Examples:
            config.get('http.user_agent')            # 'AnimeWallpaperApp/1.0'
            config.get('search.per_source_limit')    # 10
            config.get('http.source_timeouts.wallpaperflare')  # 20
        """
        parts = path.split(".")
        value = self.raw_config

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def _section(self, name: str) -> dict:
        section = self.raw_config.get(name) or {}
        return section if isinstance(section, dict) else {}

    def get_http_config(self) -> HttpConfig:
        """Get HTTP configuration as dataclass."""
        http = self._section("http")
        defaults = HttpConfig()

        timeouts = dict(defaults.source_timeouts)
        overrides = http.get("source_timeouts") or {}
        if isinstance(overrides, dict):
            timeouts.update(overrides)
        else:
            logger.warning(f"Ignoring http.source_timeouts={overrides!r}: expected a mapping of source -> seconds")

        return HttpConfig(
            user_agent=http.get("user_agent", defaults.user_agent),
            accept_language=http.get("accept_language", defaults.accept_language),
            timeout_sec=float(http.get("timeout_sec", defaults.timeout_sec)),
            source_timeouts={k: float(v) for k, v in timeouts.items()},
            connector_limit=int(http.get("connector_limit", defaults.connector_limit)),
        )

    def get_search_config(self) -> SearchConfig:
        """Get search defaults as dataclass."""
        search = self._section("search")
        defaults = SearchConfig()

        sources = search.get("sources") or defaults.sources
        if isinstance(sources, str):
            # COLORWALL_SEARCH_SOURCES=wallhaven,moewalls
            sources = [s.strip() for s in sources.split(",") if s.strip()]

        return SearchConfig(
            sources=list(sources),
            per_source_limit=int(search.get("per_source_limit", defaults.per_source_limit)),
            randomize=bool(search.get("randomize", defaults.randomize)),
            video_preview_limit=int(search.get("video_preview_limit", defaults.video_preview_limit)),
        )

    def get_concurrency_config(self) -> ConcurrencyConfig:
        """Get worker pool widths as dataclass."""
        concurrency = self._section("concurrency")
        defaults = ConcurrencyConfig()

        return ConcurrencyConfig(
            max_source_workers=max(1, int(concurrency.get("max_source_workers", defaults.max_source_workers))),
            max_resolve_workers=max(1, int(concurrency.get("max_resolve_workers", defaults.max_resolve_workers))),
        )


# Global config instance (lazy loaded)
_config: Optional[ConfigLoader] = None


def get_config() -> ConfigLoader:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = ConfigLoader()
    return _config


def reload_config(config_path: Path = None) -> ConfigLoader:
    """Reload configuration from file."""
    global _config
    _config = ConfigLoader(config_path)
    return _config
