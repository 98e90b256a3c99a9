"""
Shared fixtures: an in-memory fetcher so no test touches the network.
"""
import os
import sys
from pathlib import Path
from typing import Any, Optional, Union

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config_loader import ConfigLoader
from exceptions import TransportError


class FakeFetcher:
    """Maps URLs to HTML bodies or exceptions; unknown URLs are a 404."""

    def __init__(self, pages: Optional[dict[str, Union[str, BaseException]]] = None):
        self.pages = dict(pages or {})
        self.calls: list[dict[str, Any]] = []

    async def get_text(self, url, params=None, headers=None, timeout=None) -> str:
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        response = self.pages.get(url)
        if response is None:
            raise TransportError(f"HTTP 404 for {url}", url=url, status=404)
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self) -> None:
        pass

    def urls(self) -> list[str]:
        return [call["url"] for call in self.calls]


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Defaults only: no config.yaml and no COLORWALL_* overrides."""
    for key in list(os.environ):
        if key.startswith(ConfigLoader.ENV_PREFIX):
            monkeypatch.delenv(key)
    return ConfigLoader(tmp_path / "missing.yaml")
