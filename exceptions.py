"""Exceptions raised while scraping wallpaper sources."""

from typing import Optional


class ScrapeError(Exception):
    """Base exception for a failed source or resolution step."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.message = message
        self.source = source
        super().__init__(message)


class PreconditionError(ScrapeError):
    """A source was invoked without a query its search protocol requires."""

    pass


class EmptyResultError(ScrapeError):
    """The listing fetch succeeded but no wallpapers could be parsed from it."""

    pass


class TransportError(ScrapeError):
    """Timeout, connection failure or non-2xx response."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ):
        self.url = url
        self.status = status
        super().__init__(message, source)


class ResolutionError(ScrapeError):
    """A detail page could not be fetched or parsed. Never fatal."""

    def __init__(self, detail_url: str, cause: Exception, source: Optional[str] = None):
        self.detail_url = detail_url
        self.cause = cause
        super().__init__(f"Could not resolve {detail_url}: {cause}", source)
