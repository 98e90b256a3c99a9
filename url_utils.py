"""
URL and text helpers shared by the source adapters.

None of these raise on bad input: scraped markup is untrusted and a single
malformed attribute must not take down a whole listing.
"""

import re
from typing import Any, Optional
from urllib.parse import quote, urljoin, urlparse

RESOLUTION_PATTERN = re.compile(r"(\d{3,5})\s*[x×]\s*(\d{3,5})", re.IGNORECASE)

# Characters that can never appear in a URL, even an unencoded one
_ILLEGAL_URL_CHARS = re.compile(r'[\s<>"{}|\\^`]')

# Scheme, rooted, protocol-relative or dot-relative reference
_URL_LIKE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|/|\.\.?/)")

# Reserved and already-encoded characters survive quoting
_URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"

# Lazy-load attribute first, inline src last
THUMBNAIL_ATTRIBUTES = ("data-src", "data-original", "data-srcset", "srcset", "src")
SRCSET_ATTRIBUTES = ("data-srcset", "srcset")


def absolute_url(href: Optional[str], base: str) -> str:
    """
    Resolve ``href`` against ``base``.

    Handles relative paths, rooted paths and protocol-relative (``//host``)
    references. Spaces and other unencoded characters in a URL-like href
    are percent-encoded. Anything that does not look like a URL is returned
    as-is.
    """
    if not href:
        return ""

    href = href.strip()
    if _ILLEGAL_URL_CHARS.search(href):
        if not _URL_LIKE.match(href):
            return href
        href = quote(href, safe=_URL_SAFE_CHARS)

    try:
        parsed_base = urlparse(base)
        if not parsed_base.scheme or not parsed_base.netloc:
            return href
        return urljoin(base, href)
    except ValueError:
        return href


def parse_resolution(text: Optional[str]) -> dict[str, int]:
    """
    Extract the first WIDTHxHEIGHT token from text.

    >>> parse_resolution("1920x1080 wallpaper")
    {'width': 1920, 'height': 1080}
    >>> parse_resolution("no numbers here")
    {}
    """
    if not text:
        return {}

    match = RESOLUTION_PATTERN.search(text)
    if not match:
        return {}

    try:
        width = int(match.group(1))
        height = int(match.group(2))
    except ValueError:
        return {}

    return {"width": width, "height": height}


def pick_image_source(value: Optional[str]) -> str:
    """First candidate of a srcset or CSS ``url(...)`` value."""
    if not value:
        return ""

    first_segment = value.split(",")[0].strip()
    first_segment = re.sub(r"""^url\(["']?""", "", first_segment)
    first_segment = re.sub(r"""["']?\)$""", "", first_segment)

    # Drop srcset width/density descriptors ("thumb.jpg 2x")
    parts = first_segment.split()
    return parts[0] if parts else ""


def pick_thumbnail(node: Any) -> str:
    """Best thumbnail URL on an <img>/<source> tag, or "" if it has none."""
    if node is None:
        return ""

    for attribute in THUMBNAIL_ATTRIBUTES:
        raw = node.get(attribute)
        if attribute in SRCSET_ATTRIBUTES:
            value = pick_image_source(raw)
        else:
            value = raw.strip() if raw else ""
        if value:
            return value
    return ""


def sanitize_id(path: Optional[str]) -> str:
    """
    Turn a detail-page href into an id fragment.

    Takes the last non-empty path segment and strips everything outside
    ``[A-Za-z0-9_-]``: ``/w/abc123/`` becomes ``abc123``.
    """
    if not path:
        return ""

    try:
        path = urlparse(path).path or path
    except ValueError:
        pass

    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return ""
    return re.sub(r"[^a-zA-Z0-9_-]", "", segments[-1])


def slugify(text: str) -> str:
    """Lowercase, whitespace-to-dash slug used for title-derived ids."""
    slug = re.sub(r"\s+", "-", text.strip()).lower()
    return re.sub(r"[^a-z0-9_-]", "", slug)
