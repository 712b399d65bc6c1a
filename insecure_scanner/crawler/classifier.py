# insecure_scanner/crawler/classifier.py
"""
URL classification and resolution for InsecureScanner.

Every function here is pure: results depend only on the arguments.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional
from urllib.parse import SplitResult, urldefrag, urljoin, urlsplit, urlunsplit

__all__ = (
    "ResourceKind",
    "ResourceResult",
    "LinkKind",
    "LinkResult",
    "classify_resource",
    "classify_link",
    "normalize_url",
    "origin_host",
    "same_origin",
)

SECURE_SCHEME = "https"


class ResourceKind(enum.Enum):
    INSECURE = "insecure"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class ResourceResult:
    kind: ResourceKind
    url: Optional[str] = None


class LinkKind(enum.Enum):
    ANCHOR = "anchor"
    EXTERNAL = "external"
    INTERNAL = "internal"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class LinkResult:
    kind: LinkKind
    url: Optional[str] = None


_SKIP = ResourceResult(ResourceKind.SKIP)


def _split(value: str) -> SplitResult:
    """Split *value*, surfacing the errors urlsplit defers (bad port, brackets)."""
    parts = urlsplit(value)
    parts.port  # raises ValueError on a malformed port
    return parts


def _authority(parts: SplitResult) -> str:
    """Host with optional port, lower-cased, without user info."""
    return parts.netloc.rpartition("@")[2].lower()


def origin_host(url: str) -> str:
    """Host used for same-origin comparison: lower-cased, leading ``www.`` removed."""
    return _authority(_split(url)).removeprefix("www.")


def same_origin(a: str, b: str) -> bool:
    """True if both URLs point to the same host, ignoring a leading ``www.``."""
    return origin_host(a) == origin_host(b)


def normalize_url(url: str) -> str:
    """
    Normalize URL by lowercasing scheme and netloc,
    dropping the fragment and stripping one trailing slash.

    Idempotent: ``normalize_url(normalize_url(u)) == normalize_url(u)``.
    """
    parts = urlsplit(url)
    normalized = urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, "")
    )
    return normalized.removesuffix("/")


def _is_protocol_relative(value: str, parts: SplitResult) -> bool:
    return bool(parts.netloc) and value.startswith("//")


def classify_resource(value: str) -> ResourceResult:
    """Decide whether an embedded resource URL is loaded over an insecure transport."""
    value = value.strip()
    try:
        parts = _split(value)
    except ValueError:
        return _SKIP

    if not parts.scheme or not parts.netloc:
        return _SKIP
    if parts.scheme == SECURE_SCHEME or _is_protocol_relative(value, parts):
        return _SKIP
    return ResourceResult(ResourceKind.INSECURE, urlunsplit(parts))


def classify_link(value: str, base_url: str) -> LinkResult:
    """
    Classify the ``href`` of an ``<a>`` tag relative to the page at *base_url*.

    Anchors and links to other hosts are not followed. Relative references
    are resolved against *base_url*; absolute ones keep their own scheme.
    """
    value = value.strip()
    if value.startswith("#"):
        return LinkResult(LinkKind.ANCHOR)

    try:
        parts = _split(value)
        base = _split(base_url)
    except ValueError:
        return LinkResult(LinkKind.INVALID)

    if parts.scheme or _is_protocol_relative(value, parts):
        if _authority(parts).removeprefix("www.") != _authority(base).removeprefix("www."):
            return LinkResult(LinkKind.EXTERNAL)
        if not parts.scheme:
            # protocol-relative: inherit the scheme of the embedding page
            value = f"{base.scheme}:{value}"
        return LinkResult(LinkKind.INTERNAL, normalize_url(value))

    try:
        absolute, _ = urldefrag(urljoin(base_url, value))
    except ValueError:
        return LinkResult(LinkKind.INVALID)
    return LinkResult(LinkKind.INTERNAL, normalize_url(absolute))
