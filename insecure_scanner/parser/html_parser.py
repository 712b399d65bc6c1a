# === FILE: insecure_scanner/parser/html_parser.py ===
"""HTML parsing utilities for InsecureScanner.

:func:`parse_html` walks every tag of a document once and collects two things:

* resources: insecure URLs referenced by ``<img src>``, ``<iframe src>`` and
  ``<object data>``;
* links: same-origin URLs from ``<a href>``, resolved and normalized so they
  can be claimed directly.

Malformed markup never raises: whatever the tokenizer recovers is used, and
markup it rejects outright yields an empty :class:`ParsedPage`.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from insecure_scanner.crawler.classifier import (
    LinkKind,
    ResourceKind,
    classify_link,
    classify_resource,
)
from insecure_scanner.logger import logger

__all__: Sequence[str] = ("ParsedPage", "parse_html", "RESOURCE_ATTRIBUTES")

#: tag name -> attribute holding the embedded resource URL
RESOURCE_ATTRIBUTES: dict[str, str] = {
    "img": "src",
    "iframe": "src",
    "object": "data",
}
LINK_TAG = "a"
LINK_ATTRIBUTE = "href"


@dataclass(frozen=True, slots=True)
class ParsedPage:
    """Insecure resources and followable links found on one page."""

    url: str
    resources: frozenset[str] = field(default_factory=frozenset)
    links: frozenset[str] = field(default_factory=frozenset)


def _attribute(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if isinstance(value, list):  # multi-valued attributes come back as lists
        value = " ".join(value)
    return value if isinstance(value, str) else None


def parse_html(base_url: str, content: Union[str, bytes]) -> ParsedPage:
    """Parse *content* fetched from *base_url*.

    Parameters
    ----------
    base_url
        Normalized URL of the page; relative links are resolved against it.
    content
        Raw markup. ``bytes`` are decoded by BeautifulSoup's encoding
        detection.
    """
    try:
        # the first occurrence of a repeated attribute wins
        soup = BeautifulSoup(content, "html.parser", on_duplicate_attribute="ignore")
    except ParserRejectedMarkup as exc:
        logger.debug("Markup of %s rejected: %s", base_url, exc)
        return ParsedPage(url=base_url)

    resources: set[str] = set()
    links: set[str] = set()
    for tag in soup.find_all([*RESOURCE_ATTRIBUTES, LINK_TAG]):
        if not isinstance(tag, Tag):
            continue

        if tag.name == LINK_TAG:
            href = _attribute(tag, LINK_ATTRIBUTE)
            if href is None:
                continue
            link = classify_link(href, base_url)
            if link.kind is LinkKind.INTERNAL and link.url:
                links.add(link.url)
            continue

        src = _attribute(tag, RESOURCE_ATTRIBUTES[tag.name])
        if src is None:
            continue
        resource = classify_resource(src)
        if resource.kind is ResourceKind.INSECURE and resource.url:
            resources.add(resource.url)

    return ParsedPage(url=base_url, resources=frozenset(resources), links=frozenset(links))
