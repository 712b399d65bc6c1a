# insecure_scanner/crawler/registry.py
"""
Registry of URLs claimed for processing during one crawl run.
"""
from __future__ import annotations

import threading
from typing import FrozenSet, Set

from insecure_scanner.crawler.classifier import normalize_url
from insecure_scanner.logger import logger


class Registry:
    """Thread-safe exactly-once claim table."""

    def __init__(self) -> None:
        self._claimed: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, url: str) -> bool:
        """
        Atomically mark *url* as claimed.

        Returns True only for the first caller that claims this normalized URL;
        every later call, from any task or thread, returns False.
        """
        normalized = normalize_url(url)
        with self._lock:
            if normalized in self._claimed:
                return False
            self._claimed.add(normalized)
        logger.debug("Claimed %s", normalized)
        return True

    def snapshot(self) -> FrozenSet[str]:
        """All claimed URLs. Meant for reporting once the crawl has finished."""
        with self._lock:
            return frozenset(self._claimed)

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        with self._lock:
            return normalize_url(url) in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)
