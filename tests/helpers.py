# File: tests/helpers.py
"""Test doubles shared by the test-suite."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Dict, List, Optional

from aiohttp import web

from insecure_scanner.crawler.fetcher import FetchError


class FakeFetcher:
    """In-memory site: URL -> HTML. Unknown URLs fail like a 404."""

    def __init__(
        self,
        pages: Dict[str, str],
        delays: Optional[Dict[str, float]] = None,
        default_delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.default_delay = default_delay
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(url, self.default_delay))
            if url not in self.pages:
                raise FetchError(url, "HTTP 404")
            return self.pages[url]
        finally:
            self.active -= 1


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()
