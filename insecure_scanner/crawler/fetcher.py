# insecure_scanner/crawler/fetcher.py
"""
Fetcher module: the capability the crawler consumes to retrieve page content,
plus the aiohttp implementation with timeout and optional retry/backoff.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from insecure_scanner.config import CrawlerConfig

__all__ = ("FetchError", "Fetcher", "HttpFetcher", "RETRY_STATUS")

logger = logging.getLogger("InsecureScanner")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
MAX_BACKOFF = 60.0

Content = Union[str, bytes]


class FetchError(Exception):
    """A page could not be retrieved. *reason* is meant for humans."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class Fetcher(Protocol):
    """Anything able to turn a URL into raw page content."""

    async def fetch(self, url: str) -> Content:
        """Return the content of *url* or raise :class:`FetchError`."""
        ...


class _RetryableStatus(ClientError):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status


class HttpFetcher:
    """Handles HTTP fetching with timeout and retries/backoff."""

    def __init__(
        self,
        config: CrawlerConfig,
        session: Optional[ClientSession] = None,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._retry_status = retry_status

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> Content:
        """
        Fetch the URL body.

        Raises FetchError on network failure, timeout or a non-2xx status.
        5xx and 429 responses are retried ``config.retry_times`` times.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        attempts = 0
        while True:
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self._retry_status:
                        raise _RetryableStatus(resp.status)
                    if not 200 <= resp.status < 300:
                        raise FetchError(url, f"HTTP {resp.status}")
                    return await resp.read()
            except asyncio.TimeoutError as exc:
                raise FetchError(url, f"timed out after {self.config.timeout:g}s") from exc
            except ClientError as exc:
                attempts += 1
                retryable = isinstance(exc, _RetryableStatus)
                if not retryable or attempts > self.config.retry_times:
                    raise FetchError(url, str(exc) or type(exc).__name__) from exc
                backoff = min(MAX_BACKOFF, self.config.backoff_base * 2**attempts)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff
                )
                await asyncio.sleep(backoff)
