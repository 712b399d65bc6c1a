# insecure_scanner/crawler/crawler.py
"""
Crawl orchestrator.

One asyncio task is spawned per newly claimed URL. Tasks never talk to each
other: they report resources, links, failures and their own completion
through a single event queue owned by :class:`InsecureContentCrawler`, which
claims every discovered link in the :class:`Registry` before spawning a task
for it.

Completion is decided by one of two policies (``CrawlerConfig.completion``):

``inflight``
    finish when no task is running. Each task enqueues its links before its
    ``TaskFinished`` event, so no discovered link is left unclaimed.
``idle``
    finish after a full ``idle_window`` without any discovered link. This is
    a heuristic: a fetch slower than the window looks like a finished crawl.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterator, Callable, Optional, Set, cast

from insecure_scanner.config import CrawlerConfig
from insecure_scanner.crawler.classifier import normalize_url
from insecure_scanner.crawler.fetcher import FetchError, Fetcher
from insecure_scanner.crawler.models import (
    CrawlEvent,
    CrawlReport,
    CrawlState,
    FetchFailure,
    Finding,
    LinkDiscovered,
    ResourceFound,
    TaskFailed,
    TaskFinished,
)
from insecure_scanner.crawler.registry import Registry
from insecure_scanner.parser.html_parser import parse_html

__all__ = ("InsecureContentCrawler",)

logger = logging.getLogger("InsecureScanner")


class InsecureContentCrawler:
    """Crawls same-origin pages from a seed and reports insecure resources."""

    def __init__(
        self,
        fetcher: Fetcher,
        config: Optional[CrawlerConfig] = None,
        registry: Optional[Registry] = None,
    ) -> None:
        self.fetcher = fetcher
        self.config = config or CrawlerConfig()
        self.registry = registry if registry is not None else Registry()
        self.state = CrawlState.IDLE
        self.report: Optional[CrawlReport] = None
        self._events: asyncio.Queue[CrawlEvent] = asyncio.Queue()
        self._slots: Optional[asyncio.Semaphore] = None
        self._tasks: Set[asyncio.Task[None]] = set()
        self._in_flight = 0
        self._idle = False
        self._next_tick = 0.0

    # ------------------------------------------------------------------ API

    async def stream(self, seed: str) -> AsyncIterator[Finding]:
        """Crawl from *seed*, yielding every finding as soon as it is known."""
        if self.state is not CrawlState.IDLE:
            raise RuntimeError("A crawler instance can only run once")

        loop = asyncio.get_running_loop()
        started = loop.time()
        seed = normalize_url(seed)
        report = self.report = CrawlReport(seed=seed)
        if self.config.max_concurrency is not None:
            self._slots = asyncio.Semaphore(self.config.max_concurrency)

        logger.info("Crawl started: %s (completion=%s)", seed, self.config.completion)
        self.registry.claim(seed)
        self._spawn(seed)
        self._set_state(CrawlState.RUNNING)
        self._next_tick = started + self.config.idle_window

        try:
            while True:
                event = await self._next_event()
                if event is None:
                    logger.debug("No new links during %.2f s, stopping", self.config.idle_window)
                    break

                if isinstance(event, LinkDiscovered):
                    self._idle = False
                    if self.registry.claim(event.url):
                        self._spawn(event.url)
                elif isinstance(event, ResourceFound):
                    report.findings.append(event.finding)
                    yield event.finding
                elif isinstance(event, TaskFailed):
                    logger.warning("Failed %s: %s", event.url, event.reason)
                    report.failures.append(FetchFailure(event.url, event.reason))
                elif isinstance(event, TaskFinished):
                    self._in_flight -= 1
                    if self.config.completion == "inflight" and self._in_flight == 0:
                        break
        finally:
            self._set_state(CrawlState.DRAINING)
            await self._drain()
            report.pages = tuple(sorted(self.registry.snapshot()))
            report.elapsed = loop.time() - started
            report.state = CrawlState.DONE
            self._set_state(CrawlState.DONE)
            logger.info(
                "Crawl finished: %d pages, %d findings, %d failures in %.2f s",
                len(report.pages),
                len(report.findings),
                len(report.failures),
                report.elapsed,
            )

    async def crawl(
        self, seed: str, on_finding: Optional[Callable[[Finding], None]] = None
    ) -> CrawlReport:
        """Run the crawl to completion and return its report."""
        async with aclosing(self.stream(seed)) as findings:
            async for finding in findings:
                if on_finding is not None:
                    on_finding(finding)
        return cast(CrawlReport, self.report)

    # ------------------------------------------------------------ internals

    def _set_state(self, state: CrawlState) -> None:
        logger.debug("Crawler state %s -> %s", self.state.value, state.value)
        self.state = state

    def _spawn(self, url: str) -> None:
        self._in_flight += 1
        task = asyncio.create_task(self._process(url), name=f"crawl {url}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _next_event(self) -> Optional[CrawlEvent]:
        """Next event from the tasks; None once the idle policy decides the crawl is over."""
        if self.config.completion != "idle":
            return await self._events.get()

        loop = asyncio.get_running_loop()
        while True:
            now = loop.time()
            if now >= self._next_tick:
                if self._idle:
                    return None
                self._idle = True
                self._next_tick = now + self.config.idle_window
                continue
            try:
                return self._events.get_nowait()
            except asyncio.QueueEmpty:
                pass
            try:
                return await asyncio.wait_for(self._events.get(), timeout=self._next_tick - now)
            except asyncio.TimeoutError:
                continue

    async def _process(self, url: str) -> None:
        try:
            if self._slots is None:
                await self._visit(url)
            else:
                async with self._slots:
                    await self._visit(url)
        except FetchError as exc:
            self._events.put_nowait(TaskFailed(url, exc.reason))
        except Exception as exc:
            logger.exception("Unexpected error while processing %s", url)
            self._events.put_nowait(TaskFailed(url, f"{type(exc).__name__}: {exc}"))
        finally:
            self._events.put_nowait(TaskFinished(url))

    async def _visit(self, url: str) -> None:
        content = await self.fetcher.fetch(url)
        page = parse_html(url, content)
        logger.debug(
            "Parsed %s: %d insecure resources, %d links", url, len(page.resources), len(page.links)
        )
        for resource in sorted(page.resources):
            self._events.put_nowait(ResourceFound(Finding(url, resource)))
        for link in sorted(page.links):
            self._events.put_nowait(LinkDiscovered(link))

    async def _drain(self) -> None:
        stragglers = [task for task in self._tasks if not task.done()]
        if stragglers and self._in_flight > 0:
            logger.warning("Cancelling %d unfinished crawl task(s)", len(stragglers))
            for task in stragglers:
                task.cancel()
        if stragglers:
            await asyncio.gather(*stragglers, return_exceptions=True)
