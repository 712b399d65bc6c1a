# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from insecure_scanner.config import CrawlerConfig
from insecure_scanner.crawler.fetcher import FetchError, HttpFetcher
from insecure_scanner.crawler.models import Finding
from insecure_scanner.scanner import start_scan

from tests.helpers import serve_app


@pytest_asyncio.fixture
async def site_server(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()
    calls = {"flaky": 0}

    async def handle_root(_):
        return web.Response(
            text='<a href="/b">B</a><img src="http://insecure.com/i.png">',
            content_type="text/html",
        )

    async def handle_b(_):
        return web.Response(
            text='<object data="http://insecure.com/o.swf"></object>',
            content_type="text/html",
        )

    async def handle_ua(request):
        return web.Response(text=request.headers.get("User-Agent", ""))

    async def handle_flaky(_):
        calls["flaky"] += 1
        if calls["flaky"] <= 2:
            return web.Response(status=503)
        return web.Response(text="<h1>Recovered</h1>", content_type="text/html")

    async def handle_slow(_):
        await asyncio.sleep(1)
        return web.Response(text="<h1>Slow</h1>", content_type="text/html")

    async def handle_forbidden(_):
        return web.Response(status=403)

    app.router.add_get("/", handle_root)
    app.router.add_get("/b", handle_b)
    app.router.add_get("/ua", handle_ua)
    app.router.add_get("/flaky", handle_flaky)
    app.router.add_get("/slow", handle_slow)
    app.router.add_get("/forbidden", handle_forbidden)

    async for url in serve_app(app, unused_tcp_port):
        yield url


@pytest.mark.asyncio()
async def test_fetch_returns_body(site_server: str):
    async with HttpFetcher(CrawlerConfig(timeout=2.0)) as fetcher:
        body = await fetcher.fetch(f"{site_server}/b")
    assert b"o.swf" in body


@pytest.mark.asyncio()
async def test_user_agent_header(site_server: str):
    config = CrawlerConfig(user_agent="TestAgent/1.0")
    async with HttpFetcher(config) as fetcher:
        body = await fetcher.fetch(f"{site_server}/ua")
    assert body == b"TestAgent/1.0"


@pytest.mark.asyncio()
@pytest.mark.parametrize("path,reason", [("/missing", "HTTP 404"), ("/forbidden", "HTTP 403")])
async def test_non_2xx_is_fetch_error(site_server: str, path: str, reason: str):
    async with HttpFetcher(CrawlerConfig()) as fetcher:
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(f"{site_server}{path}")
    assert exc_info.value.reason == reason
    assert exc_info.value.url == f"{site_server}{path}"


@pytest.mark.asyncio()
async def test_server_error_without_retries(site_server: str):
    async with HttpFetcher(CrawlerConfig(retry_times=0)) as fetcher:
        with pytest.raises(FetchError, match="503"):
            await fetcher.fetch(f"{site_server}/flaky")


@pytest.mark.asyncio()
async def test_retry_on_server_error(site_server: str):
    config = CrawlerConfig(retry_times=3, backoff_base=0)
    async with HttpFetcher(config) as fetcher:
        body = await fetcher.fetch(f"{site_server}/flaky")
    assert b"Recovered" in body


@pytest.mark.asyncio()
async def test_timeout_is_fetch_error(site_server: str):
    async with HttpFetcher(CrawlerConfig(timeout=0.2)) as fetcher:
        with pytest.raises(FetchError, match="timed out"):
            await fetcher.fetch(f"{site_server}/slow")


@pytest.mark.asyncio()
async def test_connection_refused_is_fetch_error(unused_tcp_port: int):
    async with HttpFetcher(CrawlerConfig(timeout=2.0)) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch(f"http://localhost:{unused_tcp_port}/")


@pytest.mark.asyncio()
async def test_fetch_requires_session():
    with pytest.raises(RuntimeError):
        await HttpFetcher(CrawlerConfig()).fetch("http://localhost/")


@pytest.mark.asyncio()
async def test_start_scan_end_to_end(site_server: str):
    seen = []
    report = await asyncio.wait_for(
        start_scan(CrawlerConfig(timeout=2.0), site_server + "/", on_finding=seen.append),
        timeout=10,
    )

    assert set(report.findings) == {
        Finding(site_server, "http://insecure.com/i.png"),
        Finding(f"{site_server}/b", "http://insecure.com/o.swf"),
    }
    assert seen == report.findings
    assert report.pages == (site_server, f"{site_server}/b")
