# === FILE: insecure_scanner/scanner.py ===
"""
Модуль-обёртка для функции запуска обхода.
"""
from typing import Callable, Optional

from insecure_scanner.config import CrawlerConfig
from insecure_scanner.crawler.crawler import InsecureContentCrawler
from insecure_scanner.crawler.fetcher import HttpFetcher
from insecure_scanner.crawler.models import CrawlReport, Finding


async def start_scan(
    cfg: CrawlerConfig,
    seed: str,
    on_finding: Optional[Callable[[Finding], None]] = None,
) -> CrawlReport:
    """
    Запускает обход сайта с HTTP-загрузчиком и возвращает CrawlReport.

    Parameters
    ----------
    cfg : CrawlerConfig
        Конфигурация обхода.
    seed : str
        Стартовый URL.
    on_finding : callable, optional
        Вызывается для каждой находки сразу после её обнаружения.
    """
    async with HttpFetcher(cfg) as fetcher:
        crawler = InsecureContentCrawler(fetcher, cfg)
        return await crawler.crawl(seed, on_finding=on_finding)

__all__ = ["start_scan"]
