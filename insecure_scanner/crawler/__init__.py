"""Crawl orchestration, URL classification and fetching."""
from insecure_scanner.crawler.classifier import classify_link, classify_resource, normalize_url
from insecure_scanner.crawler.crawler import InsecureContentCrawler
from insecure_scanner.crawler.fetcher import FetchError, Fetcher, HttpFetcher
from insecure_scanner.crawler.models import CrawlReport, CrawlState, Finding
from insecure_scanner.crawler.registry import Registry

__all__ = [
    "classify_link",
    "classify_resource",
    "normalize_url",
    "InsecureContentCrawler",
    "FetchError",
    "Fetcher",
    "HttpFetcher",
    "CrawlReport",
    "CrawlState",
    "Finding",
    "Registry",
]
