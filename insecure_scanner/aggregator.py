# File: insecure_scanner/aggregator.py
"""insecure_scanner.aggregator: Модуль агрегатора отчетов обхода."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, List, TypedDict

from insecure_scanner.crawler.models import CrawlReport


class PageInfo(TypedDict):
    """Страница и найденные на ней небезопасные ресурсы."""

    url: str
    insecure_resources: List[str]


class FailureInfo(TypedDict):
    """Страница, которую не удалось загрузить."""

    url: str
    reason: str


class SummaryInfo(TypedDict):
    """Итоговые счётчики."""

    pages_analyzed: int
    pages_with_findings: int
    findings: int
    failures: int
    elapsed: float


@dataclass(slots=True)
class ScanReport:
    """Результаты обхода сайта: страницы, находки и ошибки загрузки."""

    seed: str
    pages: List[PageInfo] = field(default_factory=list)
    failures: List[FailureInfo] = field(default_factory=list)
    summary: SummaryInfo = field(
        default_factory=lambda: SummaryInfo(
            pages_analyzed=0, pages_with_findings=0, findings=0, failures=0, elapsed=0.0
        )
    )

    def to_dict(self) -> dict:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление ScanReport."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def _aggregate_pages(report: CrawlReport) -> List[PageInfo]:
    """Группирует находки по страницам; страницы без находок тоже попадают в отчёт."""
    resources: Dict[str, List[str]] = {url: [] for url in report.pages}
    for finding in report.findings:
        resources.setdefault(finding.page, []).append(finding.resource)
    return [
        {"url": url, "insecure_resources": sorted(found)}
        for url, found in sorted(resources.items())
    ]


def _aggregate_failures(report: CrawlReport) -> List[FailureInfo]:
    """Преобразует ошибки загрузки."""
    return [
        {"url": failure.url, "reason": failure.reason}
        for failure in sorted(report.failures, key=lambda f: f.url)
    ]


def aggregate_results(report: CrawlReport) -> ScanReport:
    """Собирает все части отчёта в ScanReport."""
    pages = _aggregate_pages(report)
    failures = _aggregate_failures(report)
    return ScanReport(
        seed=report.seed,
        pages=pages,
        failures=failures,
        summary={
            "pages_analyzed": len(report.pages),
            "pages_with_findings": sum(1 for p in pages if p["insecure_resources"]),
            "findings": len(report.findings),
            "failures": len(failures),
            "elapsed": round(report.elapsed, 3),
        },
    )
