# File: tests/test_report.py
import json

import pytest

from insecure_scanner.aggregator import aggregate_results
from insecure_scanner.crawler.models import CrawlReport, CrawlState, FetchFailure, Finding
from insecure_scanner.report import render_html, render_json


@pytest.fixture()
def crawl_report() -> CrawlReport:
    return CrawlReport(
        seed="https://example.com",
        findings=[
            Finding("https://example.com/b", "http://insecure.com/z.png"),
            Finding("https://example.com/b", "http://insecure.com/a.png"),
            Finding("https://example.com", "http://insecure.com/<script>.png"),
        ],
        pages=("https://example.com", "https://example.com/b", "https://example.com/clean"),
        failures=[FetchFailure("https://example.com/gone", "HTTP 410")],
        state=CrawlState.DONE,
        elapsed=1.23456,
    )


def test_aggregate_groups_findings_per_page(crawl_report):
    report = aggregate_results(crawl_report)

    assert report.seed == "https://example.com"
    assert report.pages == [
        {"url": "https://example.com", "insecure_resources": ["http://insecure.com/<script>.png"]},
        {
            "url": "https://example.com/b",
            "insecure_resources": ["http://insecure.com/a.png", "http://insecure.com/z.png"],
        },
        {"url": "https://example.com/clean", "insecure_resources": []},
    ]
    assert report.failures == [{"url": "https://example.com/gone", "reason": "HTTP 410"}]
    assert report.summary == {
        "pages_analyzed": 3,
        "pages_with_findings": 2,
        "findings": 3,
        "failures": 1,
        "elapsed": 1.235,
    }


def test_report_json_roundtrip(crawl_report):
    report = aggregate_results(crawl_report)
    assert json.loads(report.json(pretty=True)) == report.to_dict()


def test_render_json(tmp_path, crawl_report):
    path = render_json(aggregate_results(crawl_report), tmp_path / "nested" / "report.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["pages_with_findings"] == 2
    assert data["pages"][1]["url"] == "https://example.com/b"


def test_render_html_escapes_values(tmp_path, crawl_report):
    path = render_html(aggregate_results(crawl_report), tmp_path / "report.html")
    html = path.read_text(encoding="utf-8")
    assert "http://insecure.com/a.png" in html
    assert "&lt;script&gt;" in html
    assert "<script>" not in html
    assert "HTTP 410" in html


def test_render_html_custom_template(tmp_path, crawl_report):
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "report.html.j2").write_text(
        "{{ summary.findings }} findings for {{ seed }}", encoding="utf-8"
    )
    path = render_html(aggregate_results(crawl_report), tmp_path / "out.html", templates)
    assert path.read_text(encoding="utf-8") == "3 findings for https://example.com"
