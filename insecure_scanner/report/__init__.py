# File: insecure_scanner/report/__init__.py
"""insecure_scanner.report: Генерация отчётов (JSON и HTML) для CLI и тестов."""

from insecure_scanner.report.html_report import render_html
from insecure_scanner.report.json_report import render_json

__all__ = ["render_json", "render_html"]
