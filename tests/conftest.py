# File: tests/conftest.py
from __future__ import annotations

import logging
from typing import Dict

import pytest

from insecure_scanner.config import CrawlerConfig
from insecure_scanner.logger import LOGGER_NAME


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers the CLI installs so they do not outlive CliRunner streams."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """Config with in-flight completion and a short idle window."""
    return CrawlerConfig(max_concurrency=10, idle_window=0.05, timeout=2.0)


@pytest.fixture()
def example_site() -> Dict[str, str]:
    """The two-page site: seed with a link and an image, /b with an object."""
    return {
        "https://example.com": (
            '<html><body><a href="/b">B</a>'
            '<img src="http://insecure.com/i.png"></body></html>'
        ),
        "https://example.com/b": (
            '<html><body><object data="http://insecure.com/o.swf"></object></body></html>'
        ),
    }
