"""
Data models for the InsecureScanner crawler.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Tuple, Union


class CrawlState(str, enum.Enum):
    """Lifecycle of one crawl run."""

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class Finding:
    """An insecure resource embedded in a crawled page."""

    page: str
    resource: str

    def __str__(self) -> str:
        return f"{self.page}: {self.resource}"


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """A page that could not be fetched, with the human-readable cause."""

    url: str
    reason: str


# Events sent by crawl tasks to the orchestrator ----------------------------


@dataclass(frozen=True, slots=True)
class LinkDiscovered:
    url: str


@dataclass(frozen=True, slots=True)
class ResourceFound:
    finding: Finding


@dataclass(frozen=True, slots=True)
class TaskFailed:
    url: str
    reason: str


@dataclass(frozen=True, slots=True)
class TaskFinished:
    url: str


CrawlEvent = Union[LinkDiscovered, ResourceFound, TaskFailed, TaskFinished]


@dataclass(slots=True)
class CrawlReport:
    """Everything a finished crawl produced."""

    seed: str
    findings: List[Finding] = field(default_factory=list)
    pages: Tuple[str, ...] = ()
    failures: List[FetchFailure] = field(default_factory=list)
    state: CrawlState = CrawlState.IDLE
    elapsed: float = 0.0
