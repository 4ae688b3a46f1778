# access_scout/crawler/models.py
"""
Data models for the AccessScout crawler.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from access_scout.parser.html_parser import PageFacts


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Successful HTTP fetch: decoded markup and the URL after redirects."""

    html: str
    final_url: str
    status: int = 200
    truncated: bool = False


@dataclass(slots=True, frozen=True)
class PageData:
    """Fetched page handed from the crawler to the analyzer.

    ``order`` is the page's position in discovery (dispatch) order and is
    used to break ties deterministically downstream. ``facts`` holds the
    heuristics computed while crawling, None if the markup could not be analyzed.
    """

    url: str
    content: str
    final_url: str = ""
    order: int = 0
    facts: Optional[PageFacts] = None


@dataclass(slots=True, frozen=True)
class FrontierEntry:
    """Candidate URL waiting in the frontier."""

    url: str
    score: int


class CrawlState(str, enum.Enum):
    SEEDED = "seeded"
    EXPANDING = "expanding"
    DRAINING = "draining"
    DONE = "done"


@dataclass(slots=True)
class CrawlResult:
    """Outcome of one crawl run."""

    root: str
    pages: List[PageData] = field(default_factory=list)
    attempted: List[str] = field(default_factory=list)
    frontier_left: Tuple[FrontierEntry, ...] = ()
    state: CrawlState = CrawlState.SEEDED
    elapsed: float = 0.0
    timed_out: int = 0
    failed: int = 0
