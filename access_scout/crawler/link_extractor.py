# access_scout/crawler/link_extractor.py
"""
Link extraction and crawl guards for AccessScout.
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from access_scout.config import CrawlSettings
from access_scout.utils import canonical_url, extract_domain

_SKIP_SCHEMES: Tuple[str, ...] = ("mailto:", "javascript:", "tel:", "data:")


def iter_hrefs(soup: BeautifulSoup) -> Iterable[str]:
    """Yield stripped, non-empty href values of all anchors."""
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if raw:
            yield raw


def resolve_href(href: str, base_url: str) -> Optional[str]:
    """Resolve *href* against *base_url*; None for non-http(s) or broken links."""
    if href.lower().startswith(_SKIP_SCHEMES):
        return None
    try:
        absolute = urljoin(base_url, href)
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return absolute


def should_crawl(url: str, site_root: str, settings: Optional[CrawlSettings] = None) -> bool:
    """
    Crawl guard applied before scoring: same host as the site root, and not an
    account/admin area listed in ``skip_paths``.
    """
    settings = settings or CrawlSettings()
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    if extract_domain(url) != extract_domain(site_root):
        return False
    path = parsed.path.lower()
    return not any(skip in path for skip in settings.skip_paths)


def normalize_url(url: str) -> str:
    """Visited-set key of *url* (fragment removed)."""
    return canonical_url(url)
