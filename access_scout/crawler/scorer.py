# access_scout/crawler/scorer.py
"""
Frontier scoring: how promising a discovered URL is for an accessibility sample.

Pages with forms (contact, apply, login ...) and ordinary content pages are
preferred; binary assets, mailto/fragment links and query-string duplicates
are pushed down or excluded before any fetch happens.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from access_scout.config import ScoringPolicy

__all__ = ["score_url", "accepts", "has_file_extension"]

_DEFAULT_POLICY = ScoringPolicy()


def has_file_extension(path: str, policy: ScoringPolicy) -> bool:
    """True if *path* ends with one of the policy's non-HTML extensions."""
    last = path.rsplit("/", 1)[-1].lower()
    if "." not in last:
        return False
    return last.rsplit(".", 1)[-1] in policy.file_extensions


def score_url(url: str, site_root: str, policy: Optional[ScoringPolicy] = None) -> int:
    """Return the priority score of *url* discovered while crawling *site_root*.

    The function is pure: same input, same score. Higher is better.
    """
    policy = policy or _DEFAULT_POLICY
    try:
        parsed = urlparse(url)
        root_path = urlparse(site_root).path.lower() or "/"
    except ValueError:
        return policy.malformed_penalty
    path = parsed.path.lower()
    query = parsed.query

    if has_file_extension(path, policy):
        return policy.file_penalty
    if parsed.netloc and path in ("", "/", root_path) and not query:
        return 0
    if url.endswith("#") or "mailto:" in url.lower():
        return policy.fragment_penalty
    if not parsed.scheme or not parsed.netloc:
        return policy.malformed_penalty

    score = 0
    if any(keyword in path for keyword in policy.keywords):
        score += policy.keyword_bonus

    depth = len([segment for segment in path.split("/") if segment])
    if policy.min_bonus_depth <= depth <= policy.max_bonus_depth:
        score += policy.depth_bonus
    if depth > policy.deep_threshold:
        score -= policy.deep_penalty

    if query:
        score -= policy.query_penalty

    return score


def accepts(score: int, policy: Optional[ScoringPolicy] = None) -> bool:
    """Whether a candidate with *score* may enter the frontier."""
    return score >= (policy or _DEFAULT_POLICY).min_score
