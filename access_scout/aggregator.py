# File: access_scout/aggregator.py
"""access_scout.aggregator: Сведение фактов страниц в метрики сайта и выводы.

Содержит агрегатор, рейтинг худших страниц, оценку покрытия, правила
формирования проблем и единственную таблицу серьёзности/трудозатрат.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from access_scout.parser.html_parser import PageFacts
from access_scout.utils import extract_domain, path_segments

__all__ = [
    "Severity",
    "Effort",
    "Coverage",
    "Issue",
    "PageMetrics",
    "WorstPages",
    "SiteMetrics",
    "Assessment",
    "SiteAggregator",
    "SEVERITY_TABLE",
    "aggregate_pages",
    "group_by_section",
    "count_site_sections",
    "classify_coverage",
    "derive_issues",
    "derive_severity",
    "summarize",
]


class Severity(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"


class Effort(str, enum.Enum):
    EASY = "Easy"
    MODERATE = "Moderate"


class Coverage(str, enum.Enum):
    GOOD = "Good"
    PARTIAL = "Partial"
    LIMITED = "Limited"


@dataclass(slots=True, frozen=True)
class Issue:
    """Найденная проблема доступности."""

    id: str
    title: str
    description: str
    impact: str
    typical_fix: str


@dataclass(slots=True, frozen=True)
class PageMetrics:
    """Счётчики дефектов одной страницы для рейтинга худших страниц."""

    url: str
    missing_alt_count: int
    unlabeled_controls_count: int


@dataclass(slots=True)
class WorstPages:
    by_missing_alt: List[PageMetrics] = field(default_factory=list)
    by_unlabeled_controls: List[PageMetrics] = field(default_factory=list)


@dataclass(slots=True)
class SiteMetrics:
    """Итоговые метрики сайта по всем проанализированным страницам."""

    hostname: str = ""
    pages_analyzed: int = 0
    title: Optional[str] = None
    meta_description: Optional[str] = None
    images_total: int = 0
    images_missing_alt: int = 0
    controls_total: int = 0
    controls_unlabeled: int = 0
    forms_total: int = 0
    links_total: int = 0
    links_internal: int = 0
    links_external: int = 0
    sample_internal: List[str] = field(default_factory=list)
    sample_external: List[str] = field(default_factory=list)
    worst_pages: WorstPages = field(default_factory=WorstPages)


@dataclass(slots=True, frozen=True)
class Assessment:
    """Серьёзность и трудозатраты с пояснениями."""

    severity: Severity
    severity_rationale: str
    effort: Effort
    effort_rationale: str


# --------------------------------------------------------------------------- #
# Aggregation                                                                  #
# --------------------------------------------------------------------------- #


def _rank(
    facts: Sequence[PageFacts], key: str, limit: int
) -> List[PageMetrics]:
    offenders = [f for f in facts if getattr(f, key) > 0]
    # stable sort: equal counts keep discovery order
    offenders.sort(key=lambda f: (-getattr(f, key), f.order))
    return [
        PageMetrics(
            url=f.url,
            missing_alt_count=f.images_missing_alt,
            unlabeled_controls_count=f.controls_unlabeled,
        )
        for f in offenders[:limit]
    ]


class SiteAggregator:
    """Накопитель фактов страниц.

    Порядок поступления страниц не влияет на результат: при финализации
    страницы упорядочиваются по порядку обнаружения.
    """

    def __init__(self, site_root: str, *, worst_limit: int = 5, sample_limit: int = 5) -> None:
        self.site_root = site_root
        self.hostname = extract_domain(site_root)
        self.worst_limit = worst_limit
        self.sample_limit = sample_limit
        self._facts: List[PageFacts] = []

    def add(self, facts: PageFacts) -> None:
        self._facts.append(facts)

    def extend(self, facts: Iterable[PageFacts]) -> None:
        for item in facts:
            self.add(item)

    def __len__(self) -> int:
        return len(self._facts)

    def finalize(self) -> SiteMetrics:
        pages = sorted(self._facts, key=lambda f: (f.order, f.url))
        metrics = SiteMetrics(hostname=self.hostname, pages_analyzed=len(pages))

        seen: set[str] = set()
        for f in pages:
            if metrics.title is None and f.title:
                metrics.title = f.title
                metrics.meta_description = f.meta_description
            metrics.images_total += f.images_total
            metrics.images_missing_alt += f.images_missing_alt
            metrics.controls_total += f.controls_total
            metrics.controls_unlabeled += f.controls_unlabeled
            metrics.forms_total += f.forms_total
            for url in f.links:
                if url in seen:
                    continue
                seen.add(url)
                if extract_domain(url) == self.hostname:
                    metrics.links_internal += 1
                    if len(metrics.sample_internal) < self.sample_limit:
                        metrics.sample_internal.append(url)
                else:
                    metrics.links_external += 1
                    if len(metrics.sample_external) < self.sample_limit:
                        metrics.sample_external.append(url)

        metrics.links_total = len(seen)
        metrics.worst_pages = WorstPages(
            by_missing_alt=_rank(pages, "images_missing_alt", self.worst_limit),
            by_unlabeled_controls=_rank(pages, "controls_unlabeled", self.worst_limit),
        )
        return metrics


def aggregate_pages(
    site_root: str, facts: Iterable[PageFacts], *, worst_limit: int = 5, sample_limit: int = 5
) -> SiteMetrics:
    """Собирает все факты страниц в SiteMetrics."""
    aggregator = SiteAggregator(site_root, worst_limit=worst_limit, sample_limit=sample_limit)
    aggregator.extend(facts)
    return aggregator.finalize()


# --------------------------------------------------------------------------- #
# Coverage & sections                                                          #
# --------------------------------------------------------------------------- #


def group_by_section(urls: Iterable[str]) -> Dict[str, List[str]]:
    """Группирует URL по первому сегменту пути (``/news``, ``/forms``, ``/``)."""
    groups: Dict[str, List[str]] = {}
    for url in urls:
        try:
            segments = path_segments(url)
        except ValueError:
            segments = []
        key = f"/{segments[0]}" if segments else "/"
        groups.setdefault(key, []).append(url)
    return groups


def count_site_sections(urls: Iterable[str]) -> int:
    return len(group_by_section(urls))


def classify_coverage(metrics: SiteMetrics) -> Coverage:
    has_title = bool(metrics.title)
    categories = sum(
        1 for total in (metrics.links_total, metrics.forms_total, metrics.images_total) if total > 0
    )
    if has_title and categories >= 2:
        return Coverage.GOOD
    if has_title and categories >= 1:
        return Coverage.PARTIAL
    return Coverage.LIMITED


# --------------------------------------------------------------------------- #
# Issues & severity                                                            #
# --------------------------------------------------------------------------- #

MISSING_LABELS = "missing-labels"
MISSING_ALT = "missing-alt"
NO_LINKS = "no-links-detected"


def derive_issues(metrics: SiteMetrics) -> List[Issue]:
    """Правила формирования проблем; порядок вывода фиксирован."""
    issues: List[Issue] = []

    if metrics.controls_total > 0 and metrics.controls_unlabeled > 0:
        issues.append(
            Issue(
                id=MISSING_LABELS,
                title="Section 508.22.4 - Missing form labels",
                description=(
                    f"We found {metrics.controls_unlabeled} form controls that may be missing "
                    f"programmatic labels (out of {metrics.controls_total}). This violates "
                    "Section 508 requirements for form accessibility."
                ),
                impact=(
                    "Screen reader users cannot identify form fields, making it impossible to "
                    "complete forms. Violates Section 508 standards."
                ),
                typical_fix=(
                    "Add semantic <label> elements tied to inputs or use aria-label/aria-labelledby."
                ),
            )
        )

    if metrics.images_total > 0 and metrics.images_missing_alt > 0:
        issues.append(
            Issue(
                id=MISSING_ALT,
                title="Section 508.22.1 - Images missing alt text",
                description=(
                    f"We found {metrics.images_missing_alt} images without alt text (out of "
                    f"{metrics.images_total}). Section 508 requires all images to have "
                    "descriptive alternative text."
                ),
                impact=(
                    "Screen reader users miss important context and information. "
                    "Violates Section 508 standards."
                ),
                typical_fix=(
                    'Add meaningful alt text for informative images; use empty alt (alt="") '
                    "for decorative images."
                ),
            )
        )

    if metrics.links_total == 0:
        issues.append(
            Issue(
                id=NO_LINKS,
                title="No links detected on the fetched HTML",
                description=(
                    "We didn't detect any <a href> links in the HTML we fetched. This can happen "
                    "if the page is heavily JS-rendered."
                ),
                impact=(
                    "Navigation may not be fully captured. Some automated checks may miss content "
                    "if it renders only after scripts run."
                ),
                typical_fix=(
                    "Confirm the page renders meaningful HTML server-side or add "
                    "pre-rendering/SSR for key content."
                ),
            )
        )

    return issues


# (labels issue present, alt issue present) -> (severity, effort)
SEVERITY_TABLE: Dict[Tuple[bool, bool], Tuple[Severity, Effort]] = {
    (True, True): (Severity.MEDIUM, Effort.MODERATE),
    (True, False): (Severity.MEDIUM, Effort.MODERATE),
    (False, True): (Severity.LOW, Effort.EASY),
    (False, False): (Severity.LOW, Effort.EASY),
}

SEVERITY_RATIONALE: Dict[Severity, str] = {
    Severity.MEDIUM: (
        "These gaps present Section 508 compliance risks and may block users from accessing "
        "services. Remediation is typically achievable without major redesign."
    ),
    Severity.LOW: (
        "No obvious Section 508 blockers detected from HTML extraction; a full compliance "
        "audit is still recommended."
    ),
}

EFFORT_RATIONALE: Dict[Effort, str] = {
    Effort.MODERATE: (
        "Most fixes are straightforward (labels, alt text, focus states) but may require "
        "updates across multiple templates."
    ),
    Effort.EASY: "Likely small, localized changes if issues exist.",
}


def derive_severity(issues: Iterable[Issue]) -> Assessment:
    ids = {issue.id for issue in issues}
    severity, effort = SEVERITY_TABLE[(MISSING_LABELS in ids, MISSING_ALT in ids)]
    return Assessment(
        severity=severity,
        severity_rationale=SEVERITY_RATIONALE[severity],
        effort=effort,
        effort_rationale=EFFORT_RATIONALE[effort],
    )


def summarize(metrics: SiteMetrics, pages_scanned: int, *, limit: int = 5) -> List[str]:
    """Короткие пункты резюме для неспециалистов."""
    bullets: List[str] = []
    if metrics.title:
        bullets.append(f'Page title: "{metrics.title}".')
    bullets.append(
        f"Scanned {pages_scanned} page(s) sampled from key sections. Found "
        f"{metrics.links_total} unique links ({metrics.links_internal} internal, "
        f"{metrics.links_external} external)."
    )
    if metrics.controls_total > 0:
        bullets.append(
            f"Found {metrics.forms_total} form(s) and {metrics.controls_total} form controls "
            "across the sampled pages."
        )
    else:
        bullets.append("No form controls detected in the sampled pages.")
    if metrics.images_total > 0:
        bullets.append(
            f"Found {metrics.images_total} image(s) across the sampled pages; "
            f"{metrics.images_missing_alt} missing alt text."
        )
    return bullets[:limit]
