# File: access_scout/engine.py
"""access_scout.engine: Orchestration layer для анализа сайта и сборки результата.

Цепочка: нормализация URL → кеш → обход → (запасная загрузка корня) →
анализ страниц → агрегация → отпечаток и сравнение → результат.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from aiohttp import ClientSession

from access_scout.aggregator import (
    Assessment,
    Coverage,
    Issue,
    SiteAggregator,
    SiteMetrics,
    WorstPages,
    classify_coverage,
    count_site_sections,
    derive_issues,
    derive_severity,
    summarize,
)
from access_scout.cache import ResultCache
from access_scout.config import ScannerConfig, load_config
from access_scout.crawler.crawler import AsyncCrawler
from access_scout.crawler.fetcher import Fetcher
from access_scout.crawler.models import CrawlResult, PageData
from access_scout.errors import CrawlExhausted, FetchTimeout, ParseFailure
from access_scout.fingerprint import (
    FingerprintStore,
    ScanChanges,
    ScanFingerprint,
    compute_fingerprint,
    diff_fingerprints,
)
from access_scout.logger import logger
from access_scout.parser.html_parser import PageFacts, analyze_html
from access_scout.utils import normalize_target

__all__ = ["AnalysisResult", "EvidenceRecord", "Engine", "start_scan", "to_evidence_record"]

WHY_THIS_MATTERS = (
    "Public websites must comply with Section 508 of the Rehabilitation Act. Non-compliance "
    "blocks people with disabilities from accessing essential services and creates legal risk. "
    "Accessible design also improves usability for all users."
)
AFFECTED_USERS = ("Screen reader users", "Keyboard-only users", "Low-vision users", "Mobile users")
DISCLAIMER = (
    "This tool provides high-level guidance based on HTML extraction from sampled pages and "
    "does not replace a comprehensive Section 508 compliance audit."
)


@dataclass(slots=True)
class AnalysisResult:
    """Структурированный результат анализа сайта; имена полей стабильны."""

    url: str
    generated_at: str
    coverage: Coverage
    pages_scanned: List[str]
    pages_fetched: List[str]
    site_sections: int
    metrics: SiteMetrics
    worst_pages: WorstPages
    issues: List[Issue]
    assessment: Assessment
    summary_bullets: List[str]
    current_fingerprint: ScanFingerprint
    previous_fingerprint: Optional[ScanFingerprint] = None
    changes: Optional[ScanChanges] = None
    why_this_matters: str = WHY_THIS_MATTERS
    affected_users: List[str] = field(default_factory=lambda: list(AFFECTED_USERS))
    disclaimer: str = DISCLAIMER

    @property
    def pages_sampled_count(self) -> int:
        return len(self.pages_scanned)

    @property
    def is_first_scan(self) -> bool:
        return self.previous_fingerprint is None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["pages_sampled_count"] = self.pages_sampled_count
        data["pages_fetched_count"] = len(self.pages_fetched)
        # worst pages are reported once, at the top level
        data["metrics"].pop("worst_pages", None)
        return data

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление результата."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


@dataclass(slots=True, frozen=True)
class EvidenceRecord:
    """Плоская запись для внешнего хранилища свидетельств."""

    url: str
    scanned_at: str
    pages_sampled: int
    missing_alt_count: int
    unlabeled_controls_count: int
    issues_found: int
    coverage: str
    severity: str
    fingerprint: str


def to_evidence_record(result: AnalysisResult) -> EvidenceRecord:
    return EvidenceRecord(
        url=result.url,
        scanned_at=result.generated_at,
        pages_sampled=result.pages_sampled_count,
        missing_alt_count=result.metrics.images_missing_alt,
        unlabeled_controls_count=result.metrics.controls_unlabeled,
        issues_found=len(result.issues),
        coverage=result.coverage.value,
        severity=result.assessment.severity.value,
        fingerprint=result.current_fingerprint.hash,
    )


class Engine:
    """Фасад для CLI и тестов: обход, анализ и сборка результата.

    Кеш результатов и хранилище отпечатков передаются явно; по умолчанию
    каждый Engine получает собственные экземпляры.
    """

    @staticmethod
    def load_config(path: Optional[str]) -> ScannerConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        *,
        cache: Optional[ResultCache[AnalysisResult]] = None,
        fingerprints: Optional[FingerprintStore] = None,
    ) -> None:
        self.config = config or ScannerConfig()
        self.cache = cache if cache is not None else ResultCache(ttl=self.config.cache_ttl)
        self.fingerprints = fingerprints if fingerprints is not None else FingerprintStore()

    async def analyze(self, raw_url: str, *, session: Optional[ClientSession] = None) -> AnalysisResult:
        """Анализирует сайт. Бросает InvalidInput или CrawlExhausted."""
        url = normalize_target(raw_url)

        cached = self.cache.get(url)
        if cached is not None:
            return cached

        async with Fetcher(self.config.crawl, session=session) as http:
            crawler = AsyncCrawler(self.config, fetcher=http)
            crawl = await crawler.crawl(url)
            if not crawl.pages:
                await self._fallback(http, url, crawl)

        result = self.build_result(url, crawl)
        self.cache.set(url, result)
        return result

    def start_scan(self, raw_url: str) -> AnalysisResult:
        """Синхронная обёртка над :meth:`analyze`."""
        logger.info("Starting scan…")
        try:
            return asyncio.run(self.analyze(raw_url))
        except Exception as exc:
            logger.error("Scanning failed: %s", exc)
            raise

    async def _fallback(self, http: Fetcher, url: str, crawl: CrawlResult) -> None:
        settings = self.config.crawl
        logger.info("Crawl returned 0 pages, trying single fetch fallback")
        if settings.fallback_delay:
            await asyncio.sleep(settings.fallback_delay)
        try:
            fetched = await http.fetch(url, settings.fallback_timeout)
        except FetchTimeout as exc:
            logger.error("Single fetch fallback timed out: %s", exc)
            raise CrawlExhausted(url, CrawlExhausted.TIMEOUT) from exc
        except Exception as exc:
            logger.error("Single fetch fallback also failed: %s", exc)
            raise CrawlExhausted(url, CrawlExhausted.BLOCKED) from exc

        root = crawl.root
        if root in crawl.attempted:
            order = crawl.attempted.index(root)
        else:
            order = len(crawl.attempted)
            crawl.attempted.append(root)
        crawl.pages.append(PageData(url=root, content=fetched.html, final_url=fetched.final_url, order=order))
        logger.info("Single fetch fallback succeeded")

    def analyze_pages(self, root: str, pages: List[PageData]) -> List[PageFacts]:
        """Факты страниц из обхода или новый разбор; страница с ошибкой разбора пропускается."""
        facts: List[PageFacts] = []
        for page in pages:
            if page.facts is not None:
                facts.append(page.facts)
                continue
            try:
                facts.append(
                    analyze_html(
                        page.content,
                        page.url,
                        root,
                        order=page.order,
                        base_url=page.final_url or None,
                        parser=self.config.html_parser,
                        sample_limit=self.config.sample_links_limit,
                    )
                )
            except ParseFailure as exc:
                logger.warning("Error processing page %s: %s", page.url, exc)
        return facts

    def build_result(self, url: str, crawl: CrawlResult) -> AnalysisResult:
        """Собирает результат из страниц обхода и обновляет хранилище отпечатков."""
        aggregator = SiteAggregator(
            url, worst_limit=self.config.worst_pages_limit, sample_limit=self.config.sample_links_limit
        )
        aggregator.extend(self.analyze_pages(crawl.root, crawl.pages))
        metrics = aggregator.finalize()

        issues = derive_issues(metrics)
        current = compute_fingerprint(metrics)
        previous = self.fingerprints.put(url, current)

        fetched = {page.url for page in crawl.pages}
        return AnalysisResult(
            url=url,
            generated_at=datetime.now(timezone.utc).isoformat(),
            coverage=classify_coverage(metrics),
            pages_scanned=list(crawl.attempted),
            pages_fetched=[u for u in crawl.attempted if u in fetched],
            site_sections=count_site_sections(crawl.attempted),
            metrics=metrics,
            worst_pages=metrics.worst_pages,
            issues=issues,
            assessment=derive_severity(issues),
            summary_bullets=summarize(metrics, len(crawl.attempted)),
            current_fingerprint=current,
            previous_fingerprint=previous,
            changes=diff_fingerprints(previous, current),
        )


async def start_scan(cfg: ScannerConfig, url: str, engine: Optional[Engine] = None) -> AnalysisResult:
    """
    Запускает анализ сайта и возвращает AnalysisResult.

    Parameters
    ----------
    cfg : ScannerConfig
        Конфигурация сканирования.
    url : str
        Адрес сайта или голое имя хоста.
    """
    return await (engine or Engine(cfg)).analyze(url)
