from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Iterable, Optional, Set

from access_scout.config import ScannerConfig
from access_scout.crawler.fetcher import Fetcher
from access_scout.crawler.frontier import Frontier
from access_scout.crawler.limiter import ConcurrencyLimiter
from access_scout.crawler.link_extractor import normalize_url, should_crawl
from access_scout.crawler.models import CrawlResult, CrawlState, PageData
from access_scout.crawler.scorer import accepts, score_url
from access_scout.errors import FetchFailed, FetchTimeout, ParseFailure
from access_scout.parser.html_parser import analyze_html

__all__ = ("AsyncCrawler",)


class AsyncCrawler:
    """Асинхронный приоритетный обходчик с бюджетом времени и лимитом параллелизма.

    Frontier и множество посещённых URL принадлежат только оркестратору:
    задачи страниц загружают разметку, разбирают её в отдельном потоке и
    возвращают страницу вместе с фактами, а оценку и приём ссылок
    оркестратор выполняет последовательно.
    """

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        *,
        fetcher: Optional[Fetcher] = None,
        limiter: Optional[ConcurrencyLimiter] = None,
    ) -> None:
        self.config = config or ScannerConfig()
        self.settings = self.config.crawl
        self.fetcher = fetcher or Fetcher(self.settings)
        self._owns_fetcher = fetcher is None
        self.limiter = limiter or ConcurrencyLimiter(self.settings.concurrency)
        self.logger = logging.getLogger("AccessScout")
        self.state = CrawlState.SEEDED
        self._timed_out = 0
        self._failed = 0

    async def __aenter__(self) -> AsyncCrawler:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_fetcher:
            await self.fetcher.close()

    async def crawl(self, root: str) -> CrawlResult:
        """Обходит сайт начиная с *root* и возвращает собранные страницы."""
        settings = self.settings
        root = normalize_url(root)
        self.logger.info("Старт обхода: %s (до %d страниц, %.1f с)", root, settings.max_pages, settings.total_timeout)

        start = time.monotonic()
        deadline = start + settings.total_timeout
        soft_deadline = start + settings.total_timeout * settings.soft_cutoff_ratio

        result = CrawlResult(root=root)
        frontier = Frontier()
        frontier.push(root, 0)
        queued: Set[str] = {root}
        visited: Set[str] = set()
        pending: Dict[asyncio.Task, str] = {}
        self.state = CrawlState.SEEDED
        self._timed_out = 0
        self._failed = 0

        try:
            self.state = CrawlState.EXPANDING
            while (frontier or pending) and len(visited) < settings.max_pages:
                now = time.monotonic()
                if now >= deadline:
                    self.logger.info("Общий таймаут исчерпан, обход остановлен")
                    break

                while frontier and len(pending) < self.limiter.limit and len(visited) < settings.max_pages:
                    if time.monotonic() >= soft_deadline:
                        self.logger.info("Использовано %.0f%% бюджета, новые страницы не ставятся в очередь",
                                         settings.soft_cutoff_ratio * 100)
                        break
                    entry = frontier.pop()
                    if entry.url in visited:
                        continue
                    visited.add(entry.url)
                    order = len(result.attempted)
                    result.attempted.append(entry.url)
                    self.logger.debug("Обход (score %d): %s", entry.score, entry.url)
                    task = asyncio.create_task(self.limiter.run(self._process_page, entry.url, order, root))
                    pending[task] = entry.url

                if not pending:
                    break

                done, _ = await asyncio.wait(
                    set(pending),
                    timeout=max(0.0, deadline - time.monotonic()),
                    return_when=asyncio.FIRST_COMPLETED,
                )
                for task in done:
                    pending.pop(task)
                    page = task.result()
                    if page is None:
                        continue
                    result.pages.append(page)
                    if page.facts is not None and time.monotonic() < soft_deadline:
                        self._admit(page.facts.links, root, frontier, queued, visited)

            self.state = CrawlState.DRAINING
            if pending:
                remaining = deadline - time.monotonic()
                if remaining > 0:
                    done, _ = await asyncio.wait(set(pending), timeout=remaining)
                    for task in done:
                        pending.pop(task)
                        page = task.result()
                        if page is not None:
                            result.pages.append(page)
                if pending:
                    self.logger.info("Отброшено незавершённых загрузок: %d", len(pending))
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        self.state = CrawlState.DONE
        result.state = self.state
        result.frontier_left = frontier.drain()
        result.elapsed = time.monotonic() - start
        result.timed_out = self._timed_out
        result.failed = self._failed
        self.logger.info(
            "Завершено: %d из %d страниц за %.2f с", len(result.pages), len(result.attempted), result.elapsed
        )
        return result

    async def _process_page(self, url: str, order: int, root: str) -> Optional[PageData]:
        """Загружает и разбирает одну страницу; ошибки страницы гасятся и логируются."""
        try:
            fetched = await self.fetcher.fetch(url, self.settings.page_timeout)
        except FetchTimeout as exc:
            self._timed_out += 1
            self.logger.warning("Таймаут %s: %s", url, exc)
            return None
        except FetchFailed as exc:
            self._failed += 1
            self.logger.warning("Не удалось загрузить %s: %s", url, exc.reason)
            return None
        except Exception as exc:
            self._failed += 1
            self.logger.warning("Неожиданная ошибка загрузки %s: %r", url, exc)
            return None

        try:
            facts = await asyncio.to_thread(
                analyze_html,
                fetched.html,
                url,
                root,
                order=order,
                base_url=fetched.final_url or None,
                parser=self.config.html_parser,
                sample_limit=self.config.sample_links_limit,
            )
        except ParseFailure as exc:
            self.logger.warning("Не удалось разобрать %s: %s", url, exc)
            facts = None
        return PageData(url=url, content=fetched.html, final_url=fetched.final_url, order=order, facts=facts)

    def _admit(
        self,
        links: Iterable[str],
        root: str,
        frontier: Frontier,
        queued: Set[str],
        visited: Set[str],
    ) -> None:
        policy = self.config.scoring
        for link in links:
            if len(visited) >= self.settings.max_pages:
                return
            if not should_crawl(link, root, self.settings):
                continue
            score = score_url(link, root, policy)
            if not accepts(score, policy):
                continue
            key = normalize_url(link)
            if key in visited or key in queued:
                continue
            queued.add(key)
            frontier.push(key, score)
