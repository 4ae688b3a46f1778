# File: tests/conftest.py
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import unused_port

from access_scout.config import CrawlSettings, ScannerConfig
from access_scout.crawler.models import CrawlResult, PageData
from access_scout.engine import AnalysisResult, Engine
from access_scout.logger import LOGGER_NAME

ServeFn = Callable[[web.Application], Awaitable[str]]

SAMPLE_HTML = """
<html>
  <head>
    <title>Example Agency</title>
    <meta name="description" content="Public services">
  </head>
  <body>
    <img src="/logo.png" alt="Logo">
    <img src="/banner.png">
    <form>
      <label for="email">Email</label><input id="email" type="email">
      <input type="text" placeholder="Search">
      <input type="submit" value="Go">
    </form>
    <a href="/contact">Contact</a>
    <a href="https://other.example.org/">Partner</a>
  </body>
</html>
"""

def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )

@pytest_asyncio.fixture
async def serve() -> AsyncIterator[ServeFn]:
    """Start aiohttp apps on free local ports, yield a starter, clean up after the test."""
    runners: list[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_port()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield _start

    for runner in runners:
        await runner.cleanup()

@pytest.fixture()
def fast_config() -> ScannerConfig:
    """Config with short budgets for local test servers."""
    return ScannerConfig(
        crawl=CrawlSettings(
            max_pages=20,
            total_timeout=5.0,
            page_timeout=2.0,
            concurrency=3,
            fallback_timeout=2.0,
            fallback_delay=0,
            user_agent="TestAgent/1.0",
        )
    )

@pytest.fixture()
def sample_result() -> AnalysisResult:
    """AnalysisResult built from one in-memory page, no network involved."""
    url = "https://example.gov/"
    crawl = CrawlResult(
        root=url,
        pages=[PageData(url=url, content=SAMPLE_HTML, final_url=url, order=0)],
        attempted=[url],
    )
    return Engine().build_result(url, crawl)

@pytest.fixture()
def reset_logger():
    """Restore the project logger after tests that reconfigure it."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.addHandler(logging.NullHandler())
    lg.setLevel(logging.NOTSET)
    lg.propagate = True
