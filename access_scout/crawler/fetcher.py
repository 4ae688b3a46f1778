# access_scout/crawler/fetcher.py
"""
Fetcher module: a single bounded HTTP GET with a hard timeout and a size ceiling.

No retries happen here; the crawler treats every page as best effort.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from access_scout.config import CrawlSettings
from access_scout.crawler.models import FetchResult
from access_scout.errors import FetchFailed, FetchTimeout

__all__ = ["Fetcher", "browser_headers", "HTML_CONTENT_TYPES"]

HTML_CONTENT_TYPES: Tuple[str, ...] = ("text/html", "application/xhtml+xml")
_CHUNK_SIZE = 64 * 1024


def browser_headers(user_agent: str) -> Dict[str, str]:
    """Headers of an ordinary desktop browser, enough to pass trivial bot filters."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Referer": "https://www.google.com/",
    }


class Fetcher:
    """Handles HTTP fetching with per-request timeout and body size limit."""

    def __init__(
        self,
        settings: Optional[CrawlSettings] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.settings = settings or CrawlSettings()
        self.session = session
        self._owns_session = session is None
        self.logger = logging.getLogger("AccessScout")

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Fetch *url* and return its markup.

        Raises FetchTimeout when the whole exchange (headers and body) does not
        finish within *timeout* seconds, FetchFailed on non-2xx statuses,
        non-HTML content types and transport errors.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")
        limit = timeout if timeout is not None else self.settings.page_timeout
        try:
            return await asyncio.wait_for(self._get(self.session, url, limit), timeout=limit)
        except asyncio.TimeoutError as exc:
            raise FetchTimeout(url, limit) from exc
        except ClientError as exc:
            raise FetchFailed(url, f"{type(exc).__name__}: {exc}") from exc

    async def _get(self, session: ClientSession, url: str, limit: float) -> FetchResult:
        async with session.get(
            url,
            headers=browser_headers(self.settings.user_agent),
            allow_redirects=True,
            timeout=ClientTimeout(total=limit),
        ) as resp:
            if not 200 <= resp.status < 300:
                raise FetchFailed(url, f"Fetch failed ({resp.status})", status=resp.status)
            ctype = resp.headers.get("Content-Type", "")
            mime = ctype.split(";", 1)[0].strip().lower()
            if mime not in HTML_CONTENT_TYPES:
                raise FetchFailed(
                    url,
                    f"URL did not return HTML (content-type: {ctype or 'unknown'})",
                    status=resp.status,
                    content_type=ctype,
                )
            body, truncated = await self._read_limited(resp)
            if truncated:
                self.logger.debug("Body of %s truncated to %d bytes", url, len(body))
            try:
                text = body.decode(resp.charset or "utf-8", errors="replace")
            except (LookupError, UnicodeError):
                text = body.decode("utf-8", errors="replace")
            return FetchResult(html=text, final_url=str(resp.url), status=resp.status, truncated=truncated)

    async def _read_limited(self, resp: ClientResponse) -> Tuple[bytes, bool]:
        ceiling = self.settings.max_body_bytes
        buf = bytearray()
        async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
            buf.extend(chunk)
            if len(buf) >= ceiling:
                return bytes(buf[:ceiling]), len(buf) > ceiling or not resp.content.at_eof()
        return bytes(buf), False
