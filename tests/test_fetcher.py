# File: tests/test_fetcher.py
"""Тесты одиночной загрузки страницы (`crawler/fetcher.py`)."""
import asyncio

import pytest
from aiohttp import ClientSession, web
from aiohttp.test_utils import unused_port

from access_scout.config import CrawlSettings
from access_scout.crawler.fetcher import Fetcher
from access_scout.errors import FetchFailed, FetchTimeout

SETTINGS = CrawlSettings(user_agent="TestAgent/1.0", page_timeout=2.0)


def make_app(**routes) -> web.Application:
    app = web.Application()
    for name, handler in routes.items():
        app.router.add_get("/" if name == "root" else f"/{name}", handler)
    return app


@pytest.mark.asyncio()
async def test_fetch_html_with_browser_headers(serve):
    seen = {}

    async def root(request):
        seen["ua"] = request.headers.get("User-Agent")
        seen["accept"] = request.headers.get("Accept", "")
        return web.Response(text="<p>hi</p>", content_type="text/html")

    base = await serve(make_app(root=root))
    async with Fetcher(SETTINGS) as http:
        result = await http.fetch(f"{base}/")

    assert result.html == "<p>hi</p>"
    assert result.status == 200
    assert result.truncated is False
    assert seen["ua"] == "TestAgent/1.0"
    assert "text/html" in seen["accept"]


@pytest.mark.asyncio()
async def test_timeout_raises_fetch_timeout(serve):
    async def slow(_):
        await asyncio.sleep(1.0)
        return web.Response(text="late", content_type="text/html")

    base = await serve(make_app(slow=slow))
    async with Fetcher(SETTINGS) as http:
        with pytest.raises(FetchTimeout) as info:
            await http.fetch(f"{base}/slow", timeout=0.2)

    assert isinstance(info.value, TimeoutError)
    assert info.value.timeout == 0.2


@pytest.mark.asyncio()
async def test_non_html_rejected(serve):
    async def data(_):
        return web.json_response({"a": 1})

    base = await serve(make_app(data=data))
    async with Fetcher(SETTINGS) as http:
        with pytest.raises(FetchFailed) as info:
            await http.fetch(f"{base}/data")

    assert info.value.content_type.startswith("application/json")
    assert "did not return HTML" in info.value.reason


@pytest.mark.asyncio()
async def test_error_status_rejected(serve):
    base = await serve(web.Application())
    async with Fetcher(SETTINGS) as http:
        with pytest.raises(FetchFailed) as info:
            await http.fetch(f"{base}/missing")
    assert info.value.status == 404


@pytest.mark.asyncio()
async def test_body_truncated_at_ceiling(serve):
    async def big(_):
        return web.Response(text="a" * 5000, content_type="text/html")

    base = await serve(make_app(big=big))
    settings = CrawlSettings(user_agent="TestAgent/1.0", max_body_bytes=100)
    async with Fetcher(settings) as http:
        result = await http.fetch(f"{base}/big")

    assert result.truncated is True
    assert len(result.html) == 100


@pytest.mark.asyncio()
async def test_redirect_reports_final_url(serve):
    async def old(_):
        raise web.HTTPFound("/new")

    async def new(_):
        return web.Response(text="<p>new</p>", content_type="text/html")

    base = await serve(make_app(old=old, new=new))
    async with Fetcher(SETTINGS) as http:
        result = await http.fetch(f"{base}/old")

    assert result.final_url == f"{base}/new"
    assert result.html == "<p>new</p>"


@pytest.mark.asyncio()
async def test_declared_charset_used(serve):
    async def legacy(_):
        return web.Response(
            body="<p>Привет</p>".encode("windows-1251"),
            headers={"Content-Type": "text/html; charset=windows-1251"},
        )

    base = await serve(make_app(legacy=legacy))
    async with Fetcher(SETTINGS) as http:
        result = await http.fetch(f"{base}/legacy")
    assert result.html == "<p>Привет</p>"


@pytest.mark.asyncio()
async def test_undecodable_charset_falls_back_to_utf8(serve):
    async def odd(_):
        return web.Response(body="<p>Ёлка</p>".encode("utf-8"), headers={"Content-Type": "text/html; charset=idna"})

    base = await serve(make_app(odd=odd))
    async with Fetcher(SETTINGS) as http:
        result = await http.fetch(f"{base}/odd")
    assert result.html == "<p>Ёлка</p>"


@pytest.mark.asyncio()
async def test_connection_error_is_fetch_failed():
    async with Fetcher(SETTINGS) as http:
        with pytest.raises(FetchFailed):
            await http.fetch(f"http://127.0.0.1:{unused_port()}/")


@pytest.mark.asyncio()
async def test_external_session_left_open(serve):
    async def root(_):
        return web.Response(text="ok", content_type="text/html")

    base = await serve(make_app(root=root))
    async with ClientSession() as session:
        async with Fetcher(SETTINGS, session=session) as http:
            await http.fetch(f"{base}/")
        assert not session.closed


@pytest.mark.asyncio()
async def test_fetch_without_session():
    with pytest.raises(RuntimeError):
        await Fetcher(SETTINGS).fetch("http://127.0.0.1/")
