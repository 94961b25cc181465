# File: tests/test_navigator.py
"""Page load driver: navigation errors, settle window and result assembly."""
from __future__ import annotations

import pytest
from playwright.async_api import Error as PlaywrightError

from page_dumper.errors import NavigationError, ProtocolError, StylesheetFetchError
from page_dumper.models import SessionContext
from page_dumper.navigator import decode_html, dump_page

from fakes import TARGET_URL, FakePage, FakePageResponse, StaticFetcher

PAGE = b"""<html><head><title>Game</title><link rel="stylesheet" href="style.css"></head>
<body><img src="img.png"><img src="https://cdn.other.com/a.png"></body></html>"""


def site_fetcher() -> StaticFetcher:
    fetcher = StaticFetcher()
    fetcher.add(TARGET_URL, PAGE, "text/html")
    fetcher.add("https://example.com/game/img.png", b"PNG", "image/png")
    fetcher.add("https://example.com/game/style.css", "body { background: url(img.png) }", "text/css")
    fetcher.add("https://cdn.other.com/a.png", b"CDN", "image/png")
    return fetcher


SUBREQUESTS = [
    "https://example.com/game/style.css",
    "https://example.com/game/img.png",
    "https://cdn.other.com/a.png",
]


@pytest.mark.asyncio()
async def test_dump_page_success(context):
    page = FakePage(FakePageResponse(200, PAGE), SUBREQUESTS, location=TARGET_URL)
    result = await dump_page(page, context, site_fetcher())

    assert page.closed
    assert page.waited == context.settle_time
    assert result["img.png"].payload == b"PNG"
    assert result["ext/cdn.other.com/a.png"].payload == b"CDN"
    # the raw document holds index.html, so the entry document moves aside
    assert result.entry_path == "index-1.html"
    assert sorted(result.identities.values()) == sorted(p for p in result if p != result.entry_path)

    html = result.entry_document.payload.decode("utf-8")
    assert '<img src="img.png"/>' in html
    assert '<img src="ext/cdn.other.com/a.png"/>' in html
    assert 'body { background: url("img.png"); }' in html
    assert "<title>Game (Generated by Page Dumper)</title>" in html


@pytest.mark.asyncio()
async def test_dump_page_same_origin(same_origin_context):
    page = FakePage(FakePageResponse(200, PAGE), SUBREQUESTS, location=TARGET_URL)
    result = await dump_page(page, same_origin_context, site_fetcher())

    assert "https://cdn.other.com/a.png" not in result.identities
    html = result.entry_document.payload.decode("utf-8")
    assert "cdn.other.com" not in html
    assert html.count("<img") == 1


@pytest.mark.asyncio()
async def test_navigation_404(context):
    page = FakePage(FakePageResponse(404, b"not found"))
    with pytest.raises(NavigationError) as excinfo:
        await dump_page(page, context, site_fetcher())
    assert excinfo.value.status == 404
    assert page.closed


@pytest.mark.asyncio()
async def test_navigation_without_response(context):
    page = FakePage(None)
    with pytest.raises(NavigationError):
        await dump_page(page, context, site_fetcher())
    assert page.closed


@pytest.mark.asyncio()
async def test_navigation_failure(context):
    page = FakePage(None, goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED at https://example.com/"))
    with pytest.raises(NavigationError) as excinfo:
        await dump_page(page, context, site_fetcher())
    assert "ERR_NAME_NOT_RESOLVED" in str(excinfo.value)
    assert page.closed


@pytest.mark.asyncio()
async def test_unsupported_target_scheme():
    context = SessionContext.for_target("ftp://example.com/game/index.html")
    page = FakePage(FakePageResponse(200, PAGE))
    with pytest.raises(ProtocolError):
        await dump_page(page, context, site_fetcher())
    assert page.handler is None
    assert page.closed


@pytest.mark.asyncio()
async def test_stylesheet_failure_aborts_dump(context):
    fetcher = site_fetcher()
    del fetcher.responses["https://example.com/game/style.css"]
    page = FakePage(FakePageResponse(200, PAGE), SUBREQUESTS[1:], location=TARGET_URL)
    with pytest.raises(StylesheetFetchError):
        await dump_page(page, context, fetcher)
    assert page.closed


def test_decode_html_charset():
    body = "Привет".encode("cp1251")
    assert decode_html(body, {"content-type": "text/html; charset=windows-1251"}) == "Привет"
    assert decode_html("ok".encode(), {}) == "ok"
    assert decode_html(b"ok", {"content-type": "text/html; charset=bogus"}) == "ok"
