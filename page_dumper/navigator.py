# File: page_dumper/navigator.py
"""page_dumper.navigator: drives one page load and turns it into a DumpResult."""

from __future__ import annotations

import re
import time
from typing import Mapping, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from page_dumper.capture.fetcher import OutOfBandFetcher
from page_dumper.capture.interceptor import Interceptor
from page_dumper.capture.store import CaptureStore
from page_dumper.errors import NavigationError, ProtocolError
from page_dumper.logger import logger
from page_dumper.models import DumpResult, SessionContext
from page_dumper.paths import HTTP_SCHEMES, scheme_of
from page_dumper.rewrite.document import DocumentRewriter
from page_dumper.rewrite.stylesheets import StylesheetSource

__all__ = ["dump_page", "decode_html"]

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)


def decode_html(body: bytes, headers: Mapping[str, str]) -> str:
    """Decode the raw document with its declared charset, UTF-8 otherwise."""
    match = _CHARSET_RE.search(headers.get("content-type", ""))
    encoding = match.group(1) if match else "utf-8"
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


async def dump_page(
    page: Page,
    context: SessionContext,
    fetcher: OutOfBandFetcher,
    *,
    navigation_timeout: int = 10000,
    request_timeout: float = 10.0,
    store: Optional[CaptureStore] = None,
) -> DumpResult:
    """Load ``context.target_url`` in *page* and return the captured snapshot.

    The page is closed on every exit path. Navigation and stylesheet failures
    propagate; nothing captured so far is returned in that case.
    """
    url = context.target_url
    try:
        scheme = scheme_of(url)
        if scheme not in HTTP_SCHEMES:
            raise ProtocolError(url, scheme)

        store = store or CaptureStore(context)
        interceptor = Interceptor(context, store, fetcher, request_timeout=request_timeout)
        await page.route("**/*", interceptor.handle)

        logger.info("Navigating to %s", url)
        start = time.monotonic()
        try:
            response = await page.goto(url, timeout=navigation_timeout, wait_until="domcontentloaded")
        except PlaywrightError as exc:
            raise NavigationError(url, reason=str(exc).splitlines()[0]) from exc
        if response is None:
            raise NavigationError(url)
        if not response.ok:
            raise NavigationError(url, response.status)

        # async script-driven loads still land in the maps during this window
        await page.wait_for_timeout(context.settle_time)
        store.seal()
        interceptor.log_summary()

        html = decode_html(await response.body(), response.headers)
        location = await page.evaluate("() => window.location.href")

        stylesheets = StylesheetSource(
            store.resources, store.identities, fetcher, timeout=request_timeout
        )
        rewriter = DocumentRewriter(context, store.identities, stylesheets)
        document = await rewriter.rewrite(html, source_url=str(location or url))
        entry = store.add_entry_document(document)

        logger.info(
            "Dumped %s: %d resources, entry %s (%.2f s)",
            url,
            len(store.resources),
            entry,
            time.monotonic() - start,
        )
        return store.freeze()
    finally:
        try:
            await page.close()
        except PlaywrightError as exc:
            logger.warning("Error closing page for %s: %s", url, exc)
