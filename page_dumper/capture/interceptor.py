# page_dumper/capture/interceptor.py
"""
Request interception for the page being dumped.

Every request the page issues goes through :meth:`Interceptor.handle`:

1. scheme filter – http/https go on, data/blob pass through, anything else is
   aborted (``accessdenied``);
2. blocklist filter – ad/tracker hosts are aborted (``blockedbyclient``);
3. method filter – non-GET requests pass through and are never captured.

Eligible requests are fetched out-of-band and the page is always answered with
the fetched bytes; capturing them is a side effect that may silently fail.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Route

from page_dumper.capture.fetcher import FetchedResponse
from page_dumper.capture.store import CaptureStore
from page_dumper.errors import CaptureFetchError, InterceptionTimeoutError, ProtocolError
from page_dumper.logger import logger
from page_dumper.models import SessionContext
from page_dumper.paths import HTTP_SCHEMES, origin_of, scheme_of

_PASS_THROUGH_SCHEMES = frozenset({"data", "blob"})


class Fetcher(Protocol):
    async def fetch(self, url: str, method: str = ..., headers=...) -> FetchedResponse: ...


@dataclass(slots=True)
class InterceptionStats:
    captured: int = 0
    served: int = 0
    passed: int = 0
    blocked: int = 0
    denied: int = 0
    failed: int = 0
    timed_out: int = 0
    late: int = 0


class Interceptor:
    """Route handler bound to one page and one capture store."""

    def __init__(
        self,
        context: SessionContext,
        store: CaptureStore,
        fetcher: Fetcher,
        *,
        request_timeout: float = 10.0,
    ) -> None:
        self.context = context
        self.store = store
        self.fetcher = fetcher
        self.request_timeout = request_timeout
        self.stats = InterceptionStats()

    async def handle(self, route: Route) -> None:
        request = route.request
        url = request.url
        try:
            scheme = scheme_of(url)
            if scheme in _PASS_THROUGH_SCHEMES:
                self.stats.passed += 1
                await route.continue_()
                return
            if scheme not in HTTP_SCHEMES:
                self.stats.denied += 1
                logger.debug("Denied: %s", ProtocolError(url, scheme))
                await route.abort("accessdenied")
                return

            hostname = urlsplit(url).hostname or ""
            if self.context.is_blocked(hostname):
                self.stats.blocked += 1
                logger.debug("Blocked %s (host %s)", url, hostname)
                await route.abort("blockedbyclient")
                return

            if request.method != "GET":
                self.stats.passed += 1
                await route.continue_()
                return

            await self._serve(route, url, request.headers)
        except PlaywrightError as exc:
            # page or context went away while the request was in flight
            logger.debug("Route for %s no longer handled: %s", url, exc)

    async def _serve(self, route: Route, url: str, headers) -> None:
        try:
            response = await asyncio.wait_for(
                self.fetcher.fetch(url, "GET", headers), timeout=self.request_timeout
            )
        except asyncio.TimeoutError:
            self.stats.timed_out += 1
            logger.warning("%s", InterceptionTimeoutError(url, self.request_timeout))
            await route.abort("timedout")
            return
        except CaptureFetchError as exc:
            # let the browser try on its own, the resource just won't be captured
            self.stats.failed += 1
            logger.debug("%s", exc)
            await route.continue_()
            return

        self.capture(url, response)
        self.stats.served += 1
        await route.fulfill(
            status=response.status,
            headers=response.headers,
            body=response.body,
            content_type=response.content_type,
        )

    def capture(self, url: str, response: FetchedResponse) -> bool:
        """Store *response* if it succeeded, arrived before the store was sealed and
        the origin policy allows it."""
        if not response.ok:
            return False
        if self.store.sealed:
            self.stats.late += 1
            logger.debug("Served %s after the settle window, not captured", url)
            return False
        if not self.context.allows_origin(origin_of(url)):
            return False
        if self.store.store(url, response.body, response.content_type) is None:
            return False
        self.stats.captured += 1
        return True

    def log_summary(self) -> None:
        s = self.stats
        logger.info(
            "Interception: %d served, %d captured, %d passed through, %d blocked, %d denied, "
            "%d failed, %d timed out, %d late",
            s.served,
            s.captured,
            s.passed,
            s.blocked,
            s.denied,
            s.failed,
            s.timed_out,
            s.late,
        )


__all__ = ["Interceptor", "InterceptionStats"]
