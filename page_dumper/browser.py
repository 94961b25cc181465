# === FILE: page_dumper/browser.py ===
"""
Caller-owned browser session.

One :class:`BrowserSession` owns a Chromium instance, an aiohttp session for
out-of-band fetches and the blocklist. Each :meth:`BrowserSession.dump` runs in
its own browser context, so several dumps may share a session concurrently::

    async with BrowserSession(config) as session:
        result = await session.dump("https://example.com/game/index.html")
"""
from __future__ import annotations

from typing import AbstractSet, Any, Dict, List, Optional

from aiohttp import ClientSession, ClientTimeout
from playwright.async_api import Browser, Playwright, async_playwright

from page_dumper.capture.blocklist import load_blocklist
from page_dumper.capture.fetcher import OutOfBandFetcher
from page_dumper.config import DumperConfig, DumpOptions
from page_dumper.errors import ProtocolError
from page_dumper.logger import logger
from page_dumper.models import DumpResult, SessionContext
from page_dumper.navigator import dump_page
from page_dumper.paths import HTTP_SCHEMES, scheme_of

_CHROMIUM_ARGS: List[str] = [
    "--no-first-run",
    "--disable-sync",
    "--disable-infobars",
    "--disable-translate",
    "--disable-extensions",
    "--disable-default-apps",
    "--disable-notifications",
    "--disable-dev-shm-usage",
    "--disable-background-networking",
]


class BrowserSession:
    """Explicit open/close lifecycle around one browser."""

    def __init__(
        self,
        config: Optional[DumperConfig] = None,
        *,
        blocklist: Optional[AbstractSet[str]] = None,
    ) -> None:
        self.config = config or DumperConfig()
        self.blocklist: Optional[AbstractSet[str]] = (
            frozenset(blocklist) if blocklist is not None else None
        )
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._http: Optional[ClientSession] = None

    async def __aenter__(self) -> BrowserSession:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def open(self) -> None:
        if self.is_open:
            return
        cfg = self.config
        self._http = ClientSession(
            timeout=ClientTimeout(total=cfg.request_timeout),
            headers={"User-Agent": cfg.user_agent},
            raise_for_status=False,
        )
        try:
            if self.blocklist is None:
                self.blocklist = await load_blocklist(
                    url=cfg.blocklist_url, cache_file=cfg.blocklist_file, session=self._http
                )
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(**self._launch_options())
        except BaseException:
            await self.close()
            raise
        logger.info("Browser session opened (%d blocked hosts)", len(self.blocklist))

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        if self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None

    async def dump(self, url: str, options: Optional[DumpOptions] = None) -> DumpResult:
        """Capture *url* in a fresh browser context and return its snapshot."""
        if self._browser is None or self._http is None:
            raise RuntimeError("Session not opened")
        url = str(url)
        scheme = scheme_of(url)
        if scheme not in HTTP_SCHEMES:
            raise ProtocolError(url, scheme)

        opts = options or self.config.options
        context = SessionContext.for_target(
            url,
            cross_origin=opts.cross_origin,
            path_policy=opts.path_policy,
            blocklist=self.blocklist or frozenset(),
            settle_time=opts.settle_time,
        )
        browser_context = await self._browser.new_context(**self.context_options())
        try:
            page = await browser_context.new_page()
            page.set_default_timeout(self.config.navigation_timeout)
            page.set_default_navigation_timeout(self.config.navigation_timeout)
            return await dump_page(
                page,
                context,
                OutOfBandFetcher(self._http, referrer=context.origin),
                navigation_timeout=self.config.navigation_timeout,
                request_timeout=self.config.request_timeout,
            )
        finally:
            await browser_context.close()

    def context_options(self) -> Dict[str, Any]:
        """Fixed, fingerprint-neutral profile of every dump context.

        Routing requests disables the HTTP cache of the context, so no cache
        switch is needed here.
        """
        cfg = self.config
        return {
            "user_agent": cfg.user_agent,
            "viewport": {"width": cfg.viewport_width, "height": cfg.viewport_height},
            "device_scale_factor": 1,
            "is_mobile": False,
            "has_touch": False,
            "geolocation": {"latitude": 0, "longitude": 0, "accuracy": 0},
            "permissions": ["geolocation"],
            "bypass_csp": True,
            "service_workers": "block",
            "java_script_enabled": True,
        }

    def _launch_options(self) -> Dict[str, Any]:
        cfg = self.config
        options: Dict[str, Any] = {
            "headless": cfg.headless,
            "args": _CHROMIUM_ARGS
            + [f"--window-size={cfg.viewport_width},{cfg.viewport_height}", "--window-position=0,0"],
        }
        if cfg.browser_channel:
            options["channel"] = cfg.browser_channel
        if cfg.executable_path:
            options["executable_path"] = str(cfg.executable_path)
        return options


__all__ = ["BrowserSession"]
