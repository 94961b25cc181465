# page_dumper/capture/fetcher.py
"""
Out-of-band fetcher: replays an intercepted request through aiohttp so the
bytes can be both captured and handed back to the page.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from aiohttp import ClientError, ClientSession

from page_dumper.errors import CaptureFetchError

# aiohttp negotiates and decodes the transfer itself
_DROPPED_REQUEST_HEADERS = frozenset({"accept-encoding", "host", "content-length", "connection"})
# the body handed back to the page is already decoded
_DROPPED_RESPONSE_HEADERS = frozenset(
    {"content-encoding", "content-length", "transfer-encoding", "connection", "keep-alive"}
)


@dataclass(slots=True)
class FetchedResponse:
    """Decoded response of an out-of-band fetch."""

    url: str
    status: int
    body: bytes
    content_type: str
    charset: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class OutOfBandFetcher:
    """Fetches resources outside the browser with a shared aiohttp session."""

    def __init__(self, session: ClientSession, referrer: Optional[str] = None) -> None:
        self.session = session
        self.referrer = referrer

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchedResponse:
        """
        Fetch *url* and return the full, decoded response whatever its status.

        Raises CaptureFetchError on connection/protocol failures. Timeouts are
        re-raised as :class:`asyncio.TimeoutError` so callers can tell a hung
        request apart from a broken one.
        """
        request_headers = {
            k: v for k, v in (headers or {}).items() if k.lower() not in _DROPPED_REQUEST_HEADERS
        }
        if self.referrer and not any(k.lower() == "referer" for k in request_headers):
            request_headers["Referer"] = self.referrer

        try:
            async with self.session.request(
                method, url, headers=request_headers, allow_redirects=True
            ) as resp:
                body = await resp.read()
                response_headers = {
                    k.lower(): v
                    for k, v in resp.headers.items()
                    if k.lower() not in _DROPPED_RESPONSE_HEADERS
                }
                return FetchedResponse(
                    url=url,
                    status=resp.status,
                    body=body,
                    content_type=resp.content_type,
                    charset=resp.charset,
                    headers=response_headers,
                )
        except asyncio.TimeoutError:
            raise
        except (ClientError, ValueError) as exc:
            raise CaptureFetchError(url, str(exc) or type(exc).__name__) from exc


__all__ = ["FetchedResponse", "OutOfBandFetcher"]
