# page_dumper/rewrite/stylesheets.py
"""
Stylesheet source for the rewriters.

Linked and imported stylesheets are taken from the capture maps when the page
already loaded them, otherwise fetched out-of-band. Any failure is fatal to
the dump and surfaces as :class:`StylesheetFetchError`.
"""
from __future__ import annotations

import asyncio
import base64
from typing import Mapping, Optional
from urllib.parse import unquote_to_bytes

from page_dumper.capture.fetcher import OutOfBandFetcher
from page_dumper.errors import CaptureFetchError, StylesheetFetchError
from page_dumper.logger import logger
from page_dumper.models import CapturedResource
from page_dumper.paths import HTTP_SCHEMES, canonical_identity, scheme_of

CSS_MIME = "text/css"


def _mime(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def decode_data_url(url: str) -> tuple[str, bytes]:
    """Split a ``data:`` URL into (mime type, payload)."""
    header, sep, data = url[len("data:"):].partition(",")
    if not sep:
        raise ValueError("malformed data URL")
    params = header.split(";")
    mime = params[0].strip().lower() or "text/plain"
    raw = unquote_to_bytes(data)
    if "base64" in (p.strip().lower() for p in params[1:]):
        raw = base64.b64decode(raw)
    return mime, raw


class StylesheetSource:
    """Returns stylesheet text for a URL or raises StylesheetFetchError."""

    def __init__(
        self,
        resources: Mapping[str, CapturedResource],
        identities: Mapping[str, str],
        fetcher: Optional[OutOfBandFetcher] = None,
        *,
        timeout: float = 10.0,
    ) -> None:
        self.resources = resources
        self.identities = identities
        self.fetcher = fetcher
        self.timeout = timeout

    async def fetch(self, url: str) -> str:
        scheme = scheme_of(url)
        if scheme == "data":
            return self._from_data_url(url)
        if scheme not in HTTP_SCHEMES:
            raise StylesheetFetchError(url, f"unsupported scheme {scheme!r}")

        captured = self._captured(url)
        if captured is not None:
            if _mime(captured.content_type) != CSS_MIME:
                raise StylesheetFetchError(url, f"unexpected content type {captured.content_type!r}")
            logger.debug("Stylesheet %s taken from capture", url)
            return captured.text()

        if self.fetcher is None:
            raise StylesheetFetchError(url, "not captured")
        try:
            response = await asyncio.wait_for(
                self.fetcher.fetch(url, "GET", {"Accept": CSS_MIME}), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise StylesheetFetchError(url, f"timed out after {self.timeout:.1f}s") from None
        except CaptureFetchError as exc:
            raise StylesheetFetchError(url, exc.reason) from exc

        if not response.ok:
            raise StylesheetFetchError(url, f"HTTP {response.status}")
        if _mime(response.content_type) != CSS_MIME:
            raise StylesheetFetchError(url, f"unexpected content type {response.content_type!r}")
        return response.text()

    def _captured(self, url: str) -> Optional[CapturedResource]:
        path = self.identities.get(canonical_identity(url))
        return None if path is None else self.resources.get(path)

    @staticmethod
    def _from_data_url(url: str) -> str:
        try:
            mime, raw = decode_data_url(url)
        except ValueError as exc:
            raise StylesheetFetchError(url[:64], str(exc)) from exc
        if mime != CSS_MIME:
            raise StylesheetFetchError(url[:64], f"unexpected content type {mime!r}")
        return raw.decode("utf-8", errors="replace")


__all__ = ["StylesheetSource", "decode_data_url", "CSS_MIME"]
