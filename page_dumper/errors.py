"""Error hierarchy of page_dumper.

Two families matter to callers:

* :class:`PageLoadError` – the target page itself could not be loaded
  (bad scheme, failed navigation).
* everything else – an internal capture/rewrite failure.

:class:`CaptureFetchError` and :class:`InterceptionTimeoutError` never leave
the interception handler; they are listed here so the handler and its tests
share one vocabulary.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    "DumpError",
    "PageLoadError",
    "ProtocolError",
    "NavigationError",
    "CaptureError",
    "CaptureFetchError",
    "InterceptionTimeoutError",
    "StylesheetFetchError",
)


class DumpError(Exception):
    """Base class for every error raised by page_dumper."""


class PageLoadError(DumpError):
    """The target page could not be loaded."""


class ProtocolError(PageLoadError):
    """Unsupported URL scheme (only http/https can be captured)."""

    def __init__(self, url: str, scheme: str) -> None:
        super().__init__(f"Unsupported URL protocol {scheme!r}: {url}")
        self.url = url
        self.scheme = scheme


class NavigationError(PageLoadError):
    """Navigation produced no response or a non-success status."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        if status is None:
            message = f"Failed to load requested page {url}"
        else:
            message = f"Response returned error status code {status}: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.url = url
        self.status = status


class CaptureError(DumpError):
    """Internal failure while capturing or rewriting resources."""


class CaptureFetchError(CaptureError):
    """Out-of-band fetch of a single resource failed (non-fatal)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class InterceptionTimeoutError(CaptureError):
    """An intercepted request was not resolved within its timeout."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Request {url} not resolved within {timeout:.1f}s")
        self.url = url
        self.timeout = timeout


class StylesheetFetchError(CaptureError):
    """A stylesheet (linked or imported) could not be fetched; fatal."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch stylesheet {url}: {reason}")
        self.url = url
        self.reason = reason
