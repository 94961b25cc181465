"""page_dumper.capture: request interception and the capture maps."""

from .blocklist import load_blocklist, parse_hosts
from .fetcher import FetchedResponse, OutOfBandFetcher
from .interceptor import InterceptionStats, Interceptor
from .store import ENTRY_DOCUMENT, CaptureStore

__all__ = [
    "CaptureStore",
    "ENTRY_DOCUMENT",
    "FetchedResponse",
    "InterceptionStats",
    "Interceptor",
    "OutOfBandFetcher",
    "load_blocklist",
    "parse_hosts",
]
