# page_dumper/__init__.py
"""
PageDumper package initializer.
Defines package version and exposes the single-operation API.
"""
__version__ = "0.1.0"

from page_dumper.browser import BrowserSession
from page_dumper.config import DumperConfig, DumpOptions, load_config
from page_dumper.engine import capture, capture_async
from page_dumper.models import CapturedResource, DumpResult
from page_dumper.paths import PathPolicy

__all__ = [
    "__version__",
    "BrowserSession",
    "CapturedResource",
    "DumpOptions",
    "DumpResult",
    "DumperConfig",
    "PathPolicy",
    "capture",
    "capture_async",
    "load_config",
]
