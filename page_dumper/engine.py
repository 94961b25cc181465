# File: page_dumper/engine.py
"""page_dumper.engine: single-operation entry point ``capture(url, options)``."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union

from page_dumper.browser import BrowserSession
from page_dumper.config import DumperConfig, DumpOptions
from page_dumper.errors import DumpError, PageLoadError
from page_dumper.logger import logger
from page_dumper.models import DumpResult

__all__ = ["capture", "capture_async"]

OptionsT = Union[DumpOptions, Mapping[str, Any], None]


def _coerce_options(options: OptionsT, config: DumperConfig) -> DumpOptions:
    if options is None:
        return config.options
    if isinstance(options, DumpOptions):
        return options
    return DumpOptions(**dict(options))


async def capture_async(
    url: str,
    options: OptionsT = None,
    *,
    config: Optional[DumperConfig] = None,
) -> DumpResult:
    """Open a browser session, dump *url* and close the session again."""
    cfg = config or DumperConfig()
    opts = _coerce_options(options, cfg)
    async with BrowserSession(cfg) as session:
        return await session.dump(url, opts)


def capture(
    url: str,
    options: OptionsT = None,
    *,
    config: Optional[DumperConfig] = None,
) -> DumpResult:
    """Синхронный фасад для CLI и скриптов: один URL, один снимок страницы."""
    logger.info("Starting dump of %s", url)
    try:
        result = asyncio.run(capture_async(url, options, config=config))
    except PageLoadError as exc:
        logger.error("Page load failed: %s", exc)
        raise
    except DumpError as exc:
        logger.error("Dump failed: %s", exc)
        raise
    logger.info("Dump finished: %d resources", len(result))
    return result
