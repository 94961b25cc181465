# page_dumper/capture/blocklist.py
"""
Ad/tracker hostname blocklist.

Loaded once per browser session from a local cache file or, failing that, a
hosts-format list (``0.0.0.0 host``); any failure degrades to an empty set.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import FrozenSet, List, Optional, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from page_dumper.logger import logger

_HOSTS_PREFIX = "0.0.0.0 "


def parse_hosts(text: str) -> List[str]:
    """Return the hostnames of ``0.0.0.0 <host>`` lines, in file order."""
    hosts: List[str] = []
    for line in text.splitlines():
        if not line.startswith(_HOSTS_PREFIX):
            continue
        host = line[len(_HOSTS_PREFIX):].split("#", 1)[0].strip()
        if host and host != "0.0.0.0":
            hosts.append(host)
    return hosts


def _read_cache(path: Path) -> FrozenSet[str]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return frozenset(line.strip() for line in lines if line.strip())


async def _download(session: ClientSession, url: str) -> Optional[List[str]]:
    async with session.get(url, headers={"Accept": "text/plain"}) as resp:
        if resp.status != 200 or resp.content_type != "text/plain":
            logger.warning("Blocklist %s -> HTTP %s (%s)", url, resp.status, resp.content_type)
            return None
        return parse_hosts(await resp.text())


async def load_blocklist(
    *,
    url: Optional[str],
    cache_file: Union[str, Path, None] = None,
    session: Optional[ClientSession] = None,
    timeout: float = 30.0,
) -> FrozenSet[str]:
    """Load the blocklist, preferring *cache_file*; never raises."""
    cache = Path(cache_file) if cache_file is not None else None
    if cache is not None and cache.is_file():
        try:
            hosts = _read_cache(cache)
            logger.debug("Blocklist: %d hosts from %s", len(hosts), cache)
            return hosts
        except (OSError, UnicodeError) as exc:
            logger.warning("Error reading blocklist cache %s: %s", cache, exc)

    if not url:
        return frozenset()

    own_session = session is None
    http = session or ClientSession(timeout=ClientTimeout(total=timeout))
    try:
        hosts_list = await asyncio.wait_for(_download(http, url), timeout=timeout)
    except (ClientError, asyncio.TimeoutError) as exc:
        logger.warning("Error loading blocklist %s: %s", url, exc)
        return frozenset()
    finally:
        if own_session:
            await http.close()

    if hosts_list is None:
        return frozenset()

    if cache is not None:
        try:
            cache.parent.mkdir(parents=True, exist_ok=True)
            cache.write_text("\n".join(hosts_list), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not cache blocklist to %s: %s", cache, exc)

    logger.info("Blocklist: %d hosts loaded", len(hosts_list))
    return frozenset(hosts_list)


__all__ = ["parse_hosts", "load_blocklist"]
