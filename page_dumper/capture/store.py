"""
Capture store: the identity → path and path → payload maps of one dump.

All mutation goes through :meth:`CaptureStore.store`, which never awaits, so
on the event loop every check-and-insert for an identity is atomic.
"""
from __future__ import annotations

import random
from typing import Dict, Optional

from page_dumper.logger import logger
from page_dumper.models import CapturedResource, DumpResult, SessionContext
from page_dumper.paths import PathPolicy, canonical_identity, resolve_output_path

ENTRY_DOCUMENT = "index.html"
ENTRY_CONTENT_TYPE = "text/html"


class CaptureStore:
    """ResourceMap + IdentityMap of a single session, append-only."""

    def __init__(
        self,
        context: SessionContext,
        *,
        rng: Optional[random.Random] = None,
        max_path_attempts: int = 8,
    ) -> None:
        self.context = context
        self.resources: Dict[str, CapturedResource] = {}
        self.identities: Dict[str, str] = {}
        self.entry_path: Optional[str] = None
        self._rng = rng or random.Random()
        self._max_path_attempts = max_path_attempts
        self._sealed = False

    def __contains__(self, identity: object) -> bool:
        return identity in self.identities

    def __len__(self) -> int:
        return len(self.resources)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def path_for(self, url: str) -> Optional[str]:
        return self.identities.get(canonical_identity(url))

    def store(self, url: str, payload: bytes, content_type: str) -> Optional[str]:
        """Capture *payload* for *url* unless its identity is already known.

        Returns the assigned output path, or None when nothing was stored
        (duplicate identity, path taken, or store sealed).
        """
        if self._sealed:
            return None
        identity = canonical_identity(url)
        if identity in self.identities:
            return None
        path = self._assign_path(identity)
        if path is None:
            return None
        self.resources[path] = CapturedResource(payload=payload, content_type=content_type)
        self.identities[identity] = path
        logger.debug("Captured %s -> %s (%d bytes)", identity, path, len(payload))
        return path

    def _assign_path(self, identity: str) -> Optional[str]:
        policy = self.context.path_policy
        for _ in range(self._max_path_attempts):
            path = resolve_output_path(identity, policy, self.context.base_uri, rng=self._rng)
            if path not in self.resources:
                return path
            if policy is PathPolicy.PRESERVE:
                logger.debug("Path %s already taken, %s not captured", path, identity)
                return None
        logger.warning("No free anonymized path for %s after %d attempts", identity, self._max_path_attempts)
        return None

    def seal(self) -> None:
        """Stop accepting captures; late responses are still served to the page."""
        self._sealed = True

    def add_entry_document(self, html: str) -> str:
        """Store the rewritten document under a path no captured resource uses."""
        if self.entry_path is not None:
            raise RuntimeError("entry document already stored")
        path = ENTRY_DOCUMENT
        counter = 0
        while path in self.resources:
            counter += 1
            path = f"index-{counter}.html"
        self.resources[path] = CapturedResource(
            payload=html.encode("utf-8"), content_type=ENTRY_CONTENT_TYPE
        )
        self.entry_path = path
        return path

    def freeze(self) -> DumpResult:
        if self.entry_path is None:
            raise RuntimeError("entry document not stored yet")
        self._sealed = True
        return DumpResult(self.resources, self.entry_path, self.identities)


__all__ = ["CaptureStore", "ENTRY_DOCUMENT"]
