"""
Data models shared by the capture and rewrite stages.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import AbstractSet, Dict

from page_dumper.paths import PathPolicy, base_uri, origin_of


@dataclass(frozen=True, slots=True)
class CapturedResource:
    """Payload of one captured response, immutable once stored."""

    payload: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.payload)

    def text(self, encoding: str = "utf-8") -> str:
        return self.payload.decode(encoding, errors="replace")


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Everything one dump needs to know about its target.

    Built once per dump; the blocklist is the only member shared with other
    sessions and is never mutated.
    """

    target_url: str
    origin: str
    base_uri: str
    cross_origin: bool = True
    path_policy: PathPolicy = PathPolicy.PRESERVE
    blocklist: AbstractSet[str] = field(default_factory=frozenset)
    settle_time: int = 2500

    @classmethod
    def for_target(
        cls,
        url: str,
        *,
        cross_origin: bool = True,
        path_policy: PathPolicy = PathPolicy.PRESERVE,
        blocklist: AbstractSet[str] = frozenset(),
        settle_time: int = 2500,
    ) -> SessionContext:
        return cls(
            target_url=url,
            origin=origin_of(url),
            base_uri=base_uri(url),
            cross_origin=cross_origin,
            path_policy=path_policy,
            blocklist=blocklist,
            settle_time=settle_time,
        )

    def allows_origin(self, origin: str) -> bool:
        """Cross-origin policy: everything when allowed, else the target origin only."""
        return self.cross_origin or origin == self.origin

    def is_blocked(self, hostname: str) -> bool:
        return hostname in self.blocklist


class DumpResult(Mapping):
    """Read-only ``path -> CapturedResource`` mapping returned by a dump.

    Always holds exactly one entry-document path (:attr:`entry_path`) with the
    rewritten HTML; :attr:`identities` is the frozen identity → path map.
    """

    __slots__ = ("_resources", "entry_path", "identities")

    def __init__(
        self,
        resources: Dict[str, CapturedResource],
        entry_path: str,
        identities: Dict[str, str],
    ) -> None:
        if entry_path not in resources:
            raise ValueError(f"entry document {entry_path!r} missing from resources")
        self._resources = MappingProxyType(dict(resources))
        self.entry_path = entry_path
        self.identities = MappingProxyType(dict(identities))

    def __getitem__(self, path: str) -> CapturedResource:
        return self._resources[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    @property
    def entry_document(self) -> CapturedResource:
        return self._resources[self.entry_path]

    def __repr__(self) -> str:
        return f"DumpResult(entry_path={self.entry_path!r}, resources={len(self)})"


__all__ = ["CapturedResource", "SessionContext", "DumpResult"]
