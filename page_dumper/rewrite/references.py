"""Resolution of document/stylesheet references against the capture maps."""

from __future__ import annotations

from typing import Mapping, Optional

from page_dumper.models import SessionContext
from page_dumper.paths import HTTP_SCHEMES, absolute_url, canonical_identity, origin_of, scheme_of


class ReferenceResolver:
    """Turns a reference found in HTML/CSS into a local snapshot path.

    ``data:`` references are kept verbatim, http(s) references are resolved
    against *base* and looked up by canonical identity. A reference made
    against the document base that already is a captured local path is kept
    as-is. Anything else resolves to None and the caller drops whatever
    carried it.
    """

    def __init__(self, context: SessionContext, identities: Mapping[str, str]) -> None:
        self.context = context
        self.identities = identities

    def resolve(self, reference: str, base: Optional[str] = None) -> Optional[str]:
        ref = reference.strip()
        if not ref:
            return None
        document_base = self.context.base_uri
        base = base or document_base
        url = absolute_url(ref, base)
        scheme = scheme_of(url)
        if scheme == "data":
            return url
        if scheme not in HTTP_SCHEMES:
            return None
        if self.context.allows_origin(origin_of(url)):
            local = self.identities.get(canonical_identity(url))
            if local is not None:
                return local
        # local paths are relative to the snapshot root, i.e. the document
        if base == document_base and ref in self.identities.values():
            return ref
        return None


__all__ = ["ReferenceResolver"]
