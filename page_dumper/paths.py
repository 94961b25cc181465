"""page_dumper.paths: canonical identities, base URI and output path naming.

Everything here is pure: the same identity, policy and base always produce the
same output path (the anonymize policy draws from the random source it is
given).
"""

from __future__ import annotations

import posixpath
import random
from enum import Enum
from typing import Optional, Sequence
from urllib.parse import urljoin, urlsplit

__all__: Sequence[str] = (
    "PathPolicy",
    "HTTP_SCHEMES",
    "LOCAL_NAMESPACE",
    "CROSS_ORIGIN_NAMESPACE",
    "scheme_of",
    "origin_of",
    "canonical_identity",
    "base_uri",
    "absolute_url",
    "resolve_output_path",
    "anonymous_path",
)

HTTP_SCHEMES = frozenset({"http", "https"})

#: namespace of anonymized resources: ``r/<id><ext>``
LOCAL_NAMESPACE = "r/"
#: namespace of resources outside the base URI: ``ext/<host><path>``
CROSS_ORIGIN_NAMESPACE = "ext/"

_ANON_ID_SPACE = 10**15
_DEFAULT_PORTS = {"http": 80, "https": 443}
_DIRECTORY_INDEX = "index.html"


class PathPolicy(str, Enum):
    """How captured resources are named in the output tree."""

    PRESERVE = "preserve"
    ANONYMIZE = "anonymize"


def scheme_of(url: str) -> str:
    return urlsplit(url).scheme.lower()


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` with default ports omitted."""
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def canonical_identity(url: str) -> str:
    """Origin + path of *url*; query and fragment are dropped."""
    return origin_of(url) + (urlsplit(url).path or "/")


def base_uri(url: str) -> str:
    """Directory prefix of *url*, always ending with ``/``.

    ``https://example.com/game/index.html`` → ``https://example.com/game/``
    """
    path = urlsplit(url).path or "/"
    directory = path if path.endswith("/") else posixpath.dirname(path)
    if not directory.endswith("/"):
        directory += "/"
    return origin_of(url) + directory


def absolute_url(reference: str, base: str) -> str:
    """Resolve a document or stylesheet reference against *base*."""
    return urljoin(base, reference.strip())


def anonymous_path(path: str, rng: Optional[random.Random] = None) -> str:
    """``r/`` + random numeric id + the original extension of *path*."""
    source = rng or random
    ext = posixpath.splitext(path)[1]
    return f"{LOCAL_NAMESPACE}{source.randrange(_ANON_ID_SPACE)}{ext}"


def resolve_output_path(
    identity: str,
    policy: PathPolicy,
    base: str,
    *,
    rng: Optional[random.Random] = None,
) -> str:
    """Map a canonical identity to its path inside the snapshot.

    *preserve*: identities under *base* keep their path relative to it so that
    sibling-relative references stay valid; anything else goes under
    ``ext/<hostname><path>``.

    *anonymize*: ``r/<random id><ext>``. Uniqueness is not guaranteed here;
    the capture store retries on collision.
    """
    parsed = urlsplit(identity)
    path = parsed.path or "/"
    if policy is PathPolicy.ANONYMIZE:
        return anonymous_path(path, rng)

    if identity.startswith(base):
        relative = identity[len(base):]
    else:
        relative = f"{CROSS_ORIGIN_NAMESPACE}{parsed.hostname or ''}{path}"

    if not relative or relative.endswith("/"):
        relative += _DIRECTORY_INDEX
    return relative
