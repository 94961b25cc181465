# File: tests/test_paths.py
import random

import pytest

from page_dumper.paths import (
    PathPolicy,
    absolute_url,
    anonymous_path,
    base_uri,
    canonical_identity,
    origin_of,
    resolve_output_path,
)

BASE = "https://example.com/game/"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/game/index.html", "https://example.com"),
        ("https://example.com:443/a", "https://example.com"),
        ("http://example.com:8080/a", "http://example.com:8080"),
        ("HTTP://Example.COM/a", "http://example.com"),
        ("http://[::1]:8000/", "http://[::1]:8000"),
    ],
)
def test_origin_of(url, expected):
    assert origin_of(url) == expected


def test_canonical_identity_drops_query_and_fragment():
    assert canonical_identity("https://example.com/a.png?v=1#x") == "https://example.com/a.png"
    assert canonical_identity("https://example.com") == "https://example.com/"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/game/index.html", "https://example.com/game/"),
        ("https://example.com/game/", "https://example.com/game/"),
        ("https://example.com", "https://example.com/"),
        ("https://example.com/index.html?q=1", "https://example.com/"),
    ],
)
def test_base_uri(url, expected):
    assert base_uri(url) == expected


def test_absolute_url():
    assert absolute_url("img.png", BASE) == "https://example.com/game/img.png"
    assert absolute_url(" ../a.css ", BASE) == "https://example.com/a.css"
    assert absolute_url("//cdn.other.com/x.js", BASE) == "https://cdn.other.com/x.js"


def test_preserve_keeps_path_relative_to_base():
    identity = "https://example.com/game/img.png"
    assert resolve_output_path(identity, PathPolicy.PRESERVE, BASE) == "img.png"
    nested = "https://example.com/game/assets/sprites/a.png"
    assert resolve_output_path(nested, PathPolicy.PRESERVE, BASE) == "assets/sprites/a.png"


def test_preserve_outside_base_goes_to_ext_namespace():
    assert (
        resolve_output_path("https://cdn.other.com/a.png", PathPolicy.PRESERVE, BASE)
        == "ext/cdn.other.com/a.png"
    )
    # same origin, but above the base directory
    assert (
        resolve_output_path("https://example.com/style.css", PathPolicy.PRESERVE, BASE)
        == "ext/example.com/style.css"
    )


def test_preserve_directory_paths_get_index():
    assert resolve_output_path("https://example.com/game/", PathPolicy.PRESERVE, BASE) == "index.html"
    assert (
        resolve_output_path("https://example.com/game/levels/", PathPolicy.PRESERVE, BASE)
        == "levels/index.html"
    )
    assert (
        resolve_output_path("https://cdn.other.com/", PathPolicy.PRESERVE, BASE)
        == "ext/cdn.other.com/index.html"
    )


def test_preserve_is_deterministic():
    identity = "https://example.com/game/a/b.js"
    paths = {resolve_output_path(identity, PathPolicy.PRESERVE, BASE) for _ in range(5)}
    assert paths == {"a/b.js"}


def test_anonymize_keeps_extension():
    rng = random.Random(1)
    path = resolve_output_path("https://cdn.other.com/x/font.woff2", PathPolicy.ANONYMIZE, BASE, rng=rng)
    assert path.startswith("r/")
    assert path.endswith(".woff2")
    assert path[2:-len(".woff2")].isdigit()


def test_anonymous_path_without_extension():
    path = anonymous_path("/api/data", random.Random(7))
    assert path.startswith("r/")
    assert path[2:].isdigit()
