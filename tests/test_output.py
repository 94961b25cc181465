# File: tests/test_output.py
"""Тесты записи результата дампа на диск (`page_dumper.output`)."""
import json

import pytest

from page_dumper.capture.store import CaptureStore
from page_dumper.output import local_file_path, manifest_data, write_manifest, write_result


@pytest.fixture()
def result(context):
    store = CaptureStore(context)
    store.store("https://example.com/game/img.png", b"PNG", "image/png")
    store.store("https://example.com/game/sprites/hero%20one.png", b"HERO", "image/png")
    store.store("https://cdn.other.com/lib/app.js", b"js()", "text/javascript")
    store.add_entry_document("<html></html>")
    return store.freeze()


def test_write_result(result, tmp_path):
    out = tmp_path / "out"
    written = write_result(result, out)
    assert len(written) == 4
    assert (out / "index.html").read_text() == "<html></html>"
    assert (out / "img.png").read_bytes() == b"PNG"
    assert (out / "sprites" / "hero one.png").read_bytes() == b"HERO"
    assert (out / "ext" / "cdn.other.com" / "lib" / "app.js").read_bytes() == b"js()"


def test_write_result_clean(result, tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    (out / "stale.txt").write_text("old")
    write_result(result, out, clean=True)
    assert not (out / "stale.txt").exists()
    assert (out / "index.html").exists()


@pytest.mark.parametrize("path", ["../etc/passwd", "a/../../b", "", "%2e%2e/x"])
def test_unsafe_paths_rejected(tmp_path, path):
    with pytest.raises(ValueError):
        local_file_path(tmp_path, path)


def test_leading_slash_stays_inside(tmp_path):
    assert local_file_path(tmp_path, "/index.html") == tmp_path / "index.html"


def test_manifest(result, tmp_path):
    data = manifest_data(result)
    assert data["entry"] == "index.html"
    assert data["resources"]["img.png"] == {"content_type": "image/png", "size": 3}
    assert data["identities"]["https://cdn.other.com/lib/app.js"] == "ext/cdn.other.com/lib/app.js"

    path = write_manifest(result, tmp_path / "reports" / "manifest.json")
    assert json.loads(path.read_text(encoding="utf-8")) == data
