# File: tests/test_shim.py
import json
import re

from page_dumper.rewrite.shim import render_shim

IDENTITIES = {
    "https://example.com/game/data.json": "data.json",
    "https://cdn.other.com/level.bin": "ext/cdn.other.com/level.bin",
}


def _embedded_map(script: str) -> dict:
    match = re.search(r"const pathMap = (\{.*?\});", script, re.S)
    assert match is not None
    return json.loads(match.group(1))


def test_shim_embeds_identity_map():
    script = render_shim(IDENTITIES)
    assert _embedded_map(script) == IDENTITIES
    assert "window.fetch" in script


def test_shim_is_deterministic():
    assert render_shim(IDENTITIES) == render_shim(dict(IDENTITIES))


def test_shim_cannot_close_script_element():
    script = render_shim({"https://example.com/</script><b>": "x.js"})
    assert "</script>" not in script
    assert _embedded_map(script) == {"https://example.com/</script><b>": "x.js"}


def test_shim_with_empty_map():
    assert _embedded_map(render_shim({})) == {}
