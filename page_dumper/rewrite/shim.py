"""page_dumper.rewrite.shim: replay-time fetch redirection script.

The script replaces ``window.fetch`` inside the snapshot: GET/HEAD requests
whose canonical identity (origin + path) is in the identity map are served
from the local path, everything else goes to the network untouched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jinja2 import Environment, FileSystemLoader

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

#: marks the injected script so a later rewrite can replace it
SHIM_ATTRIBUTE = "data-page-dumper-shim"

# Templates receive already-serialized HTML/JS, hence no autoescape.
template_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=False,
    keep_trailing_newline=True,
)


def _script_safe_json(data: Mapping[str, str]) -> str:
    text = json.dumps(dict(data), ensure_ascii=False, indent="\t")
    # "<" can never end the surrounding <script> element once escaped
    return (
        text.replace("<", "\\u003c")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def render_shim(identities: Mapping[str, str]) -> str:
    """Return the shim script for *identities*; same map, same text."""
    return template_env.get_template("shim.js.j2").render(path_map=_script_safe_json(identities))


__all__ = ["render_shim", "SHIM_ATTRIBUTE", "template_env"]
