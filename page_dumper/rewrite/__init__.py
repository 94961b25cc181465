"""page_dumper.rewrite: HTML/CSS transformation of the captured page."""

from .css import CSSRewriter
from .document import DocumentRewriter, parse_document
from .references import ReferenceResolver
from .shim import render_shim
from .stylesheets import StylesheetSource

__all__ = [
    "CSSRewriter",
    "DocumentRewriter",
    "ReferenceResolver",
    "StylesheetSource",
    "parse_document",
    "render_shim",
]
