# page_dumper/rewrite/document.py
"""Document rewriter: turns the captured HTML into the offline entry document.

Every element of the parsed tree is visited once, in document order. Transforms
are fail-closed: an element whose reference cannot be resolved against the
capture maps is removed rather than left pointing at the network.

============================  ===============================================
element                       transform
============================  ===============================================
img/audio/video/input/        first ``src``/``srcset`` candidate replaced by
track/image/source            its local path, or the element is removed
base, meta                    removed
embed, object, frame, iframe  removed (nested contexts are not captured)
title                         snapshot marker appended, ``Page`` if empty
link                          ``rel=stylesheet`` inlined as ``<style>``, any
                              other relation removed
style                         rewritten through the CSS rewriter, removed if
                              empty
script                        ``src`` resolved like media; inline code kept
``style="…"``                 declarations rewritten through the CSS rewriter
============================  ===============================================

The rewritten head and body are then wrapped in a fixed document shell with
the runtime shim as the first script of ``<head>``.
"""
from __future__ import annotations

from typing import Mapping, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Stylesheet, Tag

from page_dumper.logger import logger
from page_dumper.models import SessionContext
from page_dumper.paths import absolute_url
from page_dumper.rewrite.css import CSSRewriter
from page_dumper.rewrite.references import ReferenceResolver
from page_dumper.rewrite.shim import SHIM_ATTRIBUTE, render_shim, template_env
from page_dumper.rewrite.stylesheets import StylesheetSource

MEDIA_TAGS = frozenset({"img", "audio", "video", "input", "track", "image", "source"})
REMOVED_TAGS = frozenset({"base", "meta", "embed", "object", "frame", "iframe"})

TITLE_MARKER = " (Generated by Page Dumper)"
DEFAULT_TITLE = "Page"


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def snapshot_title(text: str) -> str:
    text = text.strip() or DEFAULT_TITLE
    return text if text.endswith(TITLE_MARKER) else text + TITLE_MARKER


def _attached(elem: Tag, root: BeautifulSoup) -> bool:
    return any(parent is root for parent in elem.parents)


def _first_candidate(srcset: str) -> str:
    first = srcset.split(",", 1)[0].strip()
    return first.split()[0] if first else ""


def _comment_safe(text: str) -> str:
    return text.replace("--", "%2D%2D")


def _ensure_head_body(soup: BeautifulSoup) -> Tuple[Tag, Tag]:
    html = soup.find("html")
    if html is None:
        html = soup.new_tag("html")
        soup.append(html)
    head = soup.find("head")
    if head is None:
        head = soup.new_tag("head")
        html.insert(0, head)
    body = soup.find("body")
    if body is None:
        body = soup.new_tag("body")
        html.append(body)
    return head, body


class DocumentRewriter:
    """Rewrites one captured document against a frozen identity map."""

    def __init__(
        self,
        context: SessionContext,
        identities: Mapping[str, str],
        stylesheets: StylesheetSource,
    ) -> None:
        self.context = context
        self.identities = identities
        self.resolver = ReferenceResolver(context, identities)
        self.css = CSSRewriter(self.resolver, stylesheets)

    async def rewrite(self, html: str, *, source_url: Optional[str] = None) -> str:
        """Parse, rewrite and assemble; StylesheetFetchError aborts the whole document."""
        soup = parse_document(html)
        await self.rewrite_tree(soup)
        return self.assemble(soup, source_url=source_url or self.context.target_url)

    async def rewrite_tree(self, soup: BeautifulSoup) -> BeautifulSoup:
        head, _ = _ensure_head_body(soup)
        base = self.context.base_uri
        titled = False

        for elem in list(soup.find_all(True)):
            if not _attached(elem, soup):
                continue
            name = elem.name.lower()
            if name in MEDIA_TAGS:
                self._rewrite_media(elem, base)
            elif name in REMOVED_TAGS:
                elem.extract()
            elif name == "title" and elem.find_parent("svg") is None:
                if titled:
                    elem.extract()
                else:
                    elem.string = snapshot_title(elem.get_text())
                    titled = True
            elif name == "link":
                await self._rewrite_link(soup, elem, base)
            elif name == "style":
                await self._rewrite_style(elem, base)
            elif name == "script":
                self._rewrite_script(elem, base)

            if _attached(elem, soup):
                self._rewrite_style_attribute(elem, base)

        if not titled:
            title = soup.new_tag("title")
            title.string = snapshot_title("")
            head.insert(0, title)
        return soup

    def assemble(self, soup: BeautifulSoup, *, source_url: str) -> str:
        head, body = _ensure_head_body(soup)
        return template_env.get_template("document.html.j2").render(
            source_url=_comment_safe(source_url),
            shim=render_shim(self.identities),
            shim_attribute=SHIM_ATTRIBUTE,
            head=head.decode_contents().strip(),
            body=body.decode_contents().strip(),
        )

    # ------------------------------------------------------------------ #
    # per-element transforms                                              #
    # ------------------------------------------------------------------ #

    def _rewrite_media(self, elem: Tag, base: str) -> None:
        src = (elem.get("src") or "").strip()
        srcset = (elem.get("srcset") or "").strip()
        self._rewrite_poster(elem, base)
        if not src and not srcset:
            # nothing to load (text inputs, <video> with <source> children)
            return

        reference = src or _first_candidate(srcset)
        elem.attrs.pop("src", None)
        elem.attrs.pop("srcset", None)

        local = self.resolver.resolve(reference, base)
        if local is None:
            logger.debug("Removed <%s>: %s not captured", elem.name, reference)
            elem.extract()
            return
        # <source> inside <picture> only understands srcset
        attr = "srcset" if not src and elem.name == "source" else "src"
        elem[attr] = local

    def _rewrite_poster(self, elem: Tag, base: str) -> None:
        poster = (elem.get("poster") or "").strip()
        if not poster:
            return
        local = self.resolver.resolve(poster, base)
        if local is None:
            del elem["poster"]
        else:
            elem["poster"] = local

    def _rewrite_script(self, elem: Tag, base: str) -> None:
        if elem.has_attr(SHIM_ATTRIBUTE):
            elem.extract()
            return
        src = (elem.get("src") or "").strip()
        if not src:
            return
        local = self.resolver.resolve(src, base)
        if local is None:
            logger.debug("Removed <script>: %s not captured", src)
            elem.extract()
        else:
            elem["src"] = local

    async def _rewrite_link(self, soup: BeautifulSoup, elem: Tag, base: str) -> None:
        rels = elem.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        href = (elem.get("href") or "").strip()

        if href and "stylesheet" in (rel.lower() for rel in rels):
            url = absolute_url(href, base)
            css = await self.css.stylesheets.fetch(url)
            style = soup.new_tag("style", attrs={"type": "text/css"})
            if elem.get("media"):
                style["media"] = elem["media"]
            style.string = Stylesheet(await self.css.rewrite_stylesheet(css, url, source_url=url) or " ")
            elem.replace_with(style)
            return
        elem.extract()

    async def _rewrite_style(self, elem: Tag, base: str) -> None:
        css = "".join(str(s) for s in elem.contents if isinstance(s, NavigableString))
        if not css.strip():
            elem.extract()
            return
        elem.string = Stylesheet(await self.css.rewrite_stylesheet(css, base))

    def _rewrite_style_attribute(self, elem: Tag, base: str) -> None:
        style = elem.get("style")
        if isinstance(style, str) and style.strip():
            elem["style"] = self.css.rewrite_declarations(style, base)


__all__ = ["DocumentRewriter", "parse_document", "snapshot_title", "TITLE_MARKER", "DEFAULT_TITLE"]
