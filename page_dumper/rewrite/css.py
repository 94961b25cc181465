# page_dumper/rewrite/css.py
"""
CSS rewriter working on a tinycss2 rule tree.

For every rule of a stylesheet, in order:

* ``@import`` – fetched, rewritten recursively and spliced in its place, so no
  import survives. A ``layer``/``supports()``/media condition on the import is
  kept by wrapping the inlined rules in the matching at-rule;
* grouping at-rules (``@media``, ``@supports``, ``@keyframes``, …) – their
  nested rule list is rewritten in place;
* rules carrying declarations – the first ``url(...)`` of each declaration is
  resolved and replaced by its local path, or by ``url("")`` when it cannot be
  resolved. Later ``url()`` values of the same declaration are left alone
  (e.g. the fallbacks of a multi-source ``@font-face`` ``src``). Nested rules
  inside a style rule (``.a { & .b { … } }``) are rewritten the same way.

Unparseable rules are dropped, the same way a browser drops them.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import tinycss2
from tinycss2.ast import (
    AtRule,
    Comment,
    CurlyBracketsBlock,
    Declaration,
    FunctionBlock,
    IdentToken,
    ParenthesesBlock,
    ParseError,
    QualifiedRule,
    SquareBracketsBlock,
    StringToken,
    URLToken,
    WhitespaceToken,
)
from tinycss2.serializer import serialize_string_value

from page_dumper.errors import StylesheetFetchError
from page_dumper.logger import logger
from page_dumper.paths import absolute_url
from page_dumper.rewrite.references import ReferenceResolver
from page_dumper.rewrite.stylesheets import StylesheetSource

_GROUPING_AT_RULES = frozenset(
    {
        "media",
        "supports",
        "document",
        "-moz-document",
        "layer",
        "container",
        "scope",
        "starting-style",
        "keyframes",
        "-webkit-keyframes",
        "-moz-keyframes",
        "-o-keyframes",
    }
)
# meaningless once the sheet is inlined into the document
_DROPPED_AT_RULES = frozenset({"charset"})
_BLOCKS = (ParenthesesBlock, SquareBracketsBlock, CurlyBracketsBlock)

MAX_IMPORT_DEPTH = 16


def _url_argument(function: FunctionBlock) -> str:
    for token in function.arguments:
        if isinstance(token, StringToken):
            return token.value
    return ""


def _import_target(rule: AtRule) -> Tuple[Optional[str], list]:
    """Return the imported URL and the prelude tokens following it."""
    prelude = rule.prelude
    for index, token in enumerate(prelude):
        if isinstance(token, (WhitespaceToken, Comment)):
            continue
        if isinstance(token, (StringToken, URLToken)):
            return token.value, prelude[index + 1:]
        if isinstance(token, FunctionBlock) and token.lower_name == "url":
            return _url_argument(token), prelude[index + 1:]
        return None, []
    return None, []


def _import_wrappers(tokens: list) -> List[str]:
    """At-rule heads, outermost first, equivalent to an import condition.

    ``@import "a.css" layer(base) supports(display: grid) print`` gives
    ``["@layer base", "@supports (display: grid)", "@media print"]``.
    """
    layer = supports = None
    media: list = []
    for token in tokens:
        if not media and isinstance(token, IdentToken) and token.lower_value == "layer":
            layer = "@layer"
        elif not media and isinstance(token, FunctionBlock) and token.lower_name == "layer":
            layer = f"@layer {tinycss2.serialize(token.arguments).strip()}"
        elif not media and isinstance(token, FunctionBlock) and token.lower_name == "supports":
            supports = f"@supports ({tinycss2.serialize(token.arguments).strip()})"
        elif media or not isinstance(token, (WhitespaceToken, Comment)):
            media.append(token)
    heads = [head for head in (layer, supports) if head]
    condition = tinycss2.serialize(media).strip()
    if condition and condition.lower() != "all":
        heads.append(f"@media {condition}")
    return heads


def _at_rule_head(rule: AtRule) -> str:
    prelude = tinycss2.serialize(rule.prelude).strip()
    return f"@{rule.at_keyword} {prelude}" if prelude else f"@{rule.at_keyword}"


def _local_url(token, local: str) -> URLToken:
    return URLToken(
        token.source_line,
        token.source_column,
        local,
        f'url("{serialize_string_value(local)}")',
    )


class CSSRewriter:
    """Rewrites stylesheets and declaration blocks against the capture maps."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        stylesheets: StylesheetSource,
        *,
        max_import_depth: int = MAX_IMPORT_DEPTH,
    ) -> None:
        self.resolver = resolver
        self.stylesheets = stylesheets
        self.max_import_depth = max_import_depth

    async def rewrite_stylesheet(self, css: str, base: str, *, source_url: Optional[str] = None) -> str:
        """Rewrite a whole stylesheet whose relative references resolve against *base*."""
        chain: Tuple[str, ...] = (source_url,) if source_url else ()
        return await self._rewrite_sheet(css, base, chain)

    def rewrite_declarations(self, text: str, base: str) -> str:
        """Rewrite an inline ``style`` attribute value."""
        declarations = tinycss2.parse_declaration_list(text, skip_comments=True, skip_whitespace=True)
        return " ".join(
            self._rewrite_declaration(item, base) for item in declarations if isinstance(item, Declaration)
        )

    async def _rewrite_sheet(self, css: str, base: str, chain: Tuple[str, ...]) -> str:
        rules = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
        return "\n".join(await self._rewrite_rules(rules, base, chain))

    async def _rewrite_rules(self, rules: Sequence, base: str, chain: Tuple[str, ...]) -> List[str]:
        texts: List[str] = []
        for rule in rules:
            if isinstance(rule, QualifiedRule):
                prelude = tinycss2.serialize(rule.prelude).strip()
                body = await self._rewrite_block(rule.content, base, chain)
                texts.append(f"{prelude} {{ {body} }}")
            elif isinstance(rule, AtRule):
                text = await self._rewrite_at_rule(rule, base, chain)
                if text:
                    texts.append(text)
            elif isinstance(rule, ParseError):
                logger.debug("Unparseable CSS dropped: %s", rule.message)
        return texts

    async def _rewrite_at_rule(
        self, rule: AtRule, base: str, chain: Tuple[str, ...], *, nested: bool = False
    ) -> str:
        keyword = rule.lower_at_keyword
        if keyword == "import":
            return await self._inline_import(rule, base, chain)
        if keyword in _DROPPED_AT_RULES:
            return ""
        if rule.content is None:
            return f"{_at_rule_head(rule)};"
        if keyword in _GROUPING_AT_RULES and not nested:
            rules = tinycss2.parse_rule_list(rule.content, skip_comments=True, skip_whitespace=True)
            body = "\n".join(await self._rewrite_rules(rules, base, chain))
            return f"{_at_rule_head(rule)} {{\n{body}\n}}"
        # @font-face, @page, and grouping rules nested inside a style rule
        body = await self._rewrite_block(rule.content, base, chain)
        return f"{_at_rule_head(rule)} {{ {body} }}"

    async def _inline_import(self, rule: AtRule, base: str, chain: Tuple[str, ...]) -> str:
        target, condition = _import_target(rule)
        if not target:
            logger.debug("Malformed @import dropped: %s", tinycss2.serialize(rule.prelude).strip())
            return ""
        url = absolute_url(target, base)
        if url in chain:
            logger.warning("Circular @import of %s skipped", url)
            return ""
        if len(chain) >= self.max_import_depth:
            raise StylesheetFetchError(url, "@import nesting too deep")
        css = await self.stylesheets.fetch(url)
        text = await self._rewrite_sheet(css, url, chain + (url,))
        for head in reversed(_import_wrappers(condition)):
            text = f"{head} {{\n{text}\n}}"
        return text

    async def _rewrite_block(self, content, base: str, chain: Tuple[str, ...]) -> str:
        """Declarations and nested rules of one ``{}`` block."""
        parts: List[str] = []
        for item in tinycss2.parse_blocks_contents(content, skip_comments=True, skip_whitespace=True):
            if isinstance(item, Declaration):
                parts.append(self._rewrite_declaration(item, base))
            elif isinstance(item, AtRule):
                text = await self._rewrite_at_rule(item, base, chain, nested=True)
                if text:
                    parts.append(text)
            elif isinstance(item, QualifiedRule):
                parts.extend(await self._rewrite_rules([item], base, chain))
            elif isinstance(item, ParseError):
                logger.debug("Unparseable CSS dropped: %s", item.message)
        return " ".join(parts)

    def _rewrite_declaration(self, declaration: Declaration, base: str) -> str:
        self._replace_first_url(declaration.value, base)
        value = tinycss2.serialize(declaration.value).strip()
        important = " !important" if declaration.important else ""
        return f"{declaration.name}: {value}{important};"

    def _replace_first_url(self, tokens: list, base: str) -> bool:
        for index, token in enumerate(tokens):
            if isinstance(token, URLToken):
                tokens[index] = _local_url(token, self.resolver.resolve(token.value, base) or "")
                return True
            if isinstance(token, FunctionBlock):
                if token.lower_name == "url":
                    reference = _url_argument(token)
                    tokens[index] = _local_url(token, self.resolver.resolve(reference, base) or "")
                    return True
                if self._replace_first_url(token.arguments, base):
                    return True
            elif isinstance(token, _BLOCKS):
                if self._replace_first_url(token.content, base):
                    return True
        return False


__all__ = ["CSSRewriter", "MAX_IMPORT_DEPTH"]
