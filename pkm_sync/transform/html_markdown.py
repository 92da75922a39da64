"""HTML to Markdown conversion for email and calendar bodies."""

from __future__ import annotations

import html
import logging
import re
import warnings
from collections.abc import Callable
from enum import Enum

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PageElement, PreformattedString

logger = logging.getLogger(__name__)

_ENTITY_REPLACEMENTS = {
    "&hellip;": "...",
    "&ldquo;": '"',
    "&rdquo;": '"',
    "&mdash;": "\u2014",
    "&ndash;": "\u2013",
    "&nbsp;": " ",
    "&rsquo;": "'",
    "&lsquo;": "'",
    "&quot;": '"',
    "\u00a0": " ",
    "\u201c": '"',
    "\u201d": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u2026": "...",
}
_ENTITY_PATTERN = re.compile("|".join(re.escape(k) for k in _ENTITY_REPLACEMENTS))

_BLANK_LINES = re.compile(r"\n\s*\n\s*\n")
_EMPHASIS_RUN = re.compile(r"\*{4,}")


def unescape_entities(text: str) -> str:
    """Decode HTML entities, then fold typographic characters to ASCII."""
    text = html.unescape(text)
    return _ENTITY_PATTERN.sub(lambda m: _ENTITY_REPLACEMENTS[m.group(0)], text)


def contains_html(content: str) -> bool:
    """Cheap check deciding whether content goes through the HTML converter."""
    return "<" in content and ">" in content


class ElementKind(str, Enum):
    """Rendering behaviour of an HTML element."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LINE_BREAK = "line_break"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    CODE = "code"
    PREFORMATTED = "preformatted"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LIST_ITEM = "list_item"
    LINK = "link"
    IMAGE = "image"
    DIVISION = "division"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    SKIPPED = "skipped"
    GENERIC = "generic"


_TAG_KINDS: dict[str, ElementKind] = {
    **{f"h{level}": ElementKind.HEADING for level in range(1, 7)},
    "p": ElementKind.PARAGRAPH,
    "br": ElementKind.LINE_BREAK,
    "strong": ElementKind.STRONG,
    "b": ElementKind.STRONG,
    "em": ElementKind.EMPHASIS,
    "i": ElementKind.EMPHASIS,
    "code": ElementKind.CODE,
    "pre": ElementKind.PREFORMATTED,
    "blockquote": ElementKind.BLOCKQUOTE,
    "ul": ElementKind.LIST,
    "ol": ElementKind.LIST,
    "li": ElementKind.LIST_ITEM,
    "a": ElementKind.LINK,
    "img": ElementKind.IMAGE,
    "div": ElementKind.DIVISION,
    "table": ElementKind.TABLE,
    "tr": ElementKind.TABLE_ROW,
    "td": ElementKind.TABLE_CELL,
    "th": ElementKind.TABLE_CELL,
    "style": ElementKind.SKIPPED,
    "script": ElementKind.SKIPPED,
}


def classify_tag(name: str) -> ElementKind:
    return _TAG_KINDS.get(name.lower(), ElementKind.GENERIC)


class HtmlMarkdownConverter:
    """Walks a parsed HTML tree and renders it as Markdown.

    The converter keeps no state between calls; every ``convert`` writes
    into a fresh buffer.
    """

    def __init__(self) -> None:
        self._handlers: dict[ElementKind, Callable[[Tag, list[str]], None]] = {
            ElementKind.HEADING: self._heading,
            ElementKind.PARAGRAPH: self._paragraph,
            ElementKind.LINE_BREAK: self._line_break,
            ElementKind.STRONG: self._strong,
            ElementKind.EMPHASIS: self._emphasis,
            ElementKind.CODE: self._code,
            ElementKind.PREFORMATTED: self._preformatted,
            ElementKind.BLOCKQUOTE: self._blockquote,
            ElementKind.LIST: self._list,
            ElementKind.LIST_ITEM: self._list_item,
            ElementKind.LINK: self._link,
            ElementKind.IMAGE: self._image,
            ElementKind.DIVISION: self._division,
            ElementKind.TABLE: self._table,
            ElementKind.TABLE_ROW: self._table_row,
            ElementKind.TABLE_CELL: self._children,
            ElementKind.SKIPPED: self._skip,
            ElementKind.GENERIC: self._children,
        }

    @property
    def handled_kinds(self) -> frozenset[ElementKind]:
        return frozenset(self._handlers)

    def convert(self, markup: str) -> str:
        """Convert an HTML fragment or document to Markdown.

        If the markup cannot be parsed, the entity-decoded input is
        returned instead.
        """
        out: list[str] = []
        try:
            with warnings.catch_warnings():
                # Bodies that are just a URL or a path are still valid input here.
                warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
                soup = BeautifulSoup(markup, "lxml")
            self._children(soup, out)
        except (ParserRejectedMarkup, RecursionError) as exc:
            logger.warning("HTML parsing failed, falling back to entity decoding: %s", exc)
            return html.unescape(markup)

        result = unescape_entities("".join(out))
        result = _BLANK_LINES.sub("\n\n", result)
        result = _EMPHASIS_RUN.sub("***", result)
        return result.strip()

    # ------------------------------------------------------------------
    # Tree walking
    # ------------------------------------------------------------------

    def _node(self, node: PageElement, out: list[str]) -> None:
        if isinstance(node, Tag):
            self._handlers[classify_tag(node.name)](node, out)
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            # Comments, doctypes and CDATA sections render nothing.
            out.append(unescape_entities(str(node)))

    def _children(self, node: Tag, out: list[str]) -> None:
        for child in node.children:
            self._node(child, out)

    def _render(self, node: Tag) -> str:
        buf: list[str] = []
        self._children(node, buf)
        return "".join(buf)

    # ------------------------------------------------------------------
    # Element handlers
    # ------------------------------------------------------------------

    def _heading(self, node: Tag, out: list[str]) -> None:
        level = int(node.name[1])
        out.append("#" * level + " ")
        self._children(node, out)
        out.append("\n")

    def _paragraph(self, node: Tag, out: list[str]) -> None:
        self._children(node, out)
        out.append("\n\n")

    def _line_break(self, node: Tag, out: list[str]) -> None:
        out.append("\n")

    def _strong(self, node: Tag, out: list[str]) -> None:
        out.append(f"**{self._render(node)}**")

    def _emphasis(self, node: Tag, out: list[str]) -> None:
        out.append(f"*{self._render(node)}*")

    def _code(self, node: Tag, out: list[str]) -> None:
        out.append(f"`{self._render(node)}`")

    def _preformatted(self, node: Tag, out: list[str]) -> None:
        out.append(f"```\n{self._render(node)}\n```\n")

    def _blockquote(self, node: Tag, out: list[str]) -> None:
        for line in self._render(node).strip().split("\n"):
            line = line.strip()
            if line:
                out.append(f"> {line}\n")

    def _list(self, node: Tag, out: list[str]) -> None:
        out.append("\n")
        self._children(node, out)
        out.append("\n")

    def _list_item(self, node: Tag, out: list[str]) -> None:
        out.append("- ")
        self._children(node, out)
        out.append("\n")

    def _link(self, node: Tag, out: list[str]) -> None:
        href = node.get("href")
        if href:
            out.append(f"[{self._render(node)}]({href})")
        else:
            self._children(node, out)

    def _image(self, node: Tag, out: list[str]) -> None:
        src = node.get("src")
        if src:
            out.append(f"![{node.get('alt') or ''}]({src})")

    def _division(self, node: Tag, out: list[str]) -> None:
        self._children(node, out)
        out.append("\n")

    def _table(self, node: Tag, out: list[str]) -> None:
        out.append("\n")
        self._children(node, out)
        out.append("\n")

    def _table_row(self, node: Tag, out: list[str]) -> None:
        cells = [
            child
            for child in node.children
            if isinstance(child, Tag) and child.name in ("td", "th")
        ]
        has_header = any(cell.name == "th" for cell in cells)
        out.append("| ")
        for i, cell in enumerate(cells):
            self._children(cell, out)
            if i < len(cells) - 1:
                out.append(" | ")
            else:
                # Header rows keep a trailing space after the closing pipe.
                out.append(" | " if has_header else " |")
        out.append("\n")

    def _skip(self, node: Tag, out: list[str]) -> None:
        return None


_converter = HtmlMarkdownConverter()


def html_to_markdown(markup: str) -> str:
    """Convert HTML to Markdown using a shared stateless converter."""
    return _converter.convert(markup)
