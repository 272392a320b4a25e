"""Legacy HTML to node-tree conversion.

Templates written for the previous, markup-based engine are stored as
``legacyHtml`` nodes.  :class:`LegacyContentImporter` upgrades the simple
ones to native node trees: block tags become nodes, inline formatting
becomes marks on the text beneath it, and ``<span th:text="${a.b}">``
placeholders become ``variable`` nodes.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

_PLACEHOLDER = re.compile(r"\$\{([a-zA-Z][a-zA-Z0-9_.]*)}")
_WHITESPACE = re.compile(r"[ \t\n\r\f\v]+")

BLOCK_TAGS: frozenset[str] = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li", "table",
    "thead", "tbody", "tr", "td", "th", "hr", "br",
})

_HEADINGS = {f"h{n}": n for n in range(1, 7)}

_INLINE_MARKS: dict[str, dict[str, Any]] = {
    "strong": {"type": "bold"},
    "b": {"type": "bold"},
    "em": {"type": "italic"},
    "i": {"type": "italic"},
    "u": {"type": "underline"},
}

Marks = list[dict[str, Any]]
NodeDict = dict[str, Any]


# ---------------------------------------------------------------------------
# Node constructors
# ---------------------------------------------------------------------------

def _container(kind: str, content: list[NodeDict], *, keep_empty: bool = True) -> NodeDict:
    node: NodeDict = {"type": kind}
    if content or keep_empty:
        node["content"] = content
    return node


def _paragraph(content: list[NodeDict]) -> NodeDict:
    return _container("paragraph", content, keep_empty=False)


def _heading(level: int, content: list[NodeDict]) -> NodeDict:
    node: NodeDict = {"type": "heading", "attrs": {"level": level}}
    if content:
        node["content"] = content
    return node


def _variable(key: str) -> NodeDict:
    return {"type": "variable", "attrs": {"key": key}}


def _is_text(child: Any) -> bool:
    return isinstance(child, NavigableString) and not isinstance(child, PreformattedString)


def _is_blank(text: str) -> bool:
    return not _WHITESPACE.sub("", text)


# ---------------------------------------------------------------------------
# LegacyContentImporter
# ---------------------------------------------------------------------------

class LegacyContentImporter:
    """Converts legacy HTML fragments into document node trees."""

    def convert_html(self, html: Optional[str]) -> NodeDict:
        """Convert *html* into a ``doc`` node.

        Blank input, or input without any convertible content, produces a
        document holding a single empty paragraph.
        """
        if not html or _is_blank(html):
            return _container("doc", [_paragraph([])])

        soup = BeautifulSoup(html, "html.parser")
        content = self._convert_children(soup, [])
        if not content:
            content = [_paragraph([])]
        return _container("doc", content)

    # ------------------------------------------------------------------
    # Element walking
    # ------------------------------------------------------------------

    def _convert_children(self, parent: Tag, marks: Marks) -> list[NodeDict]:
        """Convert block-level children; whitespace-only text is dropped."""
        result: list[NodeDict] = []
        for child in parent.children:
            if _is_text(child):
                if not _is_blank(str(child)):
                    result.extend(self._text_nodes(str(child), marks))
            elif isinstance(child, Tag):
                result.extend(self._convert_element(child, marks))
        return result

    def _convert_inline(self, parent: Tag, marks: Marks) -> list[NodeDict]:
        """Convert inline content, accumulating marks for formatting tags."""
        result: list[NodeDict] = []
        for child in parent.children:
            if _is_text(child):
                if str(child):
                    result.extend(self._text_nodes(str(child), marks))
            elif isinstance(child, Tag):
                result.extend(self._convert_element(child, marks))
        return result

    def _convert_element(self, el: Tag, marks: Marks) -> list[NodeDict]:
        tag = el.name.lower()

        if tag == "p":
            return [_paragraph(self._convert_inline(el, marks))]
        if tag in _HEADINGS:
            return [_heading(_HEADINGS[tag], self._convert_inline(el, marks))]
        if tag == "ul":
            return [_container("bulletList", self._list_items(el))]
        if tag == "ol":
            return [_container("orderedList", self._list_items(el))]
        if tag == "li":
            return [_container("listItem", self._wrapped_content(el, marks))]
        if tag == "table":
            return [_container("table", self._table_rows(el))]
        if tag in ("thead", "tbody"):
            return self._table_rows(el)
        if tag == "tr":
            return [_container("tableRow", self._row_cells(el))]
        if tag == "td":
            return [_container("tableCell", self._wrapped_content(el, marks))]
        if tag == "th":
            return [_container("tableHeader", self._wrapped_content(el, marks))]
        if tag == "hr":
            return [{"type": "horizontalRule"}]
        if tag == "br":
            return [{"type": "hardBreak"}]
        if tag in _INLINE_MARKS:
            return self._convert_inline(el, marks + [dict(_INLINE_MARKS[tag])])
        if tag == "a":
            link = {"type": "link", "attrs": {"href": el.get("href", "")}}
            return self._convert_inline(el, marks + [link])
        if tag == "span":
            match = _PLACEHOLDER.search(el.get("th:text", ""))
            if match:
                return [_variable(match.group(1))]
        return self._convert_inline(el, marks)

    # ------------------------------------------------------------------
    # Lists and tables
    # ------------------------------------------------------------------

    def _list_items(self, list_el: Tag) -> list[NodeDict]:
        return [
            _container("listItem", self._wrapped_content(child, []))
            for child in list_el.find_all(True, recursive=False)
            if child.name.lower() == "li"
        ]

    def _table_rows(self, section: Tag) -> list[NodeDict]:
        rows: list[NodeDict] = []
        for child in section.find_all(True, recursive=False):
            tag = child.name.lower()
            if tag == "tr":
                rows.append(_container("tableRow", self._row_cells(child)))
            elif tag in ("thead", "tbody"):
                rows.extend(self._table_rows(child))
        return rows

    def _row_cells(self, row: Tag) -> list[NodeDict]:
        cells: list[NodeDict] = []
        for child in row.find_all(True, recursive=False):
            tag = child.name.lower()
            if tag == "td":
                cells.append(_container("tableCell", self._wrapped_content(child, [])))
            elif tag == "th":
                cells.append(_container("tableHeader", self._wrapped_content(child, [])))
        return cells

    def _wrapped_content(self, el: Tag, marks: Marks) -> list[NodeDict]:
        """Content of a list item or cell; bare inline content gets a paragraph."""
        has_block = any(
            child.name.lower() in BLOCK_TAGS for child in el.find_all(True, recursive=False)
        )
        if has_block:
            return self._convert_children(el, marks)
        return [_paragraph(self._convert_inline(el, marks))]

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _text_nodes(self, text: str, marks: Marks) -> list[NodeDict]:
        normalised = _WHITESPACE.sub(" ", text)
        if normalised in ("", " "):
            return []
        node: NodeDict = {"type": "text", "text": normalised}
        if marks:
            node["marks"] = [dict(m) for m in marks]
        return [node]


def convert_html(html: Optional[str]) -> NodeDict:
    """Convert *html* with a default :class:`LegacyContentImporter`."""
    return LegacyContentImporter().convert_html(html)
