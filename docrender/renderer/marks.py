"""Inline mark composition for text leaves."""

from __future__ import annotations

from typing import Optional

from docrender.renderer.escaping import escape_html, safe_href
from docrender.renderer.models import LinkAttrs, Mark, MarkKind, Node

_SIMPLE_TAGS: dict[str, str] = {
    MarkKind.BOLD.value: "strong",
    MarkKind.ITALIC.value: "em",
    MarkKind.UNDERLINE.value: "u",
}


def mark_tags(mark: Mark) -> Optional[tuple[str, str]]:
    """Return the ``(open, close)`` tag pair for *mark*, or ``None`` if unknown."""
    tag = _SIMPLE_TAGS.get(mark.type or "")
    if tag is not None:
        return f"<{tag}>", f"</{tag}>"
    if mark.type == MarkKind.LINK.value:
        href = safe_href(LinkAttrs.from_attrs(mark.attrs).href)
        return f'<a href="{href}">', "</a>"
    return None


def render_text(node: Node) -> str:
    """Render a text node: escape once, then nest the marks around it.

    The first mark becomes the outermost tag.  Unknown mark kinds are skipped
    so documents authored with newer marks still render as plain text.
    """
    escaped = escape_html(node.text or "")
    if not node.marks:
        return escaped

    opening: list[str] = []
    closing: list[str] = []
    for mark in node.marks:
        tags = mark_tags(mark)
        if tags is None:
            continue
        opening.append(tags[0])
        closing.append(tags[1])
    return "".join(opening) + escaped + "".join(reversed(closing))
