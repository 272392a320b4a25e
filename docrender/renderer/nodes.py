"""Recursive node renderer.

Walks a document tree and emits an HTML fragment, one case per node kind.
Clause references are transcluded from a caller-supplied registry and loop
tables are expanded from list data in the context.  The renderer never
raises on content: missing variables, clauses or data sources, malformed
nodes, unknown node kinds and runaway clause recursion all degrade to empty
output or an HTML comment, so a half-finished document still produces an
inspectable preview.

Each kind handler returns an :class:`Expansion` (opening markup, the child
nodes to render next, closing markup) and :meth:`NodeRenderer.render` drives
them from an explicit work stack, so document nesting depth never grows the
Python call stack.  The transclusion depth travels with every stacked node
and is never stored on the renderer, so one instance can serve concurrent
and nested render calls.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, NamedTuple, Optional, Union

from rich.console import Console
from rich.markup import escape as escape_markup

from docrender.renderer.escaping import escape_html, stringify
from docrender.renderer.legacy import sanitize_legacy_html
from docrender.renderer.marks import mark_tags, render_text
from docrender.renderer.models import (
    ClauseBlockAttrs,
    HeadingAttrs,
    LegacyHtmlAttrs,
    LoopTableAttrs,
    Node,
    NodeKind,
    TableCellAttrs,
    VariableAttrs,
)
from docrender.renderer.paths import resolve_data_source, resolve_variable

MAX_CLAUSE_DEPTH = 10

NodeLike = Union[Node, Mapping[str, Any]]
ClauseRegistry = Mapping[str, Any]
Context = Mapping[str, Any]


class Expansion(NamedTuple):
    """One node's output: ``opening`` + rendered ``children`` + ``closing``."""
    opening: str
    children: Sequence[Node] = ()
    child_depth: int = 0
    closing: str = ""


_Handler = Callable[[Node, Context, ClauseRegistry, int], Expansion]

# Container kinds that map one-to-one onto an HTML element.
WRAPPER_TAGS: dict[str, str] = {
    NodeKind.PARAGRAPH.value: "p",
    NodeKind.BULLET_LIST.value: "ul",
    NodeKind.ORDERED_LIST.value: "ol",
    NodeKind.LIST_ITEM.value: "li",
    NodeKind.TABLE.value: "table",
    NodeKind.TABLE_ROW.value: "tr",
}

VOID_TAGS: dict[str, str] = {
    NodeKind.HORIZONTAL_RULE.value: "<hr/>",
    NodeKind.HARD_BREAK.value: "<br/>",
}


class NodeRenderer:
    """Renders node trees to HTML fragments.

    Args:
        max_clause_depth: How many nested clause expansions are allowed before
            a branch is cut off with a comment.  Every renderer of the same
            documents must use the same value; the default is
            :data:`MAX_CLAUSE_DEPTH`.
        report_diagnostics: When ``True``, silent degradations (unknown
            kinds, missing clauses, depth cut-offs) are also reported on the
            console.  The HTML output is identical either way.
        console: Rich console used for diagnostics.
    """

    def __init__(
        self,
        max_clause_depth: int = MAX_CLAUSE_DEPTH,
        report_diagnostics: bool = False,
        console: Optional[Console] = None,
    ) -> None:
        self.max_clause_depth = max_clause_depth
        self.report_diagnostics = report_diagnostics
        self._console = console or Console(stderr=True)
        self._handlers: dict[str, _Handler] = {
            NodeKind.DOC.value: self._render_doc,
            NodeKind.HEADING.value: self._render_heading,
            NodeKind.TEXT.value: self._render_text,
            NodeKind.VARIABLE.value: self._render_variable,
            NodeKind.CLAUSE_BLOCK.value: self._render_clause_block,
            NodeKind.LOOP_TABLE.value: self._render_loop_table,
            NodeKind.TABLE_CELL.value: self._render_table_cell,
            NodeKind.TABLE_HEADER.value: self._render_table_cell,
            NodeKind.LEGACY_HTML.value: self._render_legacy_html,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(
        self,
        node: NodeLike,
        context: Context,
        clauses: Optional[ClauseRegistry] = None,
        depth: int = 0,
    ) -> str:
        """Render *node* and its descendants.

        Args:
            node: Root of the (sub)tree, a :class:`Node` or its JSON mapping.
                Anything else renders as an empty fragment.
            context: Nested business data for variables and loop tables.
            clauses: Clause id -> clause body tree.  Read, never mutated.
            depth: Number of clause expansions already above *node*.

        Returns:
            The HTML fragment for *node*.
        """
        root = Node.try_coerce(node)
        if root is None:
            self._diagnose(f"cannot render a {type(node).__name__} as a node")
            return ""
        clauses = clauses or {}
        parts: list[str] = []
        # Items are (Node, depth) still to expand, or (str, 0) closing markup.
        stack: list[tuple[Union[Node, str], int]] = [(root, depth)]
        while stack:
            item, level = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue
            expansion = self._expand(item, context, clauses, level)
            parts.append(expansion.opening)
            if expansion.closing:
                stack.append((expansion.closing, 0))
            for child in reversed(expansion.children):
                stack.append((child, expansion.child_depth))
        return "".join(parts)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _expand(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        kind = node.type
        if not kind:
            return Expansion("")

        handler = self._handlers.get(kind)
        if handler is not None:
            return handler(node, context, clauses, depth)

        tag = WRAPPER_TAGS.get(kind)
        if tag is not None:
            return Expansion(f"<{tag}>", node.children, depth, f"</{tag}>")

        void = VOID_TAGS.get(kind)
        if void is not None:
            return Expansion(void)

        self._diagnose(f"unknown node kind '{kind}', rendering children only")
        return Expansion("", node.children, depth)

    # ------------------------------------------------------------------
    # Node kinds
    # ------------------------------------------------------------------

    def _render_doc(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        return Expansion("", node.children, depth)

    def _render_heading(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        level = HeadingAttrs.from_attrs(node.attrs).level
        return Expansion(f"<h{level}>", node.children, depth, f"</h{level}>")

    def _render_text(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        if self.report_diagnostics:
            for mark in node.marks or []:
                if mark_tags(mark) is None:
                    self._diagnose(f"unknown mark kind '{mark.type}' ignored")
        return Expansion(render_text(node))

    def _render_variable(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        key = VariableAttrs.from_attrs(node.attrs).key
        value = resolve_variable(key, context)
        if not value:
            self._diagnose(f"variable '{key}' resolved to an empty value")
        return Expansion(value)

    def _render_clause_block(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        attrs = ClauseBlockAttrs.from_attrs(node.attrs)
        slug = escape_html(attrs.slug)

        if depth >= self.max_clause_depth:
            self._diagnose(f"max clause depth {self.max_clause_depth} reached at '{attrs.slug}'")
            return Expansion(f"<!-- max clause depth reached: {slug} -->")

        body = Node.try_coerce(clauses.get(attrs.clause_id)) if attrs.clause_id else None
        if body is None:
            self._diagnose(f"clause '{attrs.slug}' ({attrs.clause_id}) not found")
            return Expansion(f"<!-- clause not found: {slug} -->")

        return Expansion(
            f'<div class="clause-block" data-clause-slug="{slug}">', (body,), depth + 1, "</div>",
        )

    def _render_loop_table(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        attrs = LoopTableAttrs.from_attrs(node.attrs)
        rows = resolve_data_source(attrs.data_source, context)
        if rows is None:
            self._diagnose(f"data source '{attrs.data_source}' is not a list")

        parts = ["<table><thead><tr>"]
        for column in attrs.columns:
            parts.append(f"<th>{escape_html(column.header)}</th>")
        parts.append("</tr></thead><tbody>")
        for row in rows or []:
            parts.append("<tr>")
            for column in attrs.columns:
                value = row.get(column.key) if column.key and isinstance(row, Mapping) else None
                parts.append(f"<td>{escape_html(stringify(value))}</td>")
            parts.append("</tr>")
        parts.append("</tbody></table>")
        return Expansion("".join(parts))

    def _render_table_cell(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        tag = "th" if node.type == NodeKind.TABLE_HEADER.value else "td"
        spans = TableCellAttrs.from_attrs(node.attrs)
        opening = f"<{tag}"
        if spans.colspan > 1:
            opening += f' colspan="{spans.colspan}"'
        if spans.rowspan > 1:
            opening += f' rowspan="{spans.rowspan}"'
        return Expansion(f"{opening}>", node.children, depth, f"</{tag}>")

    def _render_legacy_html(
        self, node: Node, context: Context, clauses: ClauseRegistry, depth: int
    ) -> Expansion:
        return Expansion(sanitize_legacy_html(LegacyHtmlAttrs.from_attrs(node.attrs).html))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _diagnose(self, message: str) -> None:
        if self.report_diagnostics:
            self._console.print(f"[yellow]render:[/yellow] {escape_markup(message)}")


def render_node(
    node: NodeLike,
    context: Context,
    clauses: Optional[ClauseRegistry] = None,
    depth: int = 0,
) -> str:
    """Render *node* with a default :class:`NodeRenderer`."""
    return _DEFAULT_RENDERER.render(node, context, clauses, depth)


_DEFAULT_RENDERER = NodeRenderer()
