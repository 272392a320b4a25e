"""Structured-document rendering engine.

Converts a document node tree (as produced by the rich-text editor) into a
self-contained HTML document, resolving variables from business data,
transcluding clauses by reference and expanding loop tables.

Usage::

    from docrender.renderer import extract_clause_ids, render_document

    wanted = extract_clause_ids(template)
    clauses = {cid: fetch_clause_body(cid) for cid in set(wanted)}
    html = render_document(template, {"project": {"name": "Acme"}}, clauses)
"""

from docrender.renderer.document import (
    DocumentAssembler,
    render_document,
    sanitize_css,
)
from docrender.renderer.escaping import escape_html, safe_href, stringify
from docrender.renderer.extract import (
    extract_clause_ids,
    extract_variable_keys,
    unique_clause_ids,
)
from docrender.renderer.models import Mark, MarkKind, Node, NodeKind
from docrender.renderer.nodes import MAX_CLAUSE_DEPTH, NodeRenderer, render_node
from docrender.renderer.paths import resolve_data_source, resolve_variable

__all__ = [
    "MAX_CLAUSE_DEPTH",
    "DocumentAssembler",
    "Mark",
    "MarkKind",
    "Node",
    "NodeKind",
    "NodeRenderer",
    "escape_html",
    "extract_clause_ids",
    "extract_variable_keys",
    "render_document",
    "render_node",
    "resolve_data_source",
    "resolve_variable",
    "safe_href",
    "sanitize_css",
    "stringify",
    "unique_clause_ids",
]
