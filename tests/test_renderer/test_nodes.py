"""Tests for the recursive node renderer.

Covers:
- One case per node kind
- Variables, loop tables and cell spans
- Clause transclusion, missing clauses and the depth limit
- Unknown kinds and diagnostics
"""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from docrender.renderer.models import Node
from docrender.renderer.nodes import MAX_CLAUSE_DEPTH, NodeRenderer, render_node

pytestmark = pytest.mark.unit


def text(value, *marks):
    node = {"type": "text", "text": value}
    if marks:
        node["marks"] = list(marks)
    return node


def para(*content):
    return {"type": "paragraph", "content": list(content)}


def doc(*content):
    return {"type": "doc", "content": list(content)}


def clause_ref(clause_id, slug=None):
    attrs = {"clauseId": clause_id}
    if slug is not None:
        attrs["slug"] = slug
    return {"type": "clauseBlock", "attrs": attrs}


def loop_table(source, *columns):
    return {
        "type": "loopTable",
        "attrs": {"dataSource": source, "columns": [{"header": h, "key": k} for h, k in columns]},
    }


# ---------------------------------------------------------------------------
# Basic kinds
# ---------------------------------------------------------------------------


class TestBasicKinds:
    def test_doc_renders_children_only(self):
        assert render_node(doc(para(text("a")), para(text("b"))), {}) == "<p>a</p><p>b</p>"

    def test_empty_paragraph(self):
        assert render_node({"type": "paragraph"}, {}) == "<p></p>"

    def test_heading_level(self):
        node = {"type": "heading", "attrs": {"level": 2}, "content": [text("T")]}
        assert render_node(node, {}) == "<h2>T</h2>"

    def test_heading_default_level(self):
        assert render_node({"type": "heading", "content": [text("T")]}, {}) == "<h1>T</h1>"

    def test_heading_level_clamped(self):
        assert render_node({"type": "heading", "attrs": {"level": 9}}, {}) == "<h6></h6>"

    def test_lists(self):
        node = {
            "type": "bulletList",
            "content": [{"type": "listItem", "content": [para(text("one"))]}],
        }
        assert render_node(node, {}) == "<ul><li><p>one</p></li></ul>"
        node["type"] = "orderedList"
        assert render_node(node, {}) == "<ol><li><p>one</p></li></ol>"

    def test_void_kinds(self):
        assert render_node({"type": "horizontalRule"}, {}) == "<hr/>"
        assert render_node(para(text("a"), {"type": "hardBreak"}, text("b")), {}) == "<p>a<br/>b</p>"

    def test_text_with_marks(self):
        node = para(text("Hi", {"type": "bold"}, {"type": "italic"}))
        assert render_node(node, {}) == "<p><strong><em>Hi</em></strong></p>"

    def test_node_without_type_renders_nothing(self):
        assert render_node({"content": [text("hidden")]}, {}) == ""

    def test_accepts_node_models(self):
        assert render_node(Node.coerce(para(text("x"))), {}) == "<p>x</p>"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestTables:
    def test_static_table(self):
        node = {
            "type": "table",
            "content": [{
                "type": "tableRow",
                "content": [
                    {"type": "tableHeader", "content": [para(text("H"))]},
                    {"type": "tableCell", "content": [para(text("C"))]},
                ],
            }],
        }
        assert render_node(node, {}) == "<table><tr><th><p>H</p></th><td><p>C</p></td></tr></table>"

    def test_spans_colspan_then_rowspan(self):
        node = {"type": "tableCell", "attrs": {"rowspan": 3, "colspan": 2}}
        assert render_node(node, {}) == '<td colspan="2" rowspan="3"></td>'

    def test_span_of_one_omitted(self):
        node = {"type": "tableHeader", "attrs": {"colspan": 1, "rowspan": 2}}
        assert render_node(node, {}) == '<th rowspan="2"></th>'


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


class TestVariables:
    def test_resolved_and_escaped(self):
        node = para(text("Hi "), {"type": "variable", "attrs": {"key": "customer.name"}})
        assert render_node(node, {"customer": {"name": "<Ann>"}}) == "<p>Hi &lt;Ann&gt;</p>"

    def test_missing_variable_blank(self):
        node = para({"type": "variable", "attrs": {"key": "a.b"}})
        assert render_node(node, {}) == "<p></p>"

    def test_variable_without_key(self):
        assert render_node({"type": "variable"}, {"a": 1}) == ""


# ---------------------------------------------------------------------------
# Loop tables
# ---------------------------------------------------------------------------


class TestLoopTable:
    def test_rows_expanded(self, sample_context):
        node = loop_table("invoice.items", ("Item", "desc"), ("Amount", "amount"))
        assert render_node(node, sample_context) == (
            "<table><thead><tr><th>Item</th><th>Amount</th></tr></thead><tbody>"
            "<tr><td>Design</td><td>1200</td></tr>"
            "<tr><td>Build &amp; test</td><td>800</td></tr>"
            "</tbody></table>"
        )

    def test_missing_source_renders_header_only(self):
        node = loop_table("invoice.items", ("Item", "desc"))
        assert render_node(node, {}) == (
            "<table><thead><tr><th>Item</th></tr></thead><tbody></tbody></table>"
        )

    def test_non_list_source_renders_header_only(self):
        node = loop_table("invoice", ("Item", "desc"))
        assert render_node(node, {"invoice": {"desc": "x"}}) == (
            "<table><thead><tr><th>Item</th></tr></thead><tbody></tbody></table>"
        )

    def test_missing_and_null_cells_blank(self):
        node = loop_table("rows", ("A", "a"), ("B", "b"))
        ctx = {"rows": [{"a": None}, "scalar"]}
        assert render_node(node, ctx) == (
            "<table><thead><tr><th>A</th><th>B</th></tr></thead><tbody>"
            "<tr><td></td><td></td></tr><tr><td></td><td></td></tr>"
            "</tbody></table>"
        )

    def test_header_escaped(self):
        node = loop_table("rows", ("<b>", "a"))
        assert "<th>&lt;b&gt;</th>" in render_node(node, {"rows": []})

    def test_no_columns(self):
        node = loop_table("rows")
        assert render_node(node, {"rows": [{"a": 1}]}) == (
            "<table><thead><tr></tr></thead><tbody><tr></tr></tbody></table>"
        )


# ---------------------------------------------------------------------------
# Clause transclusion
# ---------------------------------------------------------------------------


class TestClauses:
    def test_clause_inlined(self):
        clauses = {"c1": doc(para(text("Terms")))}
        assert render_node(clause_ref("c1", "terms"), {}, clauses) == (
            '<div class="clause-block" data-clause-slug="terms"><p>Terms</p></div>'
        )

    def test_nested_clauses(self, nested_clauses):
        assert render_node(clause_ref("c1", "outer"), {}, nested_clauses) == (
            '<div class="clause-block" data-clause-slug="outer"><p>Outer</p>'
            '<div class="clause-block" data-clause-slug="inner"><p>Inner</p></div></div>'
        )

    def test_missing_clause_comment(self):
        assert render_node(clause_ref("nope", "gone"), {}, {}) == "<!-- clause not found: gone -->"

    def test_missing_clause_id(self):
        assert render_node({"type": "clauseBlock"}, {}, {"x": doc()}) == (
            "<!-- clause not found: unknown -->"
        )

    def test_null_body_is_not_found(self):
        assert render_node(clause_ref("c1", "s"), {}, {"c1": None}) == "<!-- clause not found: s -->"

    def test_empty_body_renders_wrapper(self):
        assert render_node(clause_ref("c1", "s"), {}, {"c1": {}}) == (
            '<div class="clause-block" data-clause-slug="s"></div>'
        )

    def test_slug_escaped(self):
        assert render_node(clause_ref("x", '"><script>'), {}, {}) == (
            "<!-- clause not found: &quot;&gt;&lt;script&gt; -->"
        )

    def test_clause_sees_same_context(self):
        clauses = {"c1": para({"type": "variable", "attrs": {"key": "p.n"}})}
        assert render_node(clause_ref("c1", "s"), {"p": {"n": "N"}}, clauses) == (
            '<div class="clause-block" data-clause-slug="s"><p>N</p></div>'
        )

    def test_self_reference_terminates(self, self_referencing_clauses):
        html = render_node(clause_ref("loop", "loop"), {}, self_referencing_clauses)
        opening = '<div class="clause-block" data-clause-slug="loop">'
        assert html.count(opening) == MAX_CLAUSE_DEPTH
        assert html.count("<!-- max clause depth reached: loop -->") == 1

    def test_chain_of_ten_renders_leaf(self, chain_factory):
        clauses = chain_factory(10)
        html = render_node(clause_ref("c1", "s1"), {}, clauses)
        assert "<p>leaf</p>" in html
        assert "max clause depth" not in html
        assert html.count('class="clause-block"') == 10

    def test_chain_of_eleven_is_cut(self, chain_factory):
        clauses = chain_factory(11)
        html = render_node(clause_ref("c1", "s1"), {}, clauses)
        assert "<p>leaf</p>" not in html
        assert html.count('class="clause-block"') == 10
        assert "<!-- max clause depth reached: s11 -->" in html

    def test_depth_argument_respected(self):
        clauses = {"c1": doc(para(text("x")))}
        assert render_node(clause_ref("c1", "s"), {}, clauses, depth=MAX_CLAUSE_DEPTH) == (
            "<!-- max clause depth reached: s -->"
        )

    def test_sibling_branches_have_independent_depth(self, chain_factory):
        clauses = chain_factory(10)
        html = render_node(doc(clause_ref("c1", "a"), clause_ref("c1", "b")), {}, clauses)
        assert html.count("<p>leaf</p>") == 2
        assert "max clause depth" not in html

    def test_custom_depth_limit(self, nested_clauses):
        renderer = NodeRenderer(max_clause_depth=1)
        html = renderer.render(clause_ref("c1", "outer"), {}, nested_clauses)
        assert html.endswith("<!-- max clause depth reached: inner --></div>")

    def test_registry_not_mutated(self, nested_clauses):
        before = repr(nested_clauses)
        render_node(clause_ref("c1"), {}, nested_clauses)
        assert repr(nested_clauses) == before

    @pytest.mark.parametrize("body", [["not", "a", "node"], "text", 42])
    def test_uncoercible_body_is_not_found(self, body):
        assert render_node(clause_ref("c1", "s"), {}, {"c1": body}) == "<!-- clause not found: s -->"

    def test_malformed_body_fields_degrade(self):
        clauses = {"c1": {"type": "paragraph", "attrs": ["x"], "content": [text("ok")]}}
        assert render_node(clause_ref("c1", "s"), {}, clauses) == (
            '<div class="clause-block" data-clause-slug="s"><p>ok</p></div>'
        )


# ---------------------------------------------------------------------------
# Unknown kinds, legacy HTML and diagnostics
# ---------------------------------------------------------------------------


class TestFallbacks:
    def test_unknown_kind_renders_children(self):
        node = {"type": "callout", "content": [para(text("inside"))]}
        assert render_node(node, {}) == "<p>inside</p>"

    def test_unknown_leaf_renders_nothing(self):
        assert render_node({"type": "image", "attrs": {"src": "x.png"}}, {}) == ""

    def test_legacy_html_sanitized(self):
        node = {"type": "legacyHtml", "attrs": {"html": "<p onclick=\"x()\">Hi<script>bad()</script></p>"}}
        assert render_node(node, {}) == "<p>Hi</p>"

    def test_legacy_html_missing(self):
        assert render_node({"type": "legacyHtml"}, {}) == ""

    def test_list_attrs_treated_as_empty(self):
        assert render_node({"type": "paragraph", "attrs": [], "content": [text("a")]}, {}) == "<p>a</p>"

    def test_non_node_root_renders_nothing(self):
        assert render_node(["doc"], {}) == ""
        assert render_node(None, {}) == ""

    def test_non_mapping_children_skipped(self):
        node = {"type": "paragraph", "content": [text("a"), "b", 3, None, text("c")]}
        assert render_node(node, {}) == "<p>ac</p>"


# ---------------------------------------------------------------------------
# Deep trees
# ---------------------------------------------------------------------------


class TestDeepTrees:
    @staticmethod
    def nested(kind, levels, leaf):
        root = {"type": kind, "content": []}
        cursor = root
        for _ in range(levels - 1):
            child = {"type": kind, "content": []}
            cursor["content"].append(child)
            cursor = child
        cursor["content"].append(leaf)
        return root

    @pytest.mark.parametrize("levels", [500, 2000])
    def test_nested_paragraphs(self, levels):
        tree = self.nested("paragraph", levels, text("x"))
        assert render_node(tree, {}) == "<p>" * levels + "x" + "</p>" * levels

    def test_nested_unknown_kinds(self):
        tree = self.nested("mystery", 500, text("x"))
        assert render_node(tree, {}) == "x"

    def test_deep_clause_body(self):
        clauses = {"c1": self.nested("bulletList", 600, text("x"))}
        html = render_node(clause_ref("c1", "s"), {}, clauses)
        assert html.startswith('<div class="clause-block" data-clause-slug="s"><ul>')
        assert html.count("<ul>") == 600
        assert html.endswith("</ul></div>")


class TestDiagnostics:
    def _renderer(self, enabled):
        buffer = io.StringIO()
        console = Console(file=buffer, force_terminal=False, width=200)
        return NodeRenderer(report_diagnostics=enabled, console=console), buffer

    def test_silent_by_default(self):
        renderer, buffer = self._renderer(False)
        renderer.render(doc({"type": "callout"}, clause_ref("x", "s")), {}, {})
        assert buffer.getvalue() == ""

    def test_reports_when_enabled(self):
        renderer, buffer = self._renderer(True)
        renderer.render(doc({"type": "callout"}, clause_ref("x", "s")), {}, {})
        output = buffer.getvalue()
        assert "unknown node kind 'callout'" in output
        assert "clause 's' (x) not found" in output

    def test_output_identical_either_way(self, nested_clauses):
        quiet, _ = self._renderer(False)
        loud, _ = self._renderer(True)
        tree = doc({"type": "callout", "content": [clause_ref("c1", "o")]}, clause_ref("zz"))
        assert quiet.render(tree, {}, nested_clauses) == loud.render(tree, {}, nested_clauses)
