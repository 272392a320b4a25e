"""Shared pytest fixtures for the docrender test suite.

Provides reusable fixtures for:
- Small node-tree builders
- A sample business context
- Clause registries (flat, nested, self-referencing, deep chains)
- On-disk input files for the pipeline and CLI
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from docrender.renderer.document import DEFAULT_CSS_PATH


# ---------------------------------------------------------------------------
# Node builders
# ---------------------------------------------------------------------------


def text(value: str, *marks: dict[str, Any]) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": value}
    if marks:
        node["marks"] = list(marks)
    return node


def para(*content: dict[str, Any]) -> dict[str, Any]:
    return {"type": "paragraph", "content": list(content)}


def doc(*content: dict[str, Any]) -> dict[str, Any]:
    return {"type": "doc", "content": list(content)}


def var(key: Any) -> dict[str, Any]:
    return {"type": "variable", "attrs": {"key": key}}


def clause_ref(clause_id: Any, slug: Any = None) -> dict[str, Any]:
    attrs: dict[str, Any] = {"clauseId": clause_id}
    if slug is not None:
        attrs["slug"] = slug
    return {"type": "clauseBlock", "attrs": attrs}


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_context() -> dict[str, Any]:
    """Context shaped like a generated invoice."""
    return {
        "project": {"name": "Acme Tower", "budget": 1500000, "active": True},
        "customer": {"name": "Jane <Doe>", "email": "jane@example.com"},
        "invoice": {
            "number": "INV-001",
            "total": 99.5,
            "items": [
                {"desc": "Design", "amount": 1200},
                {"desc": "Build & test", "amount": 800.0},
            ],
        },
    }


# ---------------------------------------------------------------------------
# Clause registries
# ---------------------------------------------------------------------------


@pytest.fixture
def nested_clauses() -> dict[str, Any]:
    """Clause c1 embeds clause c2."""
    return {
        "c1": doc(para(text("Outer")), clause_ref("c2", "inner")),
        "c2": doc(para(text("Inner"))),
    }


@pytest.fixture
def self_referencing_clauses() -> dict[str, Any]:
    """Clause loop embeds itself."""
    return {"loop": doc(clause_ref("loop", "loop"))}


def make_chain(length: int) -> dict[str, Any]:
    """Clauses c1..c<length>, each embedding the next; the last is plain text."""
    registry: dict[str, Any] = {}
    for i in range(1, length):
        registry[f"c{i}"] = doc(clause_ref(f"c{i + 1}", f"s{i + 1}"))
    registry[f"c{length}"] = doc(para(text("leaf")))
    return registry


@pytest.fixture
def chain_factory():
    """Factory for linear clause chains of a given length."""
    return make_chain


# ---------------------------------------------------------------------------
# Output contract helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def default_css() -> str:
    return DEFAULT_CSS_PATH.read_text(encoding="utf-8")


@pytest.fixture
def expected_document(default_css: str):
    """Build the exact document string expected for a body and custom CSS."""

    def _build(body: str, custom_css: str = "") -> str:
        return (
            "<!DOCTYPE html>\n<html><head>\n<meta charset=\"UTF-8\"/>\n"
            f"<style>{default_css}\n{custom_css}</style>\n"
            f"</head><body>\n{body}\n</body></html>"
        )

    return _build


# ---------------------------------------------------------------------------
# On-disk inputs
# ---------------------------------------------------------------------------


@pytest.fixture
def input_files(tmp_path: Path, sample_context: dict[str, Any]) -> dict[str, Path]:
    """Template, context, clauses and CSS files for pipeline / CLI tests."""
    template = doc(
        para(text("Project: "), var("project.name")),
        clause_ref("c1", "terms"),
    )
    files = {
        "document": tmp_path / "letter.json",
        "context": tmp_path / "context.json",
        "clauses": tmp_path / "clauses.json",
        "css": tmp_path / "custom.css",
    }
    files["document"].write_text(json.dumps(template), encoding="utf-8")
    files["context"].write_text(json.dumps(sample_context), encoding="utf-8")
    files["clauses"].write_text(
        json.dumps([{"id": "c1", "body": doc(para(text("Terms apply.")))}]),
        encoding="utf-8",
    )
    files["css"].write_text("p { margin: 0; }", encoding="utf-8")
    return files
