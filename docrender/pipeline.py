"""docrender render pipeline.

Ties the pieces together the way a document-generation caller does:

1. Collect the clause ids the template (and the supplied clause bodies)
   reference, and report any the registry cannot satisfy.
2. Render the document against the context and clause registry.
3. Check the template's required context fields.

Usage::

    python -m docrender template.json --entity-type invoice --entity invoice.json \\
        --clauses clauses.json --require invoice.number -o out/invoice.html
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, computed_field
from rich.panel import Panel

from docrender.config import RenderConfig
from docrender.context import (
    RequiredField,
    ValidationResult,
    build_preview_context,
    validate_required_fields,
)
from docrender.renderer import (
    Node,
    extract_clause_ids,
    extract_variable_keys,
    render_document,
)
from docrender.renderer.nodes import ClauseRegistry, NodeLike
from docrender.renderer.paths import MISSING, lookup_path
from docrender.utils import (
    DocumentLoadError,
    console,
    load_data,
    load_mapping,
    load_text,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    save_text,
)


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class RenderResult(BaseModel):
    """Everything a caller needs after rendering one document."""

    html: str = Field(..., description="Complete <!DOCTYPE html> document")
    clause_ids: list[str] = Field(
        default_factory=list, description="Clause ids referenced by the template, in document order",
    )
    missing_clause_ids: list[str] = Field(
        default_factory=list, description="Referenced clause ids absent from the registry",
    )
    variable_keys: list[str] = Field(default_factory=list)
    unresolved_variables: list[str] = Field(
        default_factory=list, description="Variable keys that rendered as blanks",
    )
    validation: ValidationResult = Field(default_factory=ValidationResult)

    @computed_field  # type: ignore[misc]
    @property
    def complete(self) -> bool:
        """True when no clause is missing and every required field is present."""
        return not self.missing_clause_ids and self.validation.all_present


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def load_clause_registry(data: Any) -> dict[str, Any]:
    """Normalise clause input into ``{clause_id: body}``.

    Accepts either a mapping of id to body, or a list of ``{"id", "body"}``
    records (the shape clause listings are exported in).

    Raises:
        ValueError: If *data* is neither shape or a record lacks id/body.
    """
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return {str(k): v for k, v in data.items()}
    if isinstance(data, list):
        registry: dict[str, Any] = {}
        for index, record in enumerate(data):
            if not isinstance(record, Mapping) or "id" not in record or "body" not in record:
                raise ValueError(f"Clause record #{index} must have 'id' and 'body'")
            registry[str(record["id"])] = record["body"]
        return registry
    raise ValueError(f"Clauses must be an object or a list, got {type(data).__name__}")


# ---------------------------------------------------------------------------
# RenderPipeline
# ---------------------------------------------------------------------------


class RenderPipeline:
    """Renders one document and reports what it referenced.

    Attributes:
        config: Pipeline configuration.
    """

    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        self.config = config or RenderConfig()
        self._renderer = self.config.make_renderer()
        self._assembler = self.config.make_assembler()

    def run(
        self,
        document: NodeLike,
        context: Mapping[str, Any],
        clauses: Optional[ClauseRegistry] = None,
        custom_css: Optional[str] = None,
        required_fields: Iterable[Union[RequiredField, Mapping[str, Any], str]] = (),
    ) -> RenderResult:
        """Render *document* and collect clause, variable and field reports."""
        doc = Node.coerce(document)
        registry = clauses or {}

        clause_ids = extract_clause_ids(doc)
        if self.config.dedupe_clause_ids:
            clause_ids = list(dict.fromkeys(clause_ids))
        missing = [
            cid for cid in self._referenced_clause_ids(doc, registry)
            if Node.try_coerce(registry.get(cid)) is None
        ]

        variable_keys = extract_variable_keys(doc)
        unresolved = [key for key in variable_keys if lookup_path(key, context) is MISSING]

        html = render_document(
            doc,
            context,
            registry,
            custom_css,
            renderer=self._renderer,
            assembler=self._assembler,
        )
        return RenderResult(
            html=html,
            clause_ids=clause_ids,
            missing_clause_ids=missing,
            variable_keys=variable_keys,
            unresolved_variables=unresolved,
            validation=validate_required_fields(context, required_fields),
        )

    def _referenced_clause_ids(self, doc: Node, registry: ClauseRegistry) -> list[str]:
        """Distinct clause ids reachable from *doc*, following supplied bodies."""
        seen: dict[str, None] = {}
        pending = extract_clause_ids(doc)
        while pending:
            clause_id = pending.pop(0)
            if clause_id in seen:
                continue
            seen[clause_id] = None
            pending.extend(extract_clause_ids(registry.get(clause_id)))
        return list(seen)


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def print_result(result: RenderResult, output_path: Optional[Path] = None) -> None:
    """Pretty-print a render result summary."""
    summary: dict[str, Any] = {
        "Clauses referenced": ", ".join(result.clause_ids) or "-",
        "Variables": len(result.variable_keys),
        "Required fields": f"{sum(c.present for c in result.validation.fields)}"
                           f"/{len(result.validation.fields)} present",
        "HTML size": f"{len(result.html)} chars",
    }
    if output_path is not None:
        summary["Output"] = str(output_path)
    print_summary_table(summary, title="Render Summary")

    if result.missing_clause_ids:
        print_warning(f"Missing clauses: {', '.join(result.missing_clause_ids)}")
    if result.unresolved_variables:
        print_warning(f"Blank variables: {', '.join(result.unresolved_variables)}")
    if result.validation.missing:
        print_error(f"Missing required fields: {', '.join(result.validation.missing)}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_context(args: Any) -> dict[str, Any]:
    context: dict[str, Any] = load_mapping(args.context) if args.context else {}
    if args.entity_type:
        entity = load_mapping(args.entity) if args.entity else {}
        context.update(build_preview_context(args.entity_type, entity))
    return context


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``docrender`` / ``python -m docrender``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="docrender",
        description="Render a structured document template to a self-contained HTML file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  docrender letter.json --context context.json\n"
            "  docrender invoice.json --entity-type invoice --entity inv.yaml --clauses clauses.json\n"
            "  docrender letter.json --context ctx.json --require project.name -o out/letter.html\n"
        ),
    )

    parser.add_argument("document", help="Path to the document node tree (JSON or YAML)")
    parser.add_argument("--context", "-c", default=None, help="Context file (JSON or YAML object)")
    parser.add_argument(
        "--entity-type", default=None,
        help="Build the context from an entity: project, customer or invoice",
    )
    parser.add_argument("--entity", default=None, help="Entity data file used with --entity-type")
    parser.add_argument(
        "--clauses", default=None,
        help="Clause bodies: an object {id: body} or a list of {id, body} records",
    )
    parser.add_argument("--css", default=None, help="Custom CSS file appended to the default styles")
    parser.add_argument(
        "--require", action="append", default=[], metavar="ENTITY.FIELD",
        help="Required context field (repeatable)",
    )
    parser.add_argument("--max-depth", type=int, default=None, help="Override the clause depth limit")
    parser.add_argument("--diagnostics", action="store_true", help="Report silent render degradations")
    parser.add_argument(
        "--output", "-o", default=None,
        help="Output HTML file (default: <output_dir>/<document name>.html)",
    )

    args = parser.parse_args(argv)
    doc_path = Path(args.document)

    try:
        config = RenderConfig.from_env()
        if args.max_depth is not None:
            if args.max_depth < 1:
                raise ValueError(f"--max-depth must be at least 1, got {args.max_depth}")
            config.max_clause_depth = args.max_depth
        if args.diagnostics:
            config.report_diagnostics = True
        output_path = Path(args.output) if args.output else config.output_dir / f"{doc_path.stem}.html"

        document = load_data(doc_path)
        context = _build_context(args)
        clauses = load_clause_registry(load_data(args.clauses)) if args.clauses else {}
        custom_css = load_text(args.css) if args.css else None
        required = [RequiredField.parse(spec) for spec in args.require]
        if not isinstance(document, Mapping):
            raise DocumentLoadError(doc_path, "expected a node object at the top level")
        result = RenderPipeline(config).run(document, context, clauses, custom_css, required)
        written = save_text(result.html, output_path)
    except (DocumentLoadError, ValidationError, ValueError, OSError) as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    console.print(Panel(f"[bold]{doc_path.name}[/bold] rendered", title="docrender", border_style="green"))
    print_result(result, written)

    if not result.validation.all_present:
        print_error("Render finished with missing required fields.")
        sys.exit(1)
    print_success("Render completed successfully!")


if __name__ == "__main__":
    main()
