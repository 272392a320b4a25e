"""docrender configuration.

Typed settings for the renderer and the command-line pipeline.  Pydantic v2
validates values at construction time and handles the JSON round-trip; the
defaults reproduce the output every other renderer of the same documents
produces, so override them only for local experiments.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from docrender.renderer.document import DocumentAssembler, load_default_css
from docrender.renderer.nodes import MAX_CLAUSE_DEPTH, NodeRenderer

_TRUE_VALUES = {"1", "true", "yes", "on"}


class RenderConfig(BaseModel):
    """Settings for a render pipeline run."""

    max_clause_depth: int = Field(
        default=MAX_CLAUSE_DEPTH, ge=1,
        description="Nested clause expansions allowed before a branch is cut off",
    )
    default_css_path: Optional[Path] = Field(
        default=None,
        description="Replacement for the shared default stylesheet (None = shared one)",
    )
    report_diagnostics: bool = Field(
        default=False,
        description="Print silent render degradations (missing clauses, unknown kinds) to the console",
    )
    dedupe_clause_ids: bool = Field(
        default=True, description="Report each referenced clause id only once",
    )
    output_dir: Path = Field(default=Path("./output"))

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def make_renderer(self) -> NodeRenderer:
        """Build a :class:`NodeRenderer` with these settings."""
        return NodeRenderer(
            max_clause_depth=self.max_clause_depth,
            report_diagnostics=self.report_diagnostics,
        )

    def make_assembler(self) -> DocumentAssembler:
        """Build a :class:`DocumentAssembler` with these settings."""
        return DocumentAssembler(default_css=load_default_css(self.default_css_path))

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<output_dir>/docrender.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.output_dir / "docrender.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "RenderConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "RenderConfig":
        """Build a ``RenderConfig`` from environment variables.

        Recognised variables (all optional):
            DOCRENDER_MAX_CLAUSE_DEPTH, DOCRENDER_DEFAULT_CSS,
            DOCRENDER_REPORT_DIAGNOSTICS, DOCRENDER_OUTPUT_DIR.

        Raises:
            ValueError: If DOCRENDER_MAX_CLAUSE_DEPTH is not an integer.
            pydantic.ValidationError: If a value fails validation.
        """
        kwargs: dict[str, Any] = {}
        raw_depth = os.environ.get("DOCRENDER_MAX_CLAUSE_DEPTH")
        if raw_depth:
            try:
                kwargs["max_clause_depth"] = int(raw_depth)
            except ValueError:
                raise ValueError(
                    f"DOCRENDER_MAX_CLAUSE_DEPTH must be an integer, got {raw_depth!r}"
                ) from None
        if os.environ.get("DOCRENDER_DEFAULT_CSS"):
            kwargs["default_css_path"] = Path(os.environ["DOCRENDER_DEFAULT_CSS"])
        if os.environ.get("DOCRENDER_REPORT_DIAGNOSTICS"):
            kwargs["report_diagnostics"] = (
                os.environ["DOCRENDER_REPORT_DIAGNOSTICS"].strip().lower() in _TRUE_VALUES
            )
        if os.environ.get("DOCRENDER_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["DOCRENDER_OUTPUT_DIR"])
        return cls(**kwargs)
