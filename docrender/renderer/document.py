"""Full-document assembly.

Wraps a rendered body fragment in a complete HTML document: doctype, the
shared default stylesheet, the caller's custom CSS and the body.  The shell
lives in ``templates/document.html.j2`` and the stylesheet in
``templates/document-default.css``; both are part of the output contract, so
edit them only together with every other renderer of the same documents.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docrender.renderer.nodes import ClauseRegistry, NodeLike, NodeRenderer, render_node

_TEMPLATE_DIR = Path(__file__).parent / "templates"
DOCUMENT_TEMPLATE = "document.html.j2"
DEFAULT_CSS_PATH = _TEMPLATE_DIR / "document-default.css"

_STYLE_CLOSE = re.compile(r"</style>", re.IGNORECASE)


def load_default_css(path: Optional[Path] = None) -> str:
    """Read the default stylesheet (the shared one unless *path* is given)."""
    return Path(path or DEFAULT_CSS_PATH).read_text(encoding="utf-8")


def sanitize_css(css: Optional[str]) -> str:
    """Strip every ``</style>`` (any case) from caller-supplied CSS.

    Removal repeats until none is left, so fragments such as
    ``</sty</style>le>`` cannot reassemble into a closing tag.
    """
    if not css:
        return ""
    previous = None
    while previous != css:
        previous = css
        css = _STYLE_CLOSE.sub("", css)
    return css


class DocumentAssembler:
    """Builds complete HTML documents around rendered body fragments.

    Args:
        default_css: Stylesheet emitted before the custom CSS.  Defaults to
            the shared ``document-default.css``.
        template_dir: Directory holding ``document.html.j2``.
    """

    def __init__(
        self,
        default_css: Optional[str] = None,
        template_dir: str | Path | None = None,
    ) -> None:
        self.default_css = load_default_css() if default_css is None else default_css
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or _TEMPLATE_DIR)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def assemble(self, body_html: str, custom_css: Optional[str] = None) -> str:
        """Return the full document for *body_html*.

        The body is inserted verbatim (it is already escaped by the node
        renderer); *custom_css* goes through :func:`sanitize_css` first.
        """
        template = self.env.get_template(DOCUMENT_TEMPLATE)
        return template.render(
            default_css=self.default_css,
            custom_css=sanitize_css(custom_css),
            body=body_html,
        )


def render_document(
    document: NodeLike,
    context: Mapping[str, Any],
    clauses: Optional[ClauseRegistry] = None,
    custom_css: Optional[str] = None,
    *,
    renderer: Optional[NodeRenderer] = None,
    assembler: Optional[DocumentAssembler] = None,
) -> str:
    """Render a document tree to a complete ``<!DOCTYPE html>`` string.

    This is the one-call entry point used by previews and by document
    generation: it renders from clause depth 0 and assembles the result.
    """
    if renderer is None:
        body = render_node(document, context, clauses or {}, 0)
    else:
        body = renderer.render(document, context, clauses or {}, 0)
    return (assembler or _DEFAULT_ASSEMBLER).assemble(body, custom_css)


_DEFAULT_ASSEMBLER = DocumentAssembler()
