"""docrender: renders structured document templates to self-contained HTML."""

from docrender.pipeline import RenderPipeline, RenderResult
from docrender.renderer import render_document, render_node

__version__ = "0.1.0"

__all__ = [
    "RenderPipeline",
    "RenderResult",
    "__version__",
    "render_document",
    "render_node",
]
