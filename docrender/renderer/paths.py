"""Dot-path lookups against the nested rendering context.

Documents are routinely rendered against partial business data, so every
lookup degrades to a blank value instead of raising.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from docrender.renderer.escaping import escape_html, stringify


# Returned by lookup_path when a path does not resolve.
MISSING: Any = object()


def lookup_path(path: Any, context: Mapping[str, Any]) -> Any:
    """Walk *path* segment by segment through nested mappings.

    Returns the raw value, or :data:`MISSING` when the path is blank, an
    intermediate value is not a mapping, or any step is absent or ``None``.
    """
    if not isinstance(path, str) or not path.strip():
        return MISSING
    current: Any = context
    for segment in path.split("."):
        if not isinstance(current, Mapping):
            return MISSING
        current = current.get(segment)
        if current is None:
            return MISSING
    return current


def resolve_variable(path: Any, context: Mapping[str, Any]) -> str:
    """Resolve a scalar variable to escaped display text (``""`` if missing)."""
    value = lookup_path(path, context)
    if value is MISSING:
        return ""
    return escape_html(stringify(value))


def resolve_data_source(path: Any, context: Mapping[str, Any]) -> Optional[list[Any]]:
    """Resolve a table data source.

    Returns the list found at *path*, or ``None`` when the path is missing or
    holds anything other than a list.  An empty list is a valid, zero-row
    result and is returned as-is.
    """
    value = lookup_path(path, context)
    if isinstance(value, list):
        return value
    return None
