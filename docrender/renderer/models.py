"""Pydantic v2 models for the structured-document node tree.

The authoring surface stores documents as JSON trees.  ``Node`` and ``Mark``
are the generic, lenient shape accepted at the deserialization boundary; the
``*Attrs`` models are typed per-kind views built from a node's raw ``attrs``
map so the renderer never reads loosely-typed keys directly.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Node kinds understood by the renderer."""
    DOC = "doc"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    TEXT = "text"
    VARIABLE = "variable"
    CLAUSE_BLOCK = "clauseBlock"
    LOOP_TABLE = "loopTable"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_CELL = "tableCell"
    TABLE_HEADER = "tableHeader"
    HORIZONTAL_RULE = "horizontalRule"
    HARD_BREAK = "hardBreak"
    LEGACY_HTML = "legacyHtml"


class MarkKind(str, Enum):
    """Inline formatting marks understood by the mark composer."""
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    LINK = "link"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _as_int(value: Any, default: int) -> int:
    """Return *value* as an int when it is a real number, else *default*."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return int(value)


def _as_optional_str(value: Any) -> Optional[str]:
    """Stringify a present, non-empty value; ``None`` for absent or empty."""
    if value is None or value == "":
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Tree models
# ---------------------------------------------------------------------------

def _as_attrs(value: Any) -> dict[str, Any]:
    """Raw ``attrs`` as a string-keyed dict; anything but a mapping is empty."""
    if not isinstance(value, Mapping):
        return {}
    return {str(k): v for k, v in value.items()}


def _as_str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class Mark(BaseModel):
    """An inline formatting instruction attached to a text node."""

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = Field(default=None, description="Mark kind, e.g. 'bold' or 'link'")
    attrs: dict[str, Any] = Field(default_factory=dict, description="Kind-specific attributes")

    @field_validator("type", mode="before")
    @classmethod
    def non_string_type_to_none(cls, value: Any) -> Optional[str]:
        return _as_str_or_none(value)

    @field_validator("attrs", mode="before")
    @classmethod
    def non_mapping_attrs_to_empty(cls, value: Any) -> dict[str, Any]:
        return _as_attrs(value)


class Node(BaseModel):
    """One element of the structured document tree.

    Only this node's own fields are validated.  ``content`` keeps the raw
    child mappings and :attr:`children` coerces them one level at a time, so
    arbitrarily deep trees never go through one recursive validation pass.
    Every mapping is accepted: malformed fields degrade to their empty value.
    """

    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = Field(default=None, description="Node kind discriminator")
    content: Optional[list[Any]] = Field(
        default=None, description="Ordered child nodes (raw mappings or Node instances)",
    )
    text: Optional[str] = Field(default=None, description="Literal text (text nodes only)")
    attrs: dict[str, Any] = Field(default_factory=dict, description="Kind-specific attributes")
    marks: Optional[list[Mark]] = Field(default=None, description="Inline marks (text nodes only)")

    @field_validator("type", "text", mode="before")
    @classmethod
    def non_string_to_none(cls, value: Any) -> Optional[str]:
        return _as_str_or_none(value)

    @field_validator("attrs", mode="before")
    @classmethod
    def non_mapping_attrs_to_empty(cls, value: Any) -> dict[str, Any]:
        return _as_attrs(value)

    @field_validator("content", mode="before")
    @classmethod
    def keep_node_children(cls, value: Any) -> Optional[list[Any]]:
        if not isinstance(value, list):
            return None
        return [child for child in value if isinstance(child, (Node, Mapping))]

    @field_validator("marks", mode="before")
    @classmethod
    def keep_mapping_marks(cls, value: Any) -> Optional[list[Any]]:
        if not isinstance(value, list):
            return None
        return [mark for mark in value if isinstance(mark, (Mark, Mapping))]

    @classmethod
    def coerce(cls, value: Union[Node, Mapping[str, Any]]) -> Node:
        """Accept an already-built ``Node`` or a raw JSON mapping.

        Raises:
            TypeError: If *value* is neither.
        """
        if isinstance(value, Node):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Expected a node mapping, got {type(value).__name__}")
        return cls.model_validate(dict(value))

    @classmethod
    def try_coerce(cls, value: Any) -> Optional[Node]:
        """Like :meth:`coerce`, but ``None`` for anything that is not a node."""
        if isinstance(value, (Node, Mapping)):
            return cls.coerce(value)
        return None

    @property
    def children(self) -> list[Node]:
        return [Node.coerce(child) for child in self.content or []]


# ---------------------------------------------------------------------------
# Typed attribute views
# ---------------------------------------------------------------------------

class HeadingAttrs(BaseModel):
    """Attributes of a ``heading`` node; ``level`` is always within 1-6."""
    level: int = Field(default=1, ge=1, le=6)

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> HeadingAttrs:
        raw = attrs.get("level")
        level = _as_int(raw if raw is not None else 1, 1)
        return cls(level=max(1, min(6, level)))


class VariableAttrs(BaseModel):
    """Attributes of a ``variable`` node."""
    key: Optional[str] = Field(default=None, description="Dot-separated context path")

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> VariableAttrs:
        key = attrs.get("key")
        return cls(key=key if isinstance(key, str) else None)


class ClauseBlockAttrs(BaseModel):
    """Attributes of a ``clauseBlock`` reference."""
    clause_id: Optional[str] = Field(default=None, description="Registry key of the clause body")
    slug: str = Field(default="unknown", description="Display slug used for diagnostics and styling")

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> ClauseBlockAttrs:
        slug = attrs.get("slug")
        return cls(
            clause_id=_as_optional_str(attrs.get("clauseId")),
            slug="unknown" if slug is None else str(slug),
        )


class LoopTableColumn(BaseModel):
    """One column of a data-driven table."""
    header: str = Field(default="", description="Column header label")
    key: Optional[str] = Field(default=None, description="Key read from each row record")

    @classmethod
    def from_raw(cls, raw: Any) -> LoopTableColumn:
        if not isinstance(raw, Mapping):
            return cls()
        header = raw.get("header")
        return cls(
            header="" if header is None else str(header),
            key=_as_optional_str(raw.get("key")),
        )


class LoopTableAttrs(BaseModel):
    """Attributes of a ``loopTable`` node."""
    data_source: Optional[str] = Field(default=None, description="Context path of the row list")
    columns: list[LoopTableColumn] = Field(default_factory=list)

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> LoopTableAttrs:
        source = attrs.get("dataSource")
        columns = attrs.get("columns")
        if not isinstance(columns, list):
            columns = []
        return cls(
            data_source=source if isinstance(source, str) else None,
            columns=[LoopTableColumn.from_raw(c) for c in columns],
        )


class TableCellAttrs(BaseModel):
    """Span attributes of ``tableCell`` / ``tableHeader`` nodes."""
    colspan: int = Field(default=1)
    rowspan: int = Field(default=1)

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> TableCellAttrs:
        return cls(
            colspan=_as_int(attrs.get("colspan"), 1),
            rowspan=_as_int(attrs.get("rowspan"), 1),
        )


class LinkAttrs(BaseModel):
    """Attributes of a ``link`` mark."""
    href: str = Field(default="")

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> LinkAttrs:
        href = attrs.get("href")
        return cls(href="" if href is None else str(href))


class LegacyHtmlAttrs(BaseModel):
    """Attributes of a ``legacyHtml`` node carrying pre-migration markup."""
    html: str = Field(default="")

    @classmethod
    def from_attrs(cls, attrs: Mapping[str, Any]) -> LegacyHtmlAttrs:
        html = attrs.get("html")
        return cls(html=html if isinstance(html, str) else "")


