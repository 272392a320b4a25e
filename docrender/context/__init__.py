"""Rendering context: construction from entity data and required-field checks.

Usage::

    from docrender.context import build_preview_context, validate_required_fields

    context = build_preview_context("INVOICE", invoice_data)
    result = validate_required_fields(context, ["invoice.number", "customer.email"])
    if not result.all_present:
        print(result.missing)
"""

from docrender.context.builder import EntityType, build_preview_context
from docrender.context.validation import (
    FieldCheck,
    RequiredField,
    ValidationResult,
    validate_required_fields,
)

__all__ = [
    "EntityType",
    "FieldCheck",
    "RequiredField",
    "ValidationResult",
    "build_preview_context",
    "validate_required_fields",
]
