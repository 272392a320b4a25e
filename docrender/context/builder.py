"""Preview context construction.

Shapes raw entity data into the nested context the renderer resolves
variables against, matching what server-side document generation builds, so
a template previews with the same ``project.*``, ``customer.*`` and
``invoice.*`` paths it will be generated with.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Union


class EntityType(str, Enum):
    """Business entities a template can be rendered for."""
    PROJECT = "PROJECT"
    CUSTOMER = "CUSTOMER"
    INVOICE = "INVOICE"

    @classmethod
    def parse(cls, value: Union[EntityType, str]) -> EntityType:
        """Accept an ``EntityType`` or its name in any case.

        Raises:
            ValueError: If *value* names no known entity type.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown entity type {value!r} (expected one of: {valid})") from None


def build_preview_context(
    entity_type: Union[EntityType, str],
    entity_data: Mapping[str, Any],
) -> dict[str, Any]:
    """Build the rendering context for one entity.

    The entity's fields are placed under a key named after its type.
    Invoices additionally get a ``customer`` sub-context synthesised from
    their denormalised ``customerName`` / ``customerEmail`` fields, so
    ``customer.name`` works the same whichever entity triggered the render.
    """
    kind = EntityType.parse(entity_type)
    data = dict(entity_data)
    if kind is EntityType.PROJECT:
        return {"project": data}
    if kind is EntityType.CUSTOMER:
        return {"customer": data}
    return {
        "invoice": data,
        "customer": {
            "name": data.get("customerName"),
            "email": data.get("customerEmail"),
        },
    }
