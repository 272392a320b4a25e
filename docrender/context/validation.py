"""Required-field checks for templates.

A template can declare the context fields it cannot be generated without.
Previews show the result so authors can fill the gaps before generating.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from pydantic import BaseModel, Field, computed_field

from docrender.renderer.paths import MISSING, lookup_path


class RequiredField(BaseModel):
    """A context field a template declares as mandatory."""
    entity: str = Field(..., description="Top-level context key, e.g. 'project'")
    field: str = Field(..., description="Field path below the entity, e.g. 'name'")

    @property
    def path(self) -> str:
        return f"{self.entity}.{self.field}"

    @classmethod
    def parse(cls, spec: str) -> RequiredField:
        """Parse ``"entity.field"`` (the field part may itself be dotted).

        Raises:
            ValueError: If *spec* has no entity or no field part.
        """
        entity, _, field = spec.strip().partition(".")
        if not entity or not field:
            raise ValueError(f"Required field must look like 'entity.field', got {spec!r}")
        return cls(entity=entity, field=field)


class FieldCheck(BaseModel):
    """Outcome for one required field."""
    entity: str
    field: str
    present: bool


class ValidationResult(BaseModel):
    """Outcome of checking all required fields of a template."""
    fields: list[FieldCheck] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def all_present(self) -> bool:
        """True when every required field resolved to a value."""
        return all(check.present for check in self.fields)

    @property
    def missing(self) -> list[str]:
        return [f"{c.entity}.{c.field}" for c in self.fields if not c.present]


def is_present(value: Any) -> bool:
    """A value counts as present unless it is missing, ``None`` or blank text."""
    if value is MISSING or value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def validate_required_fields(
    context: Mapping[str, Any],
    required: Iterable[Union[RequiredField, Mapping[str, Any], str]],
) -> ValidationResult:
    """Check *required* fields against *context*, in declaration order.

    Each requirement may be a :class:`RequiredField`, a ``{"entity", "field"}``
    mapping or an ``"entity.field"`` string.
    """
    checks: list[FieldCheck] = []
    for item in required:
        if isinstance(item, str):
            item = RequiredField.parse(item)
        elif not isinstance(item, RequiredField):
            item = RequiredField.model_validate(item)
        checks.append(
            FieldCheck(
                entity=item.entity,
                field=item.field,
                present=is_present(lookup_path(item.path, context)),
            )
        )
    return ValidationResult(fields=checks)
