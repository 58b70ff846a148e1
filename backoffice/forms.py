"""Client-side validation of record forms."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from backoffice.data import FieldSpec, ResourceSpec
from backoffice.slots import SlotAllocator, describe_slot_error, parse_slot


def blank_values(spec: ResourceSpec) -> dict[str, Any]:
    """Return the initial values of an add form."""
    values: dict[str, Any] = {}
    for field_spec in spec.fields:
        if field_spec.kind == "slot":
            values[field_spec.name] = None
        elif field_spec.kind == "choice" and field_spec.choices:
            values[field_spec.name] = field_spec.choices[0]
        else:
            values[field_spec.name] = ""
    return values


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _validate_field(field_spec: FieldSpec, value: Any, creating: bool) -> str | None:
    required = field_spec.required or (creating and field_spec.required_on_create)
    if _is_blank(value):
        return field_spec.required_message if required else None

    if field_spec.kind == "file":
        if not Path(str(value).strip()).expanduser().is_file():
            return f"File not found: {str(value).strip()}"
        return None
    if field_spec.kind == "choice" and field_spec.choices and value not in field_spec.choices:
        return f"{field_spec.label} must be one of: {', '.join(field_spec.choices)}"
    if field_spec.pattern is not None and not field_spec.pattern.match(str(value)):
        return field_spec.pattern_message
    return None


def validate_record(
    spec: ResourceSpec,
    values: dict[str, Any],
    *,
    creating: bool,
    allocator: SlotAllocator | None = None,
    record_id: str | None = None,
) -> dict[str, str]:
    """Validate a form before it is submitted.

    Args:
        spec: The resource being edited.
        values: Form values keyed by field name.
        creating: True for the add form, False for the edit form.
        allocator: Slot allocator holding the snapshot of the resource's
            ordering space; required for resources with a slot field.
        record_id: Identifier of the record being edited, excluded from the
            taken-slot check.

    Returns:
        Mapping of field name to error message; empty when the form is valid.

    """
    errors: dict[str, str] = {}
    for field_spec in spec.fields:
        value = values.get(field_spec.name)
        if field_spec.kind == "slot":
            if allocator is None or spec.ordering_space is None:
                raise ValueError(f"{spec.key} needs a slot allocator to validate {field_spec.name}")
            error = allocator.validate_assignment(value, spec.ordering_space, record_id)
            if error is not None:
                try:
                    slot = parse_slot(value)
                except ValueError:
                    slot = value
                errors[field_spec.name] = describe_slot_error(
                    error, slot=slot, limit=allocator.limit(spec.ordering_space)
                )
            continue

        message = _validate_field(field_spec, value, creating)
        if message is not None:
            errors[field_spec.name] = message
    return errors
