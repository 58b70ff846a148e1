"""Typed resource definitions derived from the static configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from backoffice.constant import NAVIGATION, REQUIRED_MESSAGES, RESOURCE_DEFINITIONS
from backoffice.models import OrderingSpace

FIELD_KINDS = {"text", "multiline", "choice", "slot", "file"}


@dataclass(frozen=True)
class FieldSpec:
    """One editable attribute of a resource."""

    name: str
    label: str
    kind: str
    required: bool
    wire_name: str
    choices: tuple[str, ...] = ()
    pattern: re.Pattern[str] | None = None
    pattern_message: str = ""
    required_on_create: bool = False
    boolean: bool = False

    @property
    def required_message(self) -> str:
        return REQUIRED_MESSAGES.get(self.name, f"{self.label} is required")


@dataclass(frozen=True)
class ResourceSpec:
    """A backend collection and how the console lists and edits it."""

    key: str
    title: str
    singular: str
    path: str
    envelope: str | None
    fields: tuple[FieldSpec, ...]
    columns: tuple[str, ...]
    multipart: bool = False
    can_create: bool = True
    can_edit: bool = True
    ordering_space: OrderingSpace | None = None
    field_by_name: dict[str, FieldSpec] = field(default_factory=dict, compare=False, repr=False)

    def get_field(self, name: str) -> FieldSpec:
        return self.field_by_name[name]

    @property
    def slot_field(self) -> FieldSpec | None:
        for spec in self.fields:
            if spec.kind == "slot":
                return spec
        return None


def _build_resource(key: str, raw: dict[str, object]) -> ResourceSpec:
    choices = dict(raw.get("choices", {}))  # type: ignore[arg-type]
    patterns = dict(raw.get("patterns", {}))  # type: ignore[arg-type]
    required_on_create = set(raw.get("required_on_create", []))  # type: ignore[arg-type]
    booleans = set(raw.get("booleans", []))  # type: ignore[arg-type]

    fields: list[FieldSpec] = []
    for name, label, kind, required, wire_name in raw["fields"]:  # type: ignore[union-attr]
        if kind not in FIELD_KINDS:
            raise ValueError(f"unknown field kind {kind!r} for {key}.{name}")
        pattern, pattern_message = patterns.get(name, (None, ""))
        fields.append(
            FieldSpec(
                name=name,
                label=label,
                kind=kind,
                required=bool(required),
                wire_name=wire_name,
                choices=tuple(choices.get(name, ())),
                pattern=re.compile(pattern) if pattern else None,
                pattern_message=pattern_message,
                required_on_create=name in required_on_create,
                boolean=name in booleans,
            )
        )

    space = raw.get("ordering_space")
    return ResourceSpec(
        key=key,
        title=str(raw["title"]),
        singular=str(raw["singular"]),
        path=str(raw["path"]),
        envelope=raw.get("envelope"),  # type: ignore[arg-type]
        fields=tuple(fields),
        columns=tuple(raw["columns"]),  # type: ignore[arg-type]
        multipart=bool(raw.get("multipart", False)),
        can_create=bool(raw.get("can_create", True)),
        can_edit=bool(raw.get("can_edit", True)),
        ordering_space=OrderingSpace(space) if space else None,
        field_by_name={spec.name: spec for spec in fields},
    )


RESOURCES: dict[str, ResourceSpec] = {
    key: _build_resource(key, raw) for key, raw in RESOURCE_DEFINITIONS.items()
}

RESOURCE_BY_SPACE: dict[OrderingSpace, ResourceSpec] = {
    spec.ordering_space: spec for spec in RESOURCES.values() if spec.ordering_space is not None
}

NAV_KEYS: list[str] = [key for key, _ in NAVIGATION]
NAV_LABELS: dict[str, str] = dict(NAVIGATION)
