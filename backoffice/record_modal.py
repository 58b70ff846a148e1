"""Create/edit record modal screen."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from backoffice import persistence
from backoffice.data import FieldSpec, ResourceSpec
from backoffice.forms import validate_record
from backoffice.limit_modal import LimitModal
from backoffice.rendering import format_form_field, format_slot_strip
from backoffice.slots import SlotAllocator, describe_slot_error, parse_slot


class RecordModal(ModalScreen[dict[str, Any] | None]):
    """Centered form to add or edit one record.

    Dismisses with the validated field values, or ``None`` when cancelled.
    Resources with a sort order get a slot selector fed by the allocator's
    snapshot, which the caller loads before opening the modal.
    """

    CSS = """
    RecordModal {
        align: center middle;
        background: $background 60%;
    }

    #record-dialog {
        width: 90;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #record-title {
        text-style: bold;
        margin-bottom: 1;
        color: $primary;
    }

    #record-server-error {
        color: #ffb3b3;
    }

    #record-body {
        color: white;
        height: auto;
    }

    #record-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(
        self,
        spec: ResourceSpec,
        values: dict[str, Any],
        *,
        allocator: SlotAllocator | None = None,
        record_id: str | None = None,
        server_error: str | None = None,
    ) -> None:
        super().__init__()
        if spec.slot_field is not None and allocator is None:
            raise ValueError(f"{spec.key} forms need a slot allocator")
        self.spec = spec
        self.values = dict(values)
        self.allocator = allocator
        self.record_id = record_id
        self.creating = record_id is None
        self.errors: dict[str, str] = {}
        self.server_error = server_error or ""
        self.cursor_index = 0

    def compose(self) -> ComposeResult:
        action = "Add New" if self.creating else "Edit"
        with Container(id="record-dialog"):
            yield Static(f"{action} {self.spec.singular}", id="record-title")
            yield Static(id="record-server-error")
            yield Static(id="record-body")
            yield Static(id="record-help")

    def on_mount(self) -> None:
        self._refresh_content()

    @property
    def current_field(self) -> FieldSpec:
        return self.spec.fields[self.cursor_index]

    def on_key(self, event: Key) -> None:
        key = event.key
        field_spec = self.current_field

        if key in {"escape", "ctrl+c"}:
            self.dismiss(None)
        elif key == "ctrl+s":
            self._save()
        elif key == "ctrl+l":
            self._open_limit_modal()
        elif key in {"tab", "down"}:
            self._move_cursor(1)
        elif key in {"shift+tab", "up"}:
            self._move_cursor(-1)
        elif key in {"left", "right"}:
            delta = 1 if key == "right" else -1
            if field_spec.kind == "slot":
                self._cycle_slot(delta)
            elif field_spec.kind == "choice":
                self._cycle_choice(delta)
        elif key == "enter":
            if field_spec.kind == "multiline":
                self._append_text("\n")
            else:
                self._move_cursor(1)
        elif key == "backspace":
            self._backspace()
        elif event.is_printable and event.character:
            if field_spec.kind in {"text", "multiline", "file"}:
                self._append_text(event.character)
        else:
            return
        event.stop()

    def _move_cursor(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(self.spec.fields)
        self._refresh_content()

    def _append_text(self, chunk: str) -> None:
        name = self.current_field.name
        self.values[name] = f"{self.values.get(name) or ''}{chunk}"
        self.errors.pop(name, None)
        self._refresh_content()

    def _backspace(self) -> None:
        field_spec = self.current_field
        if field_spec.kind == "slot":
            self.values[field_spec.name] = None
            self._revalidate_slot()
            return
        if field_spec.kind == "choice":
            return
        current = str(self.values.get(field_spec.name) or "")
        if current:
            self.values[field_spec.name] = current[:-1]
            self.errors.pop(field_spec.name, None)
            self._refresh_content()

    def _cycle_choice(self, delta: int) -> None:
        field_spec = self.current_field
        if not field_spec.choices:
            return
        current = self.values.get(field_spec.name)
        if current in field_spec.choices:
            idx = (field_spec.choices.index(current) + delta) % len(field_spec.choices)
        else:
            idx = 0
        self.values[field_spec.name] = field_spec.choices[idx]
        self.errors.pop(field_spec.name, None)
        self._refresh_content()

    def _slot_values(self) -> list[int]:
        if self.allocator is None or self.spec.ordering_space is None:
            return []
        options = self.allocator.list_available_slots(self.spec.ordering_space, self.record_id)
        return [option.value for option in options if option.selectable]

    def _cycle_slot(self, delta: int) -> None:
        selectable = self._slot_values()
        if not selectable:
            self.errors[self.current_field.name] = "No free sort order left; raise the limit with Ctrl+L"
            self._refresh_content()
            return
        try:
            current = parse_slot(self.values.get(self.current_field.name))
        except ValueError:
            current = None
        if current in selectable:
            idx = (selectable.index(current) + delta) % len(selectable)
        else:
            idx = 0 if delta > 0 else len(selectable) - 1
        self.values[self.current_field.name] = selectable[idx]
        self._revalidate_slot()

    def _revalidate_slot(self) -> None:
        field_spec = self.spec.slot_field
        if field_spec is None or self.allocator is None or self.spec.ordering_space is None:
            return
        value = self.values.get(field_spec.name)
        error = self.allocator.validate_assignment(value, self.spec.ordering_space, self.record_id)
        # An unset slot is only reported on save.
        if error is None or value is None:
            self.errors.pop(field_spec.name, None)
        else:
            self.errors[field_spec.name] = describe_slot_error(
                error,
                slot=value,
                limit=self.allocator.limit(self.spec.ordering_space),
            )
        self._refresh_content()

    def _open_limit_modal(self) -> None:
        if self.spec.slot_field is None or self.allocator is None:
            return
        self.app.push_screen(LimitModal(self.allocator, self.spec.ordering_space), self._on_limit_closed)

    def _on_limit_closed(self, new_limit: int | None) -> None:
        if new_limit is None or self.spec.ordering_space is None:
            return
        persistence.save_slot_limit(self.spec.ordering_space, new_limit)
        self._revalidate_slot()

    def _save(self) -> None:
        self.errors = validate_record(
            self.spec,
            self.values,
            creating=self.creating,
            allocator=self.allocator,
            record_id=self.record_id,
        )
        if self.errors:
            first_invalid = next(
                idx for idx, field_spec in enumerate(self.spec.fields) if field_spec.name in self.errors
            )
            self.cursor_index = first_invalid
            self._refresh_content()
            return
        self.dismiss(dict(self.values))

    def _refresh_content(self) -> None:
        body = self.query_one("#record-body", Static)
        help_text = self.query_one("#record-help", Static)
        server_error = self.query_one("#record-server-error", Static)

        content = Text()
        for idx, field_spec in enumerate(self.spec.fields):
            if idx > 0:
                content.append("\n")
            active = idx == self.cursor_index
            value = self.values.get(field_spec.name)
            if field_spec.kind == "slot":
                content.append_text(self._render_slot_field(field_spec, value, active))
                continue
            content.append_text(format_form_field(field_spec, value, active, self.errors.get(field_spec.name)))

        body.update(content)
        server_error.update(self.server_error)
        help_text.update(self._help_line())

    def _render_slot_field(self, field_spec: FieldSpec, value: Any, active: bool) -> Text:
        text = format_form_field(field_spec, value, active, None)
        if self.allocator is None or self.spec.ordering_space is None:
            return text
        options = self.allocator.list_available_slots(self.spec.ordering_space, self.record_id)
        try:
            current = parse_slot(value)
        except ValueError:
            current = None
        text.append("\n    ")
        text.append_text(format_slot_strip(options, current))
        text.append(f"\n    limit {self.allocator.limit(self.spec.ordering_space)}", style="dim")
        error = self.errors.get(field_spec.name)
        if error:
            text.append(f"\n    {error}", style="#ffb3b3")
        return text

    def _help_line(self) -> str:
        field_spec = self.current_field
        if field_spec.kind == "slot":
            return "←/→ pick sort order, Ctrl+L change limit, Tab next, Ctrl+S save, Esc cancel"
        if field_spec.kind == "choice":
            return "←/→ change value, Tab next, Ctrl+S save, Esc cancel"
        if field_spec.kind == "multiline":
            return "Type text, Enter newline, Tab next, Ctrl+S save, Esc cancel"
        if field_spec.kind == "file":
            return "Type a file path (leave empty to keep the current file), Ctrl+S save, Esc cancel"
        return "Type text, Tab/Enter next, Ctrl+S save, Esc cancel"
