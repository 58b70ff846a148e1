"""Rendering helpers for tables, slot selectors and navigation."""

from __future__ import annotations

from typing import Any, Sequence

from rich.table import Table
from rich.text import Text

from backoffice.data import NAV_KEYS, NAV_LABELS, RESOURCES, FieldSpec, ResourceSpec
from backoffice.models import DashboardStats, Record, SlotOption
from backoffice.slots import SlotConflict, SlotError

_CELL_WIDTH = 40


def badge_style(kind: str) -> str:
    """Return a consistent badge style for status tags."""
    if kind == "error":
        return "bold #ffffff on #b23a48"
    if kind == "info":
        return "bold #ffffff on #2f6db5"
    return "bold #0b1f0f on #5fbf72"


def format_cell(value: Any, width: int = _CELL_WIDTH) -> str:
    """Flatten a field value onto one table cell."""
    if value is None:
        return ""
    text = " ".join(str(value).split())
    if len(text) > width:
        return text[: width - 1] + "…"
    return text


def format_nav(selected_key: str) -> Text:
    """Render the navigation pane with a pointer on the active section."""
    text = Text()
    for idx, key in enumerate(NAV_KEYS):
        if idx > 0:
            text.append("\n")
        if key == selected_key:
            text.append(f"➤ {idx + 1}. {NAV_LABELS[key]}", style="bold")
        else:
            text.append(f"  {idx + 1}. {NAV_LABELS[key]}")
    return text


def build_record_table(spec: ResourceSpec, records: Sequence[Record], selected: int | None) -> Table:
    """Render a resource list as a table with a serial-number column."""
    table = Table(expand=True, show_lines=False, header_style="bold")
    table.add_column("", width=2, no_wrap=True)
    table.add_column("S.No", justify="right", no_wrap=True)
    for column in spec.columns:
        table.add_column(spec.get_field(column).label)

    for idx, record in enumerate(records):
        pointer = "➤" if idx == selected else ""
        cells = [format_cell(record.values.get(column)) for column in spec.columns]
        style = "reverse" if idx == selected else None
        table.add_row(pointer, str(idx + 1), *cells, style=style)
    return table


def format_slot_option(option: SlotOption, selected: bool = False) -> Text:
    """Render one slot: free, taken (dimmed) or held by the edited item."""
    label = f" {option.value} "
    if selected:
        return Text(f"[{option.value}]", style="bold reverse")
    if option.own:
        return Text(label, style="bold #5fbf72")
    if option.taken:
        return Text(label, style="dim strike")
    return Text(label)


def format_slot_strip(options: Sequence[SlotOption], current: int | None) -> Text:
    """Render every slot of a space on one line for the slot selector."""
    text = Text()
    for option in options:
        text.append_text(format_slot_option(option, selected=option.value == current))
    if current is not None and all(option.value != current for option in options):
        text.append(f"  current: {current} (out of range)", style=badge_style("error"))
    return text


def format_form_field(field_spec: FieldSpec, value: Any, active: bool, error: str | None) -> Text:
    """Render a form field label, its value and any inline error."""
    text = Text()
    pointer = "➤ " if active else "  "
    required = " *" if field_spec.required else ""
    text.append(f"{pointer}{field_spec.label}{required}: ", style="bold" if active else "")
    shown = "" if value is None else str(value)
    if field_spec.kind == "multiline" and shown:
        shown = shown.replace("\n", " ⏎ ")
    text.append(shown)
    if active:
        text.append("|", style="blink")
    if error:
        text.append(f"\n    {error}", style="#ffb3b3")
    return text


def format_conflicts(conflicts: Sequence[SlotConflict]) -> Text:
    """Render existing items whose slot has to be resolved."""
    text = Text()
    for idx, conflict in enumerate(conflicts):
        if idx > 0:
            text.append("\n")
        reason = "out of range" if conflict.reason is SlotError.OUT_OF_RANGE else "duplicate"
        text.append("!", style=badge_style("error"))
        text.append(f" {conflict.item.name} holds slot {conflict.item.slot} ({reason})")
    return text


def format_stats(stats: DashboardStats) -> Table:
    """Render dashboard counts, marking resources that failed to load."""
    table = Table(expand=False, header_style="bold")
    table.add_column("Resource")
    table.add_column("Records", justify="right")
    for key, count in stats.counts.items():
        label = RESOURCES[key].title if key in RESOURCES else key
        shown = Text("unavailable", style="dim") if count is None else Text(str(count))
        table.add_row(label, shown)
    return table
