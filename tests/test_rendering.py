from __future__ import annotations

from rich.console import Console

from backoffice.data import RESOURCES
from backoffice.models import DashboardStats, OrderingSpace, Record
from backoffice.rendering import (
    build_record_table,
    format_cell,
    format_conflicts,
    format_nav,
    format_slot_strip,
    format_stats,
)
from backoffice.slots import SlotAllocator
from helpers import menu_items


def _render(renderable) -> str:
    console = Console(width=120, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_format_cell_flattens_and_truncates():
    assert format_cell(None) == ""
    assert format_cell("line one\nline two") == "line one line two"
    assert format_cell("x" * 50, width=10) == "x" * 9 + "…"


def test_nav_marks_selected_section():
    plain = format_nav("menus").plain

    assert "➤ 4. Menu" in plain
    assert "  1. Dashboard" in plain


def test_record_table_numbers_rows():
    spec = RESOURCES["menus"]
    records = [
        Record("m1", {"name": "Home", "link": "/home", "sort_order": 1}),
        Record("m2", {"name": "About", "link": "/about", "sort_order": 2}),
    ]

    output = _render(build_record_table(spec, records, selected=1))

    assert "S.No" in output
    assert "Menu Name" in output
    assert "About" in output
    assert "➤" in output


def test_slot_strip_highlights_current_and_flags_out_of_range():
    allocator = SlotAllocator(default_limit=5)
    allocator.load_snapshot(OrderingSpace.MENU, menu_items(("a", 1), ("b", 7)))
    options = allocator.list_available_slots(OrderingSpace.MENU, "a")

    assert "[1]" in format_slot_strip(options, 1).plain
    assert "current: 7 (out of range)" in format_slot_strip(options, 7).plain


def test_conflicts_and_stats():
    allocator = SlotAllocator(default_limit=2)
    allocator.load_snapshot(OrderingSpace.MENU, menu_items(("a", 3)))

    assert "Menu a holds slot 3 (out of range)" in format_conflicts(allocator.conflicts(OrderingSpace.MENU)).plain

    output = _render(format_stats(DashboardStats(counts={"blogs": 4, "contacts": None})))
    assert "Blogs" in output
    assert "unavailable" in output
