from __future__ import annotations

import pytest

from backoffice.models import OrderingSpace
from backoffice.slots import (
    LimitError,
    SlotAllocator,
    SlotError,
    describe_limit_error,
    describe_slot_error,
    parse_slot,
)
from helpers import menu_items

MENU = OrderingSpace.MENU
PAGE = OrderingSpace.PAGE


@pytest.fixture
def allocator() -> SlotAllocator:
    allocator = SlotAllocator(default_limit=15)
    allocator.load_snapshot(MENU, menu_items(("a", 1), ("b", 3), ("c", 5)))
    return allocator


def test_default_limit_comes_from_settings():
    allocator = SlotAllocator()
    assert allocator.limit(MENU) == 15
    assert allocator.limit(PAGE) == 15


def test_non_positive_default_limit_is_rejected():
    with pytest.raises(ValueError):
        SlotAllocator(default_limit=0)


def test_new_item_sees_every_slot_with_taken_ones_blocked(allocator):
    options = allocator.list_available_slots(MENU)

    assert [option.value for option in options] == list(range(1, 16))
    assert {option.value for option in options if option.taken} == {1, 3, 5}
    assert [option.value for option in options if option.selectable] == [2, 4] + list(range(6, 16))


def test_edited_item_keeps_its_own_slot_selectable(allocator):
    options = {option.value: option for option in allocator.list_available_slots(MENU, "b")}

    assert options[3].own
    assert options[3].selectable
    assert not options[1].selectable
    assert not options[5].selectable


def test_validate_assignment_rejects_slot_used_by_another_item(allocator):
    assert allocator.validate_assignment(5, MENU, "b") is SlotError.TAKEN
    assert allocator.validate_assignment(5, MENU) is SlotError.TAKEN


def test_validate_assignment_accepts_own_and_free_slots(allocator):
    assert allocator.validate_assignment(3, MENU, "b") is None
    assert allocator.validate_assignment(2, MENU) is None
    assert allocator.validate_assignment("15", MENU) is None


@pytest.mark.parametrize("proposed", [None, "", "   "])
def test_validate_assignment_reports_missing_slot(allocator, proposed):
    assert allocator.validate_assignment(proposed, MENU) is SlotError.MISSING


@pytest.mark.parametrize("proposed", [0, -1, 16, "abc", "2.5"])
def test_validate_assignment_reports_out_of_range(allocator, proposed):
    assert allocator.validate_assignment(proposed, MENU) is SlotError.OUT_OF_RANGE


def test_spaces_do_not_share_taken_slots(allocator):
    assert allocator.validate_assignment(1, PAGE) is None
    assert not any(option.taken for option in allocator.list_available_slots(PAGE))


def test_snapshot_reload_replaces_previous_items(allocator):
    allocator.load_snapshot(MENU, menu_items(("d", 2)))

    assert allocator.validate_assignment(1, MENU) is None
    assert allocator.validate_assignment(2, MENU) is SlotError.TAKEN


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("abc", LimitError.NOT_A_NUMBER),
        ("", LimitError.NOT_A_NUMBER),
        ("1.5", LimitError.NOT_A_NUMBER),
        (None, LimitError.NOT_A_NUMBER),
        ("0", LimitError.NOT_POSITIVE),
        ("-5", LimitError.NOT_POSITIVE),
    ],
)
def test_update_limit_rejects_bad_input_and_keeps_limit(allocator, raw, expected):
    assert allocator.update_limit(raw) is expected
    assert allocator.limit(MENU) == 15
    assert allocator.limit(PAGE) == 15


def test_update_limit_grows_selector(allocator):
    assert allocator.update_limit("20") is None

    assert allocator.limit(MENU) == 20
    assert len(allocator.list_available_slots(MENU)) == 20
    assert allocator.validate_assignment(18, MENU) is None


def test_update_limit_is_idempotent(allocator):
    allocator.update_limit(" 20 ")
    first = allocator.list_available_slots(MENU)
    allocator.update_limit(20)

    assert allocator.list_available_slots(MENU) == first


def test_update_limit_for_one_space_leaves_the_other(allocator):
    assert allocator.update_limit("8", PAGE) is None

    assert allocator.limit(PAGE) == 8
    assert allocator.limit(MENU) == 15


def test_lowering_limit_reports_items_outside_the_range(allocator):
    allocator.update_limit("4")

    conflicts = allocator.conflicts(MENU)
    assert [(conflict.item.item_id, conflict.reason) for conflict in conflicts] == [
        ("c", SlotError.OUT_OF_RANGE)
    ]
    assert allocator.validate_assignment(5, MENU, "c") is SlotError.OUT_OF_RANGE


def test_conflicts_report_duplicated_slots():
    allocator = SlotAllocator(default_limit=15)
    allocator.load_snapshot(MENU, menu_items(("a", 2), ("b", 2), ("c", 3), ("d", None)))

    conflicts = allocator.conflicts(MENU)

    assert [conflict.item.item_id for conflict in conflicts] == ["a", "b"]
    assert all(conflict.reason is SlotError.TAKEN for conflict in conflicts)


def test_conflicts_empty_for_consistent_snapshot(allocator):
    assert allocator.conflicts(MENU) == []


def test_parse_slot():
    assert parse_slot(None) is None
    assert parse_slot(" ") is None
    assert parse_slot(True) is None
    assert parse_slot(4) == 4
    assert parse_slot(" 7 ") == 7
    assert parse_slot(3.0) == 3
    with pytest.raises(ValueError):
        parse_slot(2.5)
    with pytest.raises(ValueError):
        parse_slot("seven")


def test_error_messages():
    assert describe_slot_error(SlotError.MISSING) == "Sort order is required"
    assert describe_slot_error(SlotError.OUT_OF_RANGE, limit=15) == "Sort order must be between 1 and 15"
    assert describe_slot_error(SlotError.TAKEN, slot=5) == "Sort order 5 is already used by another entry"
    assert describe_limit_error(LimitError.NOT_A_NUMBER) == "Please enter a valid number"
    assert describe_limit_error(LimitError.NOT_POSITIVE) == "Limit must be greater than 0"


@pytest.mark.parametrize("limit", [1, 4, 15, 20])
@pytest.mark.parametrize("taken", [(), (1,), (1, 3, 5)])
def test_slot_list_covers_the_whole_range(limit, taken):
    allocator = SlotAllocator(default_limit=limit)
    allocator.load_snapshot(MENU, menu_items(*[(f"m{slot}", slot) for slot in taken]))

    options = allocator.list_available_slots(MENU)

    assert [option.value for option in options] == list(range(1, limit + 1))
    blocked = {option.value for option in options if option.taken}
    free = {option.value for option in options if not option.taken}
    assert blocked == {slot for slot in taken if slot <= limit}
    assert blocked | free == set(range(1, limit + 1))
    assert not blocked & free
