"""Sort-order slot allocation for menu and page ordering spaces.

Each ordering space owns a bounded range of slots ``[1..limit]``. The slots
taken in a space are never stored; they are derived from the item snapshot the
caller loaded from the backend when an editing session opened. Passing the id
of the item being edited excludes that item from the taken set, so an edit can
keep its current slot without reporting a conflict with itself.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import logfire

from backoffice.config import settings
from backoffice.models import OrderableItem, OrderingSpace, SlotOption

_LIMIT_PATTERN = re.compile(r"^[+-]?\d+$")


class SlotError(str, Enum):
    """Reasons a proposed slot cannot be assigned."""

    MISSING = "slot_missing"
    OUT_OF_RANGE = "slot_out_of_range"
    TAKEN = "slot_taken"


class LimitError(str, Enum):
    """Reasons a typed limit was rejected."""

    NOT_A_NUMBER = "not_a_number"
    NOT_POSITIVE = "not_positive"


SLOT_ERROR_MESSAGES: dict[SlotError, str] = {
    SlotError.MISSING: "Sort order is required",
    SlotError.OUT_OF_RANGE: "Sort order must be between 1 and {limit}",
    SlotError.TAKEN: "Sort order {slot} is already used by another entry",
}

LIMIT_ERROR_MESSAGES: dict[LimitError, str] = {
    LimitError.NOT_A_NUMBER: "Please enter a valid number",
    LimitError.NOT_POSITIVE: "Limit must be greater than 0",
}


@dataclass(frozen=True)
class SlotConflict:
    """An existing item whose slot breaks the space's constraints."""

    item: OrderableItem
    reason: SlotError


@dataclass
class SlotSpace:
    """Slot range and item snapshot for one ordering space."""

    space: OrderingSpace
    limit: int
    items: list[OrderableItem] = field(default_factory=list)

    def taken_slots(self, excluding_item_id: str | None = None) -> set[int]:
        return {
            item.slot
            for item in self.items
            if item.slot is not None and item.item_id != excluding_item_id
        }

    def own_slot(self, item_id: str | None) -> int | None:
        if item_id is None:
            return None
        for item in self.items:
            if item.item_id == item_id:
                return item.slot
        return None


def parse_slot(value: object) -> int | None:
    """Coerce a selector or form value to a slot number.

    Returns ``None`` for unset values. Integral floats such as ``3.0`` are
    accepted. Raises ``ValueError`` for values that are set but are not
    integers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"not an integer slot: {value!r}")
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    if not _LIMIT_PATTERN.match(text):
        raise ValueError(f"not an integer slot: {value!r}")
    return int(text)


def describe_slot_error(error: SlotError, slot: object = None, limit: int | None = None) -> str:
    """Render the inline field message for a slot error."""
    return SLOT_ERROR_MESSAGES[error].format(slot=slot, limit=limit)


def describe_limit_error(error: LimitError) -> str:
    """Render the inline message for a rejected limit."""
    return LIMIT_ERROR_MESSAGES[error]


class SlotAllocator:
    """Collision-free slot choices for every ordering space.

    Limits are held per space. ``update_limit`` without a space changes every
    space at once.
    """

    def __init__(self, default_limit: int | None = None) -> None:
        limit = default_limit if default_limit is not None else settings.default_sort_order_limit
        if limit <= 0:
            raise ValueError("default_limit must be greater than 0")
        self._spaces: dict[OrderingSpace, SlotSpace] = {
            space: SlotSpace(space=space, limit=limit) for space in OrderingSpace
        }

    def space(self, space: OrderingSpace) -> SlotSpace:
        return self._spaces[space]

    def limit(self, space: OrderingSpace) -> int:
        return self._spaces[space].limit

    def load_snapshot(self, space: OrderingSpace, items: Iterable[OrderableItem]) -> None:
        """Replace the taken-slot snapshot of ``space`` with ``items``."""
        snapshot = list(items)
        self._spaces[space].items = snapshot
        logfire.debug("Slot snapshot loaded", space=space.value, item_count=len(snapshot))

    def list_available_slots(
        self,
        space: OrderingSpace,
        excluding_item_id: str | None = None,
    ) -> list[SlotOption]:
        """Return every slot ``1..limit`` in ascending order, flagged taken or free.

        The slot held by ``excluding_item_id`` is reported as taken by its own
        item and stays selectable.
        """
        slot_space = self._spaces[space]
        taken = slot_space.taken_slots(excluding_item_id)
        own = slot_space.own_slot(excluding_item_id)
        options: list[SlotOption] = []
        for value in range(1, slot_space.limit + 1):
            if value in taken:
                options.append(SlotOption(value=value, taken=True))
            elif value == own:
                options.append(SlotOption(value=value, taken=True, own=True))
            else:
                options.append(SlotOption(value=value, taken=False))
        return options

    def validate_assignment(
        self,
        proposed: object,
        space: OrderingSpace,
        excluding_item_id: str | None = None,
    ) -> SlotError | None:
        """Check a proposed slot; return the first failing reason or ``None``."""
        slot_space = self._spaces[space]
        try:
            slot = parse_slot(proposed)
        except ValueError:
            return SlotError.OUT_OF_RANGE
        if slot is None:
            return SlotError.MISSING
        if slot < 1 or slot > slot_space.limit:
            return SlotError.OUT_OF_RANGE
        if slot in slot_space.taken_slots(excluding_item_id):
            return SlotError.TAKEN
        return None

    def update_limit(self, raw: object, space: OrderingSpace | None = None) -> LimitError | None:
        """Parse ``raw`` and install it as the new limit.

        Applies to ``space`` only when given, otherwise to every space. A
        rejected value leaves all limits unchanged.
        """
        text = str(raw).strip() if raw is not None else ""
        if not _LIMIT_PATTERN.match(text):
            return LimitError.NOT_A_NUMBER
        new_limit = int(text)
        if new_limit <= 0:
            return LimitError.NOT_POSITIVE

        targets = [space] if space is not None else list(OrderingSpace)
        for target in targets:
            self._spaces[target].limit = new_limit
        logfire.info(
            "Sort order limit updated",
            limit=new_limit,
            spaces=[target.value for target in targets],
        )
        return None

    def conflicts(self, space: OrderingSpace) -> list[SlotConflict]:
        """List existing items the administrator has to re-slot.

        Covers slots outside ``1..limit`` (e.g. after lowering the limit) and
        slots shared by more than one item.
        """
        slot_space = self._spaces[space]
        counts = Counter(item.slot for item in slot_space.items if item.slot is not None)
        found: list[SlotConflict] = []
        for item in slot_space.items:
            if item.slot is None:
                continue
            if item.slot < 1 or item.slot > slot_space.limit:
                found.append(SlotConflict(item=item, reason=SlotError.OUT_OF_RANGE))
            elif counts[item.slot] > 1:
                found.append(SlotConflict(item=item, reason=SlotError.TAKEN))
        return found
