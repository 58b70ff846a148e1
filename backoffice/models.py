"""Domain models for the back-office console."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OrderingSpace(str, Enum):
    """A collection of items sharing one slot-uniqueness constraint."""

    MENU = "menus"
    PAGE = "pages"


@dataclass
class Record:
    """A backend record as returned by a list endpoint."""

    record_id: str
    values: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = "") -> Any:
        value = self.values.get(name)
        return default if value is None else value


@dataclass(frozen=True)
class OrderableItem:
    """A menu entry or page occupying one slot in its ordering space."""

    item_id: str
    name: str
    link: str
    slot: int | None
    payload: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class SlotOption:
    """One selectable (or blocked) position in a slot selector."""

    value: int
    taken: bool
    own: bool = False

    @property
    def selectable(self) -> bool:
        return not self.taken or self.own


@dataclass(frozen=True)
class AuthSession:
    """A logged-in administrator and the bearer token the backend issued."""

    token: str
    user: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def display_name(self) -> str:
        for key in ("name", "username", "email"):
            value = self.user.get(key)
            if value:
                return str(value)
        return "admin"


@dataclass
class DashboardStats:
    """Record counts per resource; ``None`` marks a resource that failed to load."""

    counts: dict[str, int | None] = field(default_factory=dict)

    @property
    def unavailable(self) -> list[str]:
        return [key for key, count in self.counts.items() if count is None]
