"""Sort order limit dialog."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from backoffice.models import OrderingSpace
from backoffice.slots import LimitError, SlotAllocator, describe_limit_error


class LimitModal(ModalScreen[int | None]):
    """Prompt for a new number of sort-order slots.

    Dismisses with the installed limit, or ``None`` when cancelled. A rejected
    value keeps the dialog open and leaves the allocator unchanged.
    """

    CSS = """
    LimitModal {
        align: center middle;
    }

    #limit-box {
        width: 48;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 0 1;
    }

    #limit-body {
        height: auto;
    }

    #limit-error {
        color: $error;
        height: auto;
    }
    """

    def __init__(self, allocator: SlotAllocator, space: OrderingSpace | None = None) -> None:
        super().__init__()
        self.allocator = allocator
        self.space = space
        self.spaces = [space] if space is not None else list(OrderingSpace)
        self.current = allocator.limit(self.spaces[0])
        self.value = str(self.current)
        self.error = ""

    def compose(self) -> ComposeResult:
        scope = self.space.value if self.space is not None else "all spaces"
        with Vertical(id="limit-box"):
            yield Static(Text(f"Sort order limit ({scope})", style="bold"))
            yield Static(id="limit-value")
            yield Static(id="limit-error")
            yield Static(Text("0-9 type, Enter apply, Esc cancel", style="dim"))

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        key = event.key
        if key in {"escape", "ctrl+c"}:
            event.stop()
            self.dismiss(None)
            return
        if key == "enter":
            event.stop()
            self._apply()
            return
        if key == "backspace":
            self.value = self.value[:-1]
            self.error = ""
        elif event.is_printable and event.character:
            if event.character.isdigit():
                self.value += event.character
                self.error = ""
            else:
                self.error = describe_limit_error(LimitError.NOT_A_NUMBER)
        else:
            return
        event.stop()
        self._refresh_content()

    def _apply(self) -> None:
        error = self.allocator.update_limit(self.value, self.space)
        if error is not None:
            self.error = describe_limit_error(error)
            self._refresh_content()
            return
        self.dismiss(self.allocator.limit(self.spaces[0]))

    def _outside(self, limit: int) -> int:
        return sum(
            1
            for space in self.spaces
            for item in self.allocator.space(space).items
            if item.slot is not None and item.slot > limit
        )

    def _refresh_content(self) -> None:
        text = Text()
        text.append(f"Current {self.current}  New ")
        text.append(self.value or " ", style="bold reverse")
        if self.value.isdigit() and int(self.value) > 0:
            outside = self._outside(int(self.value))
            if outside:
                text.append(f"\n{outside} existing entries would be out of range", style="yellow")
        self.query_one("#limit-value", Static).update(text)
        self.query_one("#limit-error", Static).update(self.error)
