"""Main Textual app class."""

from __future__ import annotations

from typing import Any

import logfire
from rich.console import Group
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from backoffice import persistence
from backoffice.api import ApiError, AuthError, BackofficeClient, orderable_item_from_record
from backoffice.confirm_modal import ConfirmModal
from backoffice.dashboard import collect_stats
from backoffice.data import NAV_KEYS, NAV_LABELS, RESOURCES, ResourceSpec
from backoffice.forms import blank_values
from backoffice.login_screen import LoginScreen
from backoffice.models import AuthSession, DashboardStats, Record
from backoffice.record_modal import RecordModal
from backoffice.rendering import badge_style, build_record_table, format_conflicts, format_nav, format_stats
from backoffice.slots import SlotAllocator


class BackofficeApp(App):
    """A Textual console for the back-office CRUD screens."""

    TITLE = "Back Office"
    SUB_TITLE = "Admin Console"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #nav-pane {
        width: 28;
        border: round $primary;
        padding: 1;
    }

    #content-pane {
        width: 1fr;
        border: round $secondary;
        padding: 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 3;
    }

    #content-body {
        height: 1fr;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    section = reactive("dashboard")
    selected_index = reactive(None)

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        ("r", "reload", "Reload"),
        ("a", "add_record", "Add"),
        ("e", "edit_record", "Edit"),
        ("enter", "edit_record", "Edit"),
        ("d", "delete_record", "Delete"),
        ("o", "logout", "Logout"),
    ]

    def __init__(
        self,
        client: BackofficeClient | None = None,
        allocator: SlotAllocator | None = None,
    ) -> None:
        super().__init__()
        self.client = client or BackofficeClient()
        self.allocator = allocator or SlotAllocator()
        self.session: AuthSession | None = None
        self.records: dict[str, list[Record]] = {}
        self.stats: DashboardStats | None = None
        self.loading = False
        self.load_error = ""
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="nav-pane"):
                yield Static("Navigation", classes="pane-title")
                yield Static(id="nav-list")
            with Vertical(id="content-pane"):
                yield Static(id="status-bar")
                yield Static(classes="pane-title", id="content-title")
                yield Static(id="content-body")

    def on_mount(self) -> None:
        persistence.bootstrap_schema()
        for space, limit in persistence.load_slot_limits().items():
            self.allocator.update_limit(limit, space)
        session = persistence.load_session()
        if session is None:
            self._show_login()
            return
        logfire.info("Restored stored session", user=session.display_name)
        self._start_session(session)

    def on_unmount(self) -> None:
        self.client.close()

    def _show_login(self) -> None:
        self.push_screen(LoginScreen(self.client), self._on_login)

    def _on_login(self, session: AuthSession | None) -> None:
        if session is None:
            self.exit()
            return
        persistence.save_session(session)
        self._start_session(session)

    def _start_session(self, session: AuthSession) -> None:
        self.session = session
        self.client.token = session.token
        self.sub_title = f"Signed in as {session.display_name}"
        self.system_status = ""
        self._select_section("dashboard")

    def _handle_auth_failure(self, error: AuthError) -> None:
        if isinstance(self.screen, LoginScreen):
            return
        logfire.warning("Session rejected by backend", status_code=error.status_code)
        persistence.clear_session()
        self.session = None
        self.client.token = None
        self.records.clear()
        self.stats = None
        self.system_status = "Session expired, please sign in again"
        self._show_login()

    def action_logout(self) -> None:
        if self._modal_open() or self.session is None:
            return
        logfire.info("Administrator logged out", user=self.session.display_name)
        persistence.clear_session()
        self.session = None
        self.client.token = None
        self.records.clear()
        self.stats = None
        self._show_login()

    def _modal_open(self) -> bool:
        return len(self.screen_stack) > 1

    def on_key(self, event: Key) -> None:
        if self._modal_open():
            return

        if event.key in {"down", "j"}:
            self._move_selection(1)
            event.stop()
            return
        if event.key in {"up", "k"}:
            self._move_selection(-1)
            event.stop()
            return
        if event.key in {"tab", "shift+tab"}:
            delta = 1 if event.key == "tab" else -1
            idx = (NAV_KEYS.index(self.section) + delta) % len(NAV_KEYS)
            self._select_section(NAV_KEYS[idx])
            event.stop()
            return

        if event.is_printable and event.character and event.character.isdigit():
            idx = int(event.character) - 1
            if 0 <= idx < len(NAV_KEYS):
                self._select_section(NAV_KEYS[idx])
            event.stop()

    def _select_section(self, key: str) -> None:
        self.section = key
        self.selected_index = None
        self.load_error = ""
        self._refresh_all()
        self._load_section(key)

    def action_reload(self) -> None:
        if self._modal_open() or self.session is None:
            return
        self.system_status = ""
        self._load_section(self.section)

    def _current_spec(self) -> ResourceSpec | None:
        return RESOURCES.get(self.section)

    def _current_records(self) -> list[Record]:
        return self.records.get(self.section, [])

    def _selected_record(self) -> Record | None:
        records = self._current_records()
        if self.selected_index is None or not (0 <= self.selected_index < len(records)):
            return None
        return records[self.selected_index]

    def _move_selection(self, delta: int) -> None:
        records = self._current_records()
        if not records:
            return
        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(records) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(records)
        self._refresh_content()

    @work(thread=True, exclusive=True, group="load")
    def _load_section(self, key: str) -> None:
        self.call_from_thread(self._set_loading, True)
        try:
            if key == "dashboard":
                result: Any = collect_stats(self.client)
            else:
                result = self.client.list_records(RESOURCES[key])
        except AuthError as e:
            self.call_from_thread(self._handle_auth_failure, e)
            return
        except ApiError as e:
            self.call_from_thread(self._show_load_error, key, e)
            return
        self.call_from_thread(self._show_loaded, key, result)

    def _set_loading(self, loading: bool) -> None:
        self.loading = loading
        self._refresh_content()

    def _show_load_error(self, key: str, error: ApiError) -> None:
        logfire.error("Failed to load section", section=key, error=error.message)
        self.loading = False
        if key == self.section:
            label = NAV_LABELS[key].lower()
            self.load_error = f"Failed to fetch {label}. Please try again. ({error.message})"
        self._refresh_content()

    def _show_loaded(self, key: str, result: Any) -> None:
        self.loading = False
        if key == "dashboard":
            self.stats = result
        else:
            self.records[key] = result
            spec = RESOURCES[key]
            if spec.ordering_space is not None:
                self.allocator.load_snapshot(
                    spec.ordering_space, [orderable_item_from_record(record) for record in result]
                )
        if key == self.section:
            self.load_error = ""
            records = self._current_records()
            if self.selected_index is not None and self.selected_index >= len(records):
                self.selected_index = len(records) - 1 if records else None
        self._refresh_content()

    def action_add_record(self) -> None:
        spec = self._current_spec()
        if self._modal_open() or spec is None or not spec.can_create:
            return
        self._open_editor(spec, None, blank_values(spec))

    def action_edit_record(self) -> None:
        spec = self._current_spec()
        record = self._selected_record()
        if self._modal_open() or spec is None or record is None or not spec.can_edit:
            return
        values = dict(record.values)
        for field_spec in spec.fields:
            if field_spec.kind == "file":
                values[field_spec.name] = ""
        self._open_editor(spec, record.record_id, values)

    def _open_editor(
        self,
        spec: ResourceSpec,
        record_id: str | None,
        values: dict[str, Any],
        server_error: str | None = None,
    ) -> None:
        if spec.ordering_space is None:
            self._push_editor(spec, record_id, values, server_error)
            return
        # Fresh taken-slot snapshot per editing session.
        self.system_status = "Loading sort orders..."
        self._refresh_status()
        self._load_snapshot_and_edit(spec, record_id, values, server_error)

    @work(thread=True, exclusive=True, group="snapshot")
    def _load_snapshot_and_edit(
        self,
        spec: ResourceSpec,
        record_id: str | None,
        values: dict[str, Any],
        server_error: str | None,
    ) -> None:
        if spec.ordering_space is None:
            return
        try:
            items = self.client.list_orderable_items(spec.ordering_space)
        except AuthError as e:
            self.call_from_thread(self._handle_auth_failure, e)
            return
        except ApiError as e:
            logfire.warning("Failed to fetch sort orders", resource=spec.key, error=e.message)
            self.call_from_thread(self._set_status, f"Failed to fetch sort orders: {e.message}")
            return
        self.allocator.load_snapshot(spec.ordering_space, items)
        self.call_from_thread(self._push_editor, spec, record_id, values, server_error)

    def _push_editor(
        self,
        spec: ResourceSpec,
        record_id: str | None,
        values: dict[str, Any],
        server_error: str | None,
    ) -> None:
        self.system_status = ""
        self._refresh_status()
        modal = RecordModal(
            spec,
            values,
            allocator=self.allocator if spec.ordering_space is not None else None,
            record_id=record_id,
            server_error=server_error,
        )

        def _on_close(result: dict[str, Any] | None) -> None:
            if result is None:
                return
            self._save_record(spec, record_id, result)

        self.push_screen(modal, _on_close)

    @work(thread=True, exclusive=True, group="save")
    def _save_record(self, spec: ResourceSpec, record_id: str | None, values: dict[str, Any]) -> None:
        self.call_from_thread(self._set_status, "Saving...")
        try:
            if record_id is None:
                self.client.create_record(spec, values)
            else:
                self.client.update_record(spec, record_id, values)
        except AuthError as e:
            self.call_from_thread(self._handle_auth_failure, e)
            return
        except (ApiError, OSError) as e:
            message = e.message if isinstance(e, ApiError) else str(e)
            logfire.error("Failed to save record", resource=spec.key, record_id=record_id, error=message)
            self.call_from_thread(self._set_status, "")
            self.call_from_thread(self._open_editor, spec, record_id, values, f"Save failed: {message}")
            return
        verb = "added" if record_id is None else "updated"
        self.call_from_thread(self._set_status, f"{spec.singular} {verb}")
        self.call_from_thread(self._reload_if_current, spec.key)

    def action_delete_record(self) -> None:
        spec = self._current_spec()
        record = self._selected_record()
        if self._modal_open() or spec is None or record is None:
            return

        def _on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._delete_record(spec, record.record_id)

        self.push_screen(
            ConfirmModal(
                f"Delete {spec.singular}",
                f"Are you sure you want to delete this {spec.singular.lower()}?",
            ),
            _on_confirm,
        )

    @work(thread=True, exclusive=True, group="save")
    def _delete_record(self, spec: ResourceSpec, record_id: str) -> None:
        try:
            self.client.delete_record(spec, record_id)
        except AuthError as e:
            self.call_from_thread(self._handle_auth_failure, e)
            return
        except ApiError as e:
            logfire.error("Failed to delete record", resource=spec.key, record_id=record_id, error=e.message)
            self.call_from_thread(self._set_status, f"Delete failed: {e.message}")
            return
        self.call_from_thread(self._remove_record, spec.key, record_id)

    def _remove_record(self, key: str, record_id: str) -> None:
        records = [record for record in self.records.get(key, []) if record.record_id != record_id]
        self.records[key] = records
        spec = RESOURCES[key]
        if spec.ordering_space is not None:
            self.allocator.load_snapshot(
                spec.ordering_space, [orderable_item_from_record(record) for record in records]
            )
        self.system_status = f"{spec.singular} deleted"
        if self.selected_index is not None and self.selected_index >= len(records):
            self.selected_index = len(records) - 1 if records else None
        self._refresh_all()

    def _reload_if_current(self, key: str) -> None:
        if self.section == key:
            self._load_section(key)

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_status()

    def _refresh_all(self) -> None:
        self._refresh_nav()
        self._refresh_status()
        self._refresh_content()

    def _refresh_nav(self) -> None:
        try:
            nav = self.query_one("#nav-list", Static)
        except NoMatches:
            return
        nav.update(format_nav(self.section))

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        status = self.system_status or "Ready"
        spec = self._current_spec()
        if spec is None:
            keys = "1-9/Tab sections, R reload, O logout, Ctrl+Q quit"
        else:
            actions = ["J/K select"]
            if spec.can_create:
                actions.append("A add")
            if spec.can_edit:
                actions.append("E edit")
            actions.extend(["D delete", "R reload", "O logout"])
            keys = ", ".join(actions)
        bar.update(f"{keys}\n{status}")

    def _refresh_content(self) -> None:
        try:
            title = self.query_one("#content-title", Static)
            body = self.query_one("#content-body", Static)
        except NoMatches:
            return

        title.update(NAV_LABELS.get(self.section, self.section))
        if self.load_error:
            body.update(Text(self.load_error, style=badge_style("error")))
            return
        if self.loading and (self.section == "dashboard" or self.section not in self.records):
            body.update(Text("Loading data...", style="dim"))
            return

        if self.section == "dashboard":
            body.update(format_stats(self.stats) if self.stats is not None else "")
            return

        spec = RESOURCES[self.section]
        records = self._current_records()
        if not records:
            body.update(f"No {spec.title.lower()} yet")
            return

        table = build_record_table(spec, records, self.selected_index)
        if spec.ordering_space is None:
            body.update(table)
            return
        conflicts = self.allocator.conflicts(spec.ordering_space)
        if not conflicts:
            body.update(table)
            return
        body.update(Group(table, Text("\nSort order conflicts", style="bold"), format_conflicts(conflicts)))
