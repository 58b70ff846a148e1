"""Login screen."""

from __future__ import annotations

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Header, Static

from backoffice.api import ApiError, AuthError, BackofficeClient
from backoffice.constant import LOGIN_FAILED_MESSAGE
from backoffice.models import AuthSession

_FIELDS = ("email", "password")


class LoginScreen(Screen[AuthSession]):
    """Sign-in form; dismisses with the new session once the backend accepts it."""

    CSS = """
    LoginScreen {
        align: center middle;
    }

    #login-card {
        width: 60;
        height: auto;
        border: round $primary;
        background: $panel;
        padding: 1 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #login-error {
        color: #ffb3b3;
        margin-top: 1;
    }

    #login-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, client: BackofficeClient) -> None:
        super().__init__()
        self.client = client
        self.values = {name: "" for name in _FIELDS}
        self.cursor_index = 0
        self.error = ""
        self.busy = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="login-card"):
            yield Static("Sign in", id="login-title")
            yield Static(id="login-body")
            yield Static(id="login-error")
            yield Static("Tab switch field, Enter sign in, Ctrl+Q quit", id="login-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if self.busy:
            event.stop()
            return

        name = _FIELDS[self.cursor_index]
        if event.key in {"tab", "shift+tab", "up", "down"}:
            self.cursor_index = (self.cursor_index + 1) % len(_FIELDS)
        elif event.key == "enter":
            if name == "email":
                self.cursor_index = 1
            else:
                self._submit()
        elif event.key == "backspace":
            self.values[name] = self.values[name][:-1]
        elif event.is_printable and event.character:
            self.values[name] += event.character
            self.error = ""
        else:
            return
        self._refresh_content()
        event.stop()

    def _submit(self) -> None:
        email = self.values["email"].strip()
        password = self.values["password"]
        if not email or not password:
            self.error = "Email and password are required."
            return
        self.busy = True
        self.error = "Signing in..."
        self._login(email, password)

    @work(thread=True, exclusive=True, group="login")
    def _login(self, email: str, password: str) -> None:
        try:
            session = self.client.login(email, password)
        except AuthError:
            self.app.call_from_thread(self._login_failed, LOGIN_FAILED_MESSAGE)
            return
        except ApiError as e:
            self.app.call_from_thread(self._login_failed, e.message)
            return
        self.app.call_from_thread(self.dismiss, session)

    def _login_failed(self, message: str) -> None:
        self.busy = False
        self.error = message
        self.values["password"] = ""
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = Text()
        for idx, name in enumerate(_FIELDS):
            if idx > 0:
                body.append("\n")
            active = idx == self.cursor_index
            pointer = "➤ " if active else "  "
            shown = self.values[name] if name == "email" else "•" * len(self.values[name])
            body.append(f"{pointer}{name.title()}: ", style="bold" if active else "")
            body.append(shown)
            if active:
                body.append("|", style="blink")
        self.query_one("#login-body", Static).update(body)
        self.query_one("#login-error", Static).update(self.error)
