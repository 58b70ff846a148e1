"""Shared fixtures for the back-office test-suite."""

from __future__ import annotations

from typing import Callable, Iterator

import httpx
import logfire
import pytest

from backoffice.api import BackofficeClient
from backoffice.config import settings
from backoffice.persistence import bootstrap_schema

logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def session_db(tmp_path, monkeypatch):
    """Point persistence at a throwaway SQLite file for every test."""
    path = tmp_path / "data" / "session.db"
    monkeypatch.setattr(settings, "session_db_path", str(path))
    bootstrap_schema()
    return path


@pytest.fixture
def make_client() -> Iterator[Callable[..., BackofficeClient]]:
    """Build a client whose requests are answered by ``handler``."""
    clients: list[BackofficeClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], token: str | None = "tok") -> BackofficeClient:
        client = BackofficeClient(
            base_url="http://backend.test/api",
            token=token,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
