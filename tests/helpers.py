"""Builders shared by the test modules."""

from __future__ import annotations

import json

import httpx

from backoffice.models import OrderableItem


def json_response(status_code: int, payload: object) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"Content-Type": "application/json"})


def menu_items(*slots: tuple[str, int | None]) -> list[OrderableItem]:
    return [
        OrderableItem(item_id=item_id, name=f"Menu {item_id}", link=f"/{item_id}", slot=slot)
        for item_id, slot in slots
    ]
