from __future__ import annotations

import json

import httpx
import pytest

from backoffice.api import ApiError, AuthError, BackofficeClient, record_from_payload, to_wire
from backoffice.data import RESOURCES
from backoffice.models import OrderingSpace
from backoffice.slots import SlotAllocator, SlotError
from helpers import json_response


def test_login_stores_token_for_later_calls(make_client):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/auth/login":
            body = json.loads(request.content)
            assert body == {"email": "admin@example.com", "password": "secret"}
            return json_response(200, {"token": "abc123", "user": {"name": "Admin"}})
        return json_response(200, [])

    client = make_client(handler, token=None)
    session = client.login("admin@example.com", "secret")
    client.list_records(RESOURCES["menus"])

    assert session.token == "abc123"
    assert session.display_name == "Admin"
    assert client.token == "abc123"
    assert "authorization" not in seen[0].headers
    assert seen[1].headers["authorization"] == "Bearer abc123"


@pytest.mark.parametrize("status", [400, 401, 404])
def test_login_rejection_raises_auth_error(make_client, status):
    client = make_client(lambda request: json_response(status, {"message": "Invalid credentials"}), token=None)

    with pytest.raises(AuthError) as exc_info:
        client.login("admin@example.com", "wrong")

    assert exc_info.value.message == "Invalid credentials"
    assert client.token is None


def test_login_without_token_in_response(make_client):
    client = make_client(lambda request: json_response(200, {"user": {}}), token=None)

    with pytest.raises(AuthError):
        client.login("admin@example.com", "secret")


def test_login_server_error_is_not_an_auth_error(make_client):
    client = make_client(lambda request: json_response(500, {"message": "boom"}), token=None)

    with pytest.raises(ApiError) as exc_info:
        client.login("admin@example.com", "secret")

    assert not isinstance(exc_info.value, AuthError)
    assert exc_info.value.status_code == 500


def test_list_unwraps_blog_envelope(make_client):
    payload = {"data": [{"_id": "1", "title": "Hello", "author": "Ann", "published": "Yes", "content": "x"}]}
    client = make_client(lambda request: json_response(200, payload))

    records = client.list_records(RESOURCES["blogs"])

    assert len(records) == 1
    assert records[0].record_id == "1"
    assert records[0].get("title") == "Hello"


def test_list_rejects_malformed_envelope(make_client):
    client = make_client(lambda request: json_response(200, [{"_id": "1"}]))

    with pytest.raises(ApiError, match="Invalid API response structure"):
        client.list_records(RESOURCES["featureimages"])


def test_expired_token_raises_auth_error(make_client):
    client = make_client(lambda request: json_response(401, {"message": "Token expired"}))

    with pytest.raises(AuthError) as exc_info:
        client.list_records(RESOURCES["clients"])

    assert exc_info.value.status_code == 401


def test_conflict_message_is_passed_through(make_client):
    client = make_client(lambda request: json_response(409, {"message": "Sort order already exists"}))

    with pytest.raises(ApiError) as exc_info:
        client.create_record(RESOURCES["menus"], {"name": "A", "link": "/a", "sort_order": 2})

    assert exc_info.value.message == "Sort order already exists"
    assert exc_info.value.status_code == 409


def test_unreachable_server_is_wrapped(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(ApiError, match="Could not reach the server") as exc_info:
        client.delete_record(RESOURCES["menus"], "1")

    assert exc_info.value.status_code is None


def test_create_menu_sends_json_with_wire_names(make_client):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(201, {"_id": "m9", "name": "About", "link": "/about", "sortOrder": 4})

    client = make_client(handler)
    record = client.create_record(RESOURCES["menus"], {"name": " About ", "link": "/about", "sort_order": "4"})

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/menus"
    assert json.loads(seen[0].content) == {"name": "About", "link": "/about", "sortOrder": 4}
    assert record is not None
    assert record.record_id == "m9"
    assert record.get("sort_order") == 4


def test_update_without_echo_returns_none(make_client):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    client = make_client(handler)
    result = client.update_record(RESOURCES["settings"], "s1", {"logo": "logo.png"})

    assert result is None
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/api/settings/s1"


def test_feature_image_upload_is_multipart(make_client, tmp_path):
    image = tmp_path / "hero.png"
    image.write_bytes(b"\x89PNGdata")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(201, {"image": {"_id": "f1", "title": "Hero", "image": "/uploads/hero.png"}})

    client = make_client(handler)
    record = client.create_record(RESOURCES["featureimages"], {"title": "Hero", "image": str(image)})

    request = seen[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="title"' in request.content
    assert b'filename="hero.png"' in request.content
    assert b"\x89PNGdata" in request.content
    assert record is not None
    assert record.record_id == "f1"


def test_list_orderable_items_uses_pages_endpoint(make_client):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return json_response(
            200,
            [
                {"_id": "p1", "name": "Home", "link": "/home", "sortOrder": 1, "meta_data": "m", "content": "c"},
                {"_id": "p2", "name": "Draft", "link": "/draft", "sortOrder": None},
            ],
        )

    client = make_client(handler)
    items = client.list_orderable_items(OrderingSpace.PAGE)

    assert seen == ["/api/pages/"]
    assert [(item.item_id, item.slot) for item in items] == [("p1", 1), ("p2", None)]
    assert items[0].payload["meta_data"] == "m"


def test_record_from_payload_maps_booleans():
    spec = RESOURCES["contacts"]

    record = record_from_payload(spec, {"_id": "c1", "name": "Ann", "number": "555", "resolved": True})

    assert record.get("phone") == "555"
    assert record.get("resolved") == "Yes"


def test_to_wire_skips_empty_file_and_converts_booleans():
    body, files = to_wire(RESOURCES["contacts"], {"name": "Ann", "phone": "555", "resolved": "No"})
    assert body == {"name": "Ann", "number": "555", "resolved": False}
    assert files == {}

    body, files = to_wire(RESOURCES["featureimages"], {"title": "Hero", "image": ""})
    assert body == {"title": "Hero"}
    assert files == {}


def test_client_as_context_manager():
    transport = httpx.MockTransport(lambda request: json_response(200, []))
    with BackofficeClient(base_url="http://backend.test/api/", transport=transport) as client:
        assert client.base_url == "http://backend.test/api"
        assert client.list_records(RESOURCES["contents"]) == []


def test_float_sort_order_still_counts_as_taken(make_client):
    client = make_client(
        lambda request: json_response(200, [{"_id": "m1", "name": "Home", "link": "/home", "sortOrder": 3.0}])
    )
    allocator = SlotAllocator(default_limit=15)

    allocator.load_snapshot(OrderingSpace.MENU, client.list_orderable_items(OrderingSpace.MENU))

    assert allocator.validate_assignment(3, OrderingSpace.MENU) is SlotError.TAKEN


def test_fractional_sort_order_is_dropped():
    record = record_from_payload(RESOURCES["menus"], {"_id": "m1", "name": "Home", "link": "/home", "sortOrder": 2.5})

    assert record.values["sort_order"] is None
