"""REST client for the back-office backend.

Every call after login carries ``Authorization: Bearer <token>``. Non-2xx
responses raise ``ApiError`` (``AuthError`` for 401/403); transport failures
are wrapped into ``ApiError`` with no status code.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Self

import httpx
import logfire

from backoffice.config import settings
from backoffice.data import RESOURCE_BY_SPACE, ResourceSpec
from backoffice.models import AuthSession, OrderableItem, OrderingSpace, Record
from backoffice.slots import parse_slot


class ApiError(Exception):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(ApiError):
    """Raised when login fails or the stored token is no longer accepted."""


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return f"{response.status_code} {response.reason_phrase}".strip()


def _handle_response(response: httpx.Response, endpoint: str) -> Any:
    """Return the decoded JSON body or raise for a failed request.

    Args:
        response: The httpx Response object.
        endpoint: The API endpoint for logging context.

    Returns:
        Decoded JSON payload, or ``None`` for an empty body.

    Raises:
        AuthError: On 401/403.
        ApiError: On any other non-success status.

    """
    if response.status_code in (401, 403):
        message = _error_message(response)
        logfire.warning("API request unauthorized", endpoint=endpoint, status_code=response.status_code)
        raise AuthError(message, response.status_code)
    if response.is_error:
        message = _error_message(response)
        logfire.warning(
            "API request failed",
            endpoint=endpoint,
            status_code=response.status_code,
            message=message,
        )
        raise ApiError(message, response.status_code)
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise ApiError(f"Invalid JSON from {endpoint}", response.status_code) from e


def record_id_of(payload: dict[str, Any]) -> str:
    """Return the server-assigned identifier of a record payload."""
    value = payload.get("_id", payload.get("id"))
    if value is None:
        raise ApiError("Record without identifier in API response")
    return str(value)


def record_from_payload(spec: ResourceSpec, payload: dict[str, Any]) -> Record:
    """Map a wire payload onto the resource's form field names."""
    values: dict[str, Any] = {}
    for field_spec in spec.fields:
        value = payload.get(field_spec.wire_name)
        if field_spec.boolean:
            value = "Yes" if value else "No"
        elif field_spec.kind == "slot":
            try:
                value = parse_slot(value)
            except ValueError:
                logfire.warning(
                    "Dropping unparseable sort order",
                    resource=spec.key,
                    record_id=payload.get("_id", payload.get("id")),
                    value=repr(value),
                )
                value = None
        values[field_spec.name] = value
    return Record(record_id=record_id_of(payload), values=values)


def orderable_item_from_record(record: Record) -> OrderableItem:
    """Project a menu or page record onto the allocator's item type."""
    return OrderableItem(
        item_id=record.record_id,
        name=str(record.get("name")),
        link=str(record.get("link")),
        slot=record.values.get("sort_order"),
        payload={
            key: value
            for key, value in record.values.items()
            if key not in {"name", "link", "sort_order"}
        },
    )


def to_wire(spec: ResourceSpec, values: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split form values into a wire body and multipart file parts.

    File fields holding a path are read from disk; empty file fields are left
    out so an update keeps the stored image.
    """
    body: dict[str, Any] = {}
    files: dict[str, Any] = {}
    for field_spec in spec.fields:
        if field_spec.name not in values:
            continue
        value = values[field_spec.name]
        if field_spec.kind == "file":
            path_text = str(value or "").strip()
            if not path_text:
                continue
            path = Path(path_text).expanduser()
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            files[field_spec.wire_name] = (path.name, path.read_bytes(), content_type)
            continue
        if field_spec.kind == "slot":
            value = parse_slot(value)
        elif field_spec.boolean:
            value = value == "Yes"
        elif isinstance(value, str):
            value = value.strip()
        body[field_spec.wire_name] = value
    return body, files


class BackofficeClient:
    """Client for the back-office REST backend."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client; defaults come from ``backoffice.config``."""
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._token = token
        self._session = httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def token(self) -> str | None:
        """Return the bearer token used for requests."""
        return self._token

    @token.setter
    def token(self, value: str | None) -> None:
        self._token = value

    def close(self) -> None:
        """Close the httpx session and release resources."""
        self._session.close()
        logfire.debug("BackofficeClient session closed")

    def __enter__(self) -> Self:
        """Enter context manager.

        Returns:
            The BackofficeClient instance.

        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and close session."""
        self.close()

    def _headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        logfire.debug("API request", method=method, endpoint=endpoint)
        try:
            response = self._session.request(method, f"/{endpoint.lstrip('/')}", headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            logfire.error("API request error", method=method, endpoint=endpoint, error=str(e))
            raise ApiError(f"Could not reach the server: {e}") from e
        return _handle_response(response, endpoint)

    def login(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a bearer token.

        Args:
            email: Administrator email.
            password: Administrator password.

        Returns:
            The new AuthSession; the client keeps using its token.

        Raises:
            AuthError: If the backend rejects the credentials.

        """
        try:
            payload = self._request("POST", "auth/login", json={"email": email, "password": password})
        except AuthError:
            raise
        except ApiError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                raise AuthError(e.message, e.status_code) from e
            raise

        if not isinstance(payload, dict) or not payload.get("token"):
            raise AuthError("Login response did not include a token")
        session = AuthSession(token=str(payload["token"]), user=dict(payload.get("user") or {}))
        self._token = session.token
        logfire.info("Administrator logged in", user=session.display_name)
        return session

    def list_records(self, spec: ResourceSpec) -> list[Record]:
        """Fetch every record of a resource.

        Raises:
            ApiError: If the request fails or the list envelope is malformed.

        """
        payload = self._request("GET", f"{spec.path}/")
        if spec.envelope is not None:
            payload = payload.get(spec.envelope) if isinstance(payload, dict) else None
        if not isinstance(payload, list):
            raise ApiError("Invalid API response structure")
        return [record_from_payload(spec, item) for item in payload if isinstance(item, dict)]

    def create_record(self, spec: ResourceSpec, values: dict[str, Any]) -> Record | None:
        """Create a record and return it when the backend echoes it back."""
        body, files = to_wire(spec, values)
        payload = self._send("POST", spec.path, spec, body, files)
        logfire.info("Record created", resource=spec.key)
        return self._echoed_record(spec, payload)

    def update_record(self, spec: ResourceSpec, record_id: str, values: dict[str, Any]) -> Record | None:
        """Replace a record's editable fields."""
        body, files = to_wire(spec, values)
        payload = self._send("PUT", f"{spec.path}/{record_id}", spec, body, files)
        logfire.info("Record updated", resource=spec.key, record_id=record_id)
        return self._echoed_record(spec, payload)

    def delete_record(self, spec: ResourceSpec, record_id: str) -> None:
        """Delete a record by identifier."""
        self._request("DELETE", f"{spec.path}/{record_id}")
        logfire.info("Record deleted", resource=spec.key, record_id=record_id)

    def list_orderable_items(self, space: OrderingSpace) -> list[OrderableItem]:
        """Fetch the items of an ordering space with their current slots."""
        spec = RESOURCE_BY_SPACE[space]
        return [orderable_item_from_record(record) for record in self.list_records(spec)]

    def _send(
        self,
        method: str,
        endpoint: str,
        spec: ResourceSpec,
        body: dict[str, Any],
        files: dict[str, Any],
    ) -> Any:
        if spec.multipart:
            data = {key: "" if value is None else str(value) for key, value in body.items()}
            return self._request(method, endpoint, data=data, files=files or None)
        return self._request(method, endpoint, json=body)

    def _echoed_record(self, spec: ResourceSpec, payload: Any) -> Record | None:
        if isinstance(payload, dict) and isinstance(payload.get("image"), dict):
            payload = payload["image"]
        if not isinstance(payload, dict) or ("_id" not in payload and "id" not in payload):
            return None
        return record_from_payload(spec, payload)
