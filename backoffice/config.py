"""Runtime configuration for the API connection, session storage and logging."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "http://localhost:5000/api"
DEFAULT_SORT_ORDER_LIMIT = 15


class Settings(BaseSettings):
    """Settings loaded from ``BACKOFFICE_*`` environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Base URL of the REST backend, without a trailing slash",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for every backend request",
    )
    session_db_path: str = Field(
        default="data/backoffice.db",
        description="SQLite file holding the persisted login session",
    )
    default_sort_order_limit: int = Field(
        default=DEFAULT_SORT_ORDER_LIMIT,
        description="Initial number of sort-order slots per ordering space",
    )
    logfire_token: str | None = Field(
        default=None,
        description="Logfire write token; logs stay local when unset",
    )
    log_console: bool = Field(
        default=False,
        description="Echo log records to the console (breaks the TUI, debug only)",
    )

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("default_sort_order_limit")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("default_sort_order_limit must be greater than 0")
        return value


settings = Settings()
