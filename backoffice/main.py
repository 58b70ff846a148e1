"""Entry point for the back-office Textual console."""

from __future__ import annotations

import logfire

from backoffice.backoffice_app import BackofficeApp
from backoffice.config import settings


def configure_logging() -> None:
    """Set up logfire; records only leave the machine when a token is configured."""
    logfire.configure(
        service_name="backoffice",
        token=settings.logfire_token,
        send_to_logfire="if-token-present",
        console=None if settings.log_console else False,
    )


def main() -> None:
    """Run the Textual application."""
    configure_logging()
    logfire.info("Back office starting", api_base_url=settings.api_base_url)
    BackofficeApp().run()


if __name__ == "__main__":
    main()
