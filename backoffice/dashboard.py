"""Dashboard aggregation of per-resource record counts."""

from __future__ import annotations

from typing import Iterable

import logfire

from backoffice.api import ApiError, AuthError, BackofficeClient
from backoffice.data import RESOURCES, ResourceSpec
from backoffice.models import DashboardStats

DASHBOARD_RESOURCES = ("blogs", "menus", "pages", "contacts", "clients")


def collect_stats(
    client: BackofficeClient,
    resources: Iterable[ResourceSpec] | None = None,
) -> DashboardStats:
    """Count the records of each resource.

    A resource that fails to load is reported as unavailable instead of
    failing the whole dashboard. A rejected token still raises ``AuthError``.
    """
    specs = list(resources) if resources is not None else [RESOURCES[key] for key in DASHBOARD_RESOURCES]
    stats = DashboardStats()
    for spec in specs:
        try:
            stats.counts[spec.key] = len(client.list_records(spec))
        except AuthError:
            raise
        except ApiError as e:
            logfire.warning("Dashboard count unavailable", resource=spec.key, error=e.message)
            stats.counts[spec.key] = None
    logfire.info("Dashboard stats collected", counts=stats.counts)
    return stats
