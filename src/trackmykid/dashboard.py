"""Dashboard counts.

Totals come from two places: the optional summary endpoint, and each
list endpoint asked for a single row.  List totals are the source of
truth; a summary value only fills in where a list total is zero.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from trackmykid._constants import DASHBOARD_SUMMARY_ENDPOINT
from trackmykid.exceptions import CrmError
from trackmykid.models.dashboard import DashboardStats
from trackmykid.normalize import safe_int
from trackmykid.pages.controller import ApiClient, describe_error
from trackmykid.pages.listing import read_total

_logger = logging.getLogger(__name__)

#: Stats field -> list endpoint counted for it.
COUNTED_ENDPOINTS: dict[str, str] = {
    "total_customers": "/api/customers",
    "total_devices": "/api/devices",
    "total_vehicles": "/api/vehicles",
    "total_kids": "/api/kids",
    "total_subscriptions": "/api/subscriptions",
    "total_jobs": "/api/jobs",
    "total_alerts": "/api/alerts",
}

_SUMMARY_KEYS: dict[str, tuple[str, ...]] = {
    "total_customers": ("totalCustomers", "customers", "customerCount"),
    "total_devices": ("totalDevices", "devices", "deviceCount"),
    "total_vehicles": ("totalVehicles", "vehicles", "vehicleCount"),
    "total_kids": ("totalKids", "kids", "kidCount"),
    "total_subscriptions": ("totalSubscriptions", "subscriptions", "subscriptionCount"),
    "total_jobs": ("totalJobs", "jobs", "jobCount"),
    "total_alerts": ("totalAlerts", "alerts", "alertCount"),
}


def normalize_summary(response: Any) -> dict[str, int]:
    """Pull whatever totals a summary response carries."""
    if not isinstance(response, Mapping):
        return {}
    containers = [response] + [
        response[name] for name in ("data", "totals", "summary", "stats") if isinstance(response.get(name), Mapping)
    ]
    found: dict[str, int] = {}
    for field_name, keys in _SUMMARY_KEYS.items():
        for container in containers:
            value = next((safe_int(container[k]) for k in keys if container.get(k) is not None), None)
            if value is not None:
                found[field_name] = value
                break
    return found


class Dashboard:
    """Loads :class:`DashboardStats`; errors end up in :attr:`error`."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self.stats = DashboardStats()
        self.loading = False
        self.error: str | None = None

    async def _summary(self) -> dict[str, int]:
        try:
            response = await self._client.get(DASHBOARD_SUMMARY_ENDPOINT)
        except CrmError as exc:
            _logger.debug("Dashboard summary unavailable: %s", exc)
            return {}
        return normalize_summary(response)

    async def _endpoint_totals(self) -> dict[str, int]:
        names = list(COUNTED_ENDPOINTS)
        # Let every count settle before reporting a failure.
        responses = await asyncio.gather(
            *(self._client.get(COUNTED_ENDPOINTS[name], {"page": 1, "perPage": 1}) for name in names),
            return_exceptions=True,
        )
        for response in responses:
            if isinstance(response, BaseException):
                raise response
        return {name: read_total(response) for name, response in zip(names, responses, strict=True)}

    async def load(self) -> DashboardStats:
        self.loading = True
        self.error = None
        try:
            summary = await self._summary()
            totals = await self._endpoint_totals()
        except CrmError as exc:
            self.error = describe_error(exc, "Fetch dashboard counts")
            return self.stats
        finally:
            self.loading = False

        merged = {name: totals.get(name, 0) or summary.get(name, 0) for name in COUNTED_ENDPOINTS}
        self.stats = DashboardStats(**merged)
        return self.stats
