"""Client-side routes and the navigator that follows them."""

from __future__ import annotations

import logging

from trackmykid.exceptions import CrmConfigError

_logger = logging.getLogger(__name__)

HOME = "/"
LOGIN = "/login"
DASHBOARD = "/dashboard"

#: Entity list pages, keyed by entity name.
ENTITY_ROUTES: dict[str, str] = {
    "customers": "/customers",
    "vehicles": "/vehicles",
    "devices": "/devices",
    "jobs": "/jobs",
    "kids": "/kids",
    "subscriptions": "/subscriptions",
    "invoices": "/invoices",
    "alerts": "/alerts",
    "users": "/users",
    "telemetry": "/telemetry",
    "device-trackings": "/device-trackings",
}

PROTECTED_ROUTES: frozenset[str] = frozenset({DASHBOARD, *ENTITY_ROUTES.values()})


def resolve_route(route: str, *, authenticated: bool) -> str:
    """Return the route actually shown for a request to *route*.

    Protected routes bounce to the login page without credentials, and the
    login page bounces to the dashboard when already signed in.
    """
    path = route.split("?", 1)[0].rstrip("/") or HOME
    if path == HOME:
        return DASHBOARD if authenticated else LOGIN
    if path == LOGIN:
        return DASHBOARD if authenticated else LOGIN
    if path in PROTECTED_ROUTES:
        return path if authenticated else LOGIN
    raise CrmConfigError(f"Unknown route: {route}")


class Navigator:
    """Records where the application is and where it has been."""

    def __init__(self, initial: str = HOME) -> None:
        self._current = initial
        self._history: list[str] = []

    @property
    def current(self) -> str:
        return self._current

    @property
    def history(self) -> list[str]:
        """Routes navigated to, oldest first."""
        return list(self._history)

    def navigate(self, route: str) -> None:
        _logger.debug("Navigate %s -> %s", self._current, route)
        self._current = route
        self._history.append(route)
