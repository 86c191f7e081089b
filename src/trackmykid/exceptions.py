"""Custom exception hierarchy for trackmykid."""

from __future__ import annotations

from typing import Any


class CrmError(Exception):
    """Base exception for all trackmykid errors."""


class CrmConfigError(CrmError):
    """Invalid or missing configuration, or an action the page does not offer."""


class CrmValidationError(CrmError):
    """A form draft failed local validation; no request was sent."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class CrmTransportError(CrmError):
    """Network-level failure (connection refused, DNS, timeout)."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class CrmApiError(CrmError):
    """Server answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        raw: Any = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.raw = raw
        self.endpoint = endpoint
        super().__init__(message)


class CrmAuthenticationError(CrmApiError):
    """Credentials missing, rejected, or expired (HTTP 401 or failed login).

    By the time this is raised for a 401 the client has already cleared
    stored tokens and navigated to the login route.
    """


class CrmForbiddenError(CrmApiError):
    """Authenticated, but not permitted (HTTP 403).

    Unlike :class:`CrmAuthenticationError` the stored credentials stay
    intact.
    """


class CrmNotFoundError(CrmApiError):
    """Endpoint or record does not exist (HTTP 404)."""
