"""Internal constants shared across the library."""

BASE_URL = "https://trackmykid-crm-production.up.railway.app"
USER_AGENT = "trackmykid-crm/python"

DEFAULT_PER_PAGE = 10
RELATED_PER_PAGE = 500
DEFAULT_REQUEST_TIMEOUT = 30.0

#: Placeholder rendered for missing optional values.
PLACEHOLDER = "-"

LOGIN_ENDPOINT = "/api/auth/login"
LEGACY_LOGIN_ENDPOINT = "/auth/login"
DASHBOARD_SUMMARY_ENDPOINT = "/api/dashboard/summary"

# Backend still requires installedById on devices; the UI never asks for it.
DEFAULT_INSTALLED_BY_ID = 1
