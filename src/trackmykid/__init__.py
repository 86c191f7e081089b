"""trackmykid - Async Python client for the TrackMyKid CRM API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("trackmykid")
except PackageNotFoundError:
    __version__ = "0+local"
from trackmykid.client import CrmClient
from trackmykid.config import CrmConfig
from trackmykid.dashboard import Dashboard
from trackmykid.exceptions import (
    CrmApiError,
    CrmAuthenticationError,
    CrmConfigError,
    CrmError,
    CrmForbiddenError,
    CrmNotFoundError,
    CrmTransportError,
    CrmValidationError,
)
from trackmykid.models import (
    Alert,
    Customer,
    DashboardStats,
    Device,
    Invoice,
    Job,
    Kid,
    LoginResponse,
    Subscription,
    TelemetryPoint,
    User,
    Vehicle,
)
from trackmykid.pages import ENTITIES, EntitySpec, ListPage, get_entity
from trackmykid.session import FileStorage, MemoryStorage, SessionContext
from trackmykid.telemetry import TelemetryMap, latest_positions

__all__ = [
    "__version__",
    "Alert",
    "CrmApiError",
    "CrmAuthenticationError",
    "CrmClient",
    "CrmConfig",
    "CrmConfigError",
    "CrmError",
    "CrmForbiddenError",
    "CrmNotFoundError",
    "CrmTransportError",
    "CrmValidationError",
    "Customer",
    "Dashboard",
    "DashboardStats",
    "Device",
    "ENTITIES",
    "EntitySpec",
    "FileStorage",
    "Invoice",
    "Job",
    "Kid",
    "ListPage",
    "LoginResponse",
    "MemoryStorage",
    "SessionContext",
    "Subscription",
    "TelemetryMap",
    "TelemetryPoint",
    "User",
    "Vehicle",
    "get_entity",
    "latest_positions",
]
