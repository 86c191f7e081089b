"""Per-entity page configuration.

Every list page in the CRM is the same controller parameterized by one
:class:`EntitySpec`: where to fetch, how to turn rows into records, which
columns to show, what the client-side filter looks at, and which form (if
any) edits the entity.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from trackmykid.config import CrmConfig
from trackmykid.exceptions import CrmConfigError, CrmValidationError
from trackmykid.models import (
    Alert,
    CrmForm,
    CrmRecord,
    Customer,
    CustomerForm,
    Device,
    DeviceForm,
    Invoice,
    InvoiceForm,
    Job,
    Kid,
    KidForm,
    Subscription,
    SubscriptionForm,
    TelemetryPoint,
    User,
    UserForm,
    Vehicle,
    VehicleForm,
)
from trackmykid.session import SessionContext

#: Related records keyed by ``str(id)``.
Lookup = Mapping[str, CrmRecord]

PayloadHook = Callable[[dict[str, Any], SessionContext, CrmConfig], dict[str, Any]]


def lookup_key(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Column:
    label: str
    render: Callable[[Any, Lookup], str]


def field_column(label: str, name: str) -> Column:
    return Column(label, lambda record, _lookup: record.display(name))


@dataclass(frozen=True)
class RelatedSpec:
    """A second list loaded to label foreign keys and feed form dropdowns."""

    endpoint: str
    model: type[CrmRecord]
    haystack: Callable[[Any], Iterable[Any]]


@dataclass(frozen=True)
class EntitySpec:
    name: str
    title: str
    singular: str
    endpoint: str
    model: type[CrmRecord]
    columns: tuple[Column, ...]
    haystack: Callable[[Any, Lookup], Iterable[Any]]
    form: type[CrmForm] | None = None
    editable: bool = True
    deletable: bool = True
    related: RelatedSpec | None = None
    prepare_payload: PayloadHook | None = None
    describe: Callable[[Any], str] | None = None

    @property
    def creatable(self) -> bool:
        return self.form is not None

    def confirm_message(self, record: CrmRecord) -> str:
        label = self.describe(record) if self.describe is not None else ""
        if not label:
            label = f"{self.singular} #{record.id}"
        return f"Delete {label}?"


# ---------------------------------------------------------------------------
# Payload hooks
# ---------------------------------------------------------------------------


def _attach_user_id(payload: dict[str, Any], context: SessionContext, _config: CrmConfig) -> dict[str, Any]:
    user_id = context.auth_user_id()
    if user_id is None:
        raise CrmValidationError("Cannot determine your user id from the session. Please login again, then retry.")
    return {**payload, "userId": user_id}


def _attach_installer(payload: dict[str, Any], _context: SessionContext, config: CrmConfig) -> dict[str, Any]:
    return {**payload, "installedById": config.default_installed_by_id}


# ---------------------------------------------------------------------------
# Relation labels
# ---------------------------------------------------------------------------


def _customer_label(vehicle: Vehicle, lookup: Lookup) -> str:
    customer = lookup.get(lookup_key(vehicle.customer_id))
    if isinstance(customer, Customer):
        return f"{customer.name} ({customer.email})" if customer.email else customer.name
    return f"ID: {vehicle.customer_id}" if vehicle.customer_id is not None else "-"


def _vehicle_label(device: Device, lookup: Lookup) -> str:
    if device.vehicle is not None and device.vehicle.registration_no:
        return device.vehicle.registration_no
    vehicle = lookup.get(lookup_key(device.vehicle_id))
    if isinstance(vehicle, Vehicle) and vehicle.registration_no:
        return vehicle.registration_no
    return f"ID: {device.vehicle_id}" if device.vehicle_id is not None else "-"


def _vehicle_haystack(vehicle: Vehicle, lookup: Lookup) -> list[Any]:
    customer = lookup.get(lookup_key(vehicle.customer_id))
    parts: list[Any] = [
        vehicle.id,
        vehicle.registration_no,
        vehicle.model,
        vehicle.make,
        vehicle.year,
        vehicle.color,
        vehicle.vin,
        vehicle.customer_id,
    ]
    if isinstance(customer, Customer):
        parts.extend([customer.name, customer.email])
    return parts


def _device_haystack(device: Device, lookup: Lookup) -> list[Any]:
    return [
        device.id,
        device.imei,
        device.sim_number,
        device.firmware_version,
        device.serial_number,
        device.type,
        device.assigned_to,
        _vehicle_label(device, lookup),
    ]


def _or_dash(value: Any) -> str:
    return "-" if value in (None, "") else str(value)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

CUSTOMERS = EntitySpec(
    name="customers",
    title="Customers",
    singular="customer",
    endpoint="/api/customers",
    model=Customer,
    columns=(
        field_column("ID", "id"),
        field_column("Name", "name"),
        field_column("Contact Person", "contact_person"),
        field_column("Email", "email"),
        field_column("Phone", "phone"),
        field_column("Address", "address"),
        field_column("Status", "status"),
    ),
    haystack=lambda c, _lookup: [c.name, c.contact_person, c.email, c.phone, c.address],
    form=CustomerForm,
    prepare_payload=_attach_user_id,
    describe=lambda c: c.name,
)

VEHICLES = EntitySpec(
    name="vehicles",
    title="Vehicles",
    singular="vehicle",
    endpoint="/api/vehicles",
    model=Vehicle,
    columns=(
        field_column("ID", "id"),
        field_column("Registration", "registration_no"),
        field_column("Model", "model"),
        field_column("Make", "make"),
        field_column("Year", "year"),
        field_column("Color", "color"),
        field_column("VIN", "vin"),
        Column("Customer", _customer_label),
    ),
    haystack=_vehicle_haystack,
    form=VehicleForm,
    related=RelatedSpec(
        endpoint="/api/customers",
        model=Customer,
        haystack=lambda c: [c.name, c.email],
    ),
    describe=lambda v: v.registration_no,
)

DEVICES = EntitySpec(
    name="devices",
    title="Devices",
    singular="device",
    endpoint="/api/devices",
    model=Device,
    columns=(
        field_column("ID", "id"),
        field_column("IMEI", "imei"),
        field_column("SIM", "sim_number"),
        Column("Installed", lambda d, _lookup: _or_dash(d.installation_day)),
        field_column("Firmware", "firmware_version"),
        Column("Vehicle", _vehicle_label),
    ),
    haystack=_device_haystack,
    form=DeviceForm,
    related=RelatedSpec(
        endpoint="/api/vehicles",
        model=Vehicle,
        haystack=lambda v: [v.registration_no, v.make, v.model, v.id, v.year, v.color, v.vin],
    ),
    prepare_payload=_attach_installer,
    describe=lambda d: f"device {d.imei}" if d.imei else "",
)

JOBS = EntitySpec(
    name="jobs",
    title="Jobs",
    singular="job",
    endpoint="/api/jobs",
    model=Job,
    columns=(
        field_column("ID", "id"),
        field_column("Job Type", "job_type"),
        Column("Customer", lambda j, _lookup: _or_dash(j.customer_name)),
        Column("Vehicle", lambda j, _lookup: _or_dash(j.vehicle_registration)),
        Column("Device", lambda j, _lookup: _or_dash(j.device_imei)),
        Column("Scheduled", lambda j, _lookup: _or_dash(j.scheduled_at[:10])),
        Column("Assigned To", lambda j, _lookup: _or_dash(j.assignee_name)),
        field_column("Status", "status"),
    ),
    haystack=lambda j, _lookup: [j.job_type, j.id, j.customer_name],
    editable=False,
    deletable=False,
)

KIDS = EntitySpec(
    name="kids",
    title="Kids",
    singular="kid",
    endpoint="/api/kids",
    model=Kid,
    columns=(
        field_column("ID", "id"),
        field_column("Name", "name"),
        field_column("Parent ID", "parent_id"),
        field_column("Age", "age"),
    ),
    haystack=lambda k, _lookup: [k.name, k.parent_id],
    form=KidForm,
    describe=lambda k: k.name,
)

SUBSCRIPTIONS = EntitySpec(
    name="subscriptions",
    title="Subscriptions",
    singular="subscription",
    endpoint="/api/subscriptions",
    model=Subscription,
    columns=(
        field_column("ID", "id"),
        field_column("Customer", "customer_name"),
        field_column("Plan", "plan_name"),
        field_column("Status", "status"),
        field_column("Start Date", "start_date"),
        field_column("End Date", "end_date"),
    ),
    haystack=lambda s, _lookup: [s.customer_name, s.plan_name, s.status, s.start_date, s.end_date],
    form=SubscriptionForm,
    editable=False,
)

INVOICES = EntitySpec(
    name="invoices",
    title="Invoices",
    singular="invoice",
    endpoint="/api/invoices",
    model=Invoice,
    columns=(
        field_column("ID", "id"),
        field_column("Number", "number"),
        field_column("Customer", "customer"),
        field_column("Amount", "amount"),
        field_column("Status", "status"),
    ),
    haystack=lambda i, _lookup: [i.number, i.customer],
    form=InvoiceForm,
    describe=lambda i: f"invoice {i.number}" if i.number else "",
)

ALERTS = EntitySpec(
    name="alerts",
    title="Alerts",
    singular="alert",
    endpoint="/api/alerts",
    model=Alert,
    columns=(
        field_column("ID", "id"),
        field_column("Message", "message"),
        field_column("Level", "level"),
        field_column("Created", "created_at"),
    ),
    haystack=lambda a, _lookup: [a.message, a.level],
    editable=False,
)

USERS = EntitySpec(
    name="users",
    title="Users",
    singular="user",
    endpoint="/api/users",
    model=User,
    columns=(
        field_column("ID", "id"),
        field_column("Name", "name"),
        field_column("Email", "email"),
        field_column("Role", "role"),
        field_column("Status", "status"),
    ),
    haystack=lambda u, _lookup: [u.name, u.email],
    form=UserForm,
    describe=lambda u: f"user {u.email}" if u.email else "",
)

_TELEMETRY_COLUMNS = (
    field_column("ID", "id"),
    field_column("Device", "device_id"),
    field_column("Latitude", "lat"),
    field_column("Longitude", "lng"),
    field_column("Timestamp", "ts"),
)

TELEMETRY = EntitySpec(
    name="telemetry",
    title="Telemetry",
    singular="telemetry point",
    endpoint="/api/telemetry",
    model=TelemetryPoint,
    columns=_TELEMETRY_COLUMNS,
    haystack=lambda t, _lookup: [t.device_id],
    editable=False,
    deletable=False,
)

DEVICE_TRACKINGS = EntitySpec(
    name="device-trackings",
    title="Device Trackings",
    singular="track",
    endpoint="/api/device-trackings",
    model=TelemetryPoint,
    columns=_TELEMETRY_COLUMNS,
    haystack=lambda t, _lookup: [t.device_id],
    editable=False,
    deletable=False,
)

ENTITIES: dict[str, EntitySpec] = {
    spec.name: spec
    for spec in (
        CUSTOMERS,
        VEHICLES,
        DEVICES,
        JOBS,
        KIDS,
        SUBSCRIPTIONS,
        INVOICES,
        ALERTS,
        USERS,
        TELEMETRY,
        DEVICE_TRACKINGS,
    )
}


def get_entity(name: str) -> EntitySpec:
    try:
        return ENTITIES[name]
    except KeyError:
        raise CrmConfigError(f"Unknown entity {name!r}; expected one of {', '.join(ENTITIES)}") from None
