"""Installation job model."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from trackmykid.models._base import CrmRecord
from trackmykid.models.vehicle import VehicleSummary
from trackmykid.normalize import safe_int, safe_str


class NamedRef(CrmRecord):
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)


class DeviceRef(CrmRecord):
    imei: str = ""

    @field_validator("imei", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)


class Job(CrmRecord):
    """A device installation job."""

    job_type: str = ""
    notes: str = ""
    scheduled_at: str = ""
    status: str = ""
    customer_id: int | None = None
    device_id: int | None = None
    vehicle_id: int | None = None
    created_by_id: int | None = None
    assigned_to_id: int | None = None
    customer: NamedRef | None = None
    device: DeviceRef | None = None
    vehicle: VehicleSummary | None = None
    assigned_to: NamedRef | None = None

    @field_validator("job_type", "notes", "scheduled_at", "status", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("customer_id", "device_id", "vehicle_id", "created_by_id", "assigned_to_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)

    @property
    def customer_name(self) -> str:
        return self.customer.name if self.customer is not None else ""

    @property
    def device_imei(self) -> str:
        return self.device.imei if self.device is not None else ""

    @property
    def vehicle_registration(self) -> str:
        return self.vehicle.registration_no if self.vehicle is not None else ""

    @property
    def assignee_name(self) -> str:
        return self.assigned_to.name if self.assigned_to is not None else ""
