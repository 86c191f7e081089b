"""Device (GPS tracker) model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.models.vehicle import VehicleSummary
from trackmykid.normalize import optional_str, safe_int, safe_str


class Device(CrmRecord):
    """A GPS tracking device, optionally installed in a vehicle.

    ``vehicle`` is the summarized vehicle the API embeds when it joins the
    relation; ``vehicle_id`` is always the authoritative reference.
    """

    imei: str = ""
    sim_number: str = ""
    installation_date: str = ""
    firmware_version: str = ""
    serial_number: str | None = None
    type: str | None = None
    assigned_to: str | None = None
    status: str = ""
    vehicle_id: int | None = None
    installed_by_id: int | None = None
    vehicle: VehicleSummary | None = None

    @field_validator("imei", "sim_number", "installation_date", "firmware_version", "status", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("serial_number", "type", "assigned_to", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return optional_str(value)

    @field_validator("vehicle_id", "installed_by_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)

    @property
    def installation_day(self) -> str:
        """``YYYY-MM-DD`` part of the installation date, as a date input expects."""
        return self.installation_date[:10]


class DeviceForm(CrmForm):
    REQUIRED: ClassVar[tuple[str, ...]] = ("imei", "sim_number", "vehicle_id")
    LABELS: ClassVar[dict[str, str]] = {
        "imei": "IMEI",
        "sim_number": "SIM number",
        "vehicle_id": "Vehicle",
    }

    imei: str = ""
    sim_number: str = ""
    installation_date: str = ""
    firmware_version: str = ""
    vehicle_id: int | None = None

    @field_validator("imei", "sim_number", "firmware_version", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("installation_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> str:
        return safe_str(value)[:10]

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _coerce_vehicle_id(cls, value: Any) -> int | None:
        return safe_int(value)
