"""Vehicle model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.normalize import safe_int, safe_str


class Vehicle(CrmRecord):
    """A tracked vehicle, owned by a customer."""

    registration_no: str = ""
    model: str = ""
    make: str = ""
    year: int | None = None
    color: str = ""
    vin: str = ""
    customer_id: int | None = None

    @field_validator("registration_no", "model", "make", "color", "vin", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("year", "customer_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)


class VehicleSummary(CrmRecord):
    """Vehicle fields embedded in device and job records."""

    registration_no: str = ""
    model: str = ""
    make: str = ""

    @field_validator("registration_no", "model", "make", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)


class VehicleForm(CrmForm):
    REQUIRED: ClassVar[tuple[str, ...]] = ("registration_no", "model", "make", "customer_id")
    LABELS: ClassVar[dict[str, str]] = {
        "registration_no": "Registration number",
        "customer_id": "Customer",
        "vin": "VIN",
    }

    registration_no: str = ""
    model: str = ""
    make: str = ""
    year: int | None = None
    color: str = ""
    vin: str = ""
    customer_id: int | None = None

    @field_validator("registration_no", "model", "make", "color", "vin", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("year", "customer_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)
