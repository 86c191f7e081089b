"""Telemetry point model (shared by telemetry and device tracking lists)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from trackmykid.models._base import CrmRecord
from trackmykid.normalize import optional_str, parse_timestamp, safe_float


class TelemetryPoint(CrmRecord):
    """One reported position of a device.

    Numeric coordinates are ``None`` when absent or unparseable.  ``0`` is
    a real coordinate and is kept.
    """

    device_id: str | None = None
    lat: float | None = Field(default=None, validation_alias=AliasChoices("lat", "latitude"))
    lng: float | None = Field(default=None, validation_alias=AliasChoices("lng", "lon", "longitude"))
    ts: str | None = Field(default=None, validation_alias=AliasChoices("ts", "timestamp", "createdAt"))

    @field_validator("device_id", "ts", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return optional_str(value)

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @property
    def has_coords(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def timestamp(self) -> datetime | None:
        return parse_timestamp(self.ts)
