"""Alert model."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from trackmykid.models._base import CrmRecord
from trackmykid.normalize import safe_str


class Alert(CrmRecord):
    """A device alert.  ``level`` doubles as the alert's status badge."""

    message: str = ""
    level: str = ""
    created_at: str = ""

    @field_validator("message", "level", "created_at", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)
