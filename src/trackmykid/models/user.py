"""CRM staff user model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.normalize import safe_str


class User(CrmRecord):
    name: str = ""
    email: str = ""
    role: str = ""
    status: str = ""

    @field_validator("name", "email", "role", "status", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)


class UserForm(CrmForm):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "email")

    name: str = ""
    email: str = ""
    role: str = "user"
    status: str = "active"

    @field_validator("name", "email", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> str:
        return safe_str(value) or "user"

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return safe_str(value) or "active"
