"""Customer model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.normalize import safe_int, safe_str


class Customer(CrmRecord):
    """A customer account (a parent, school or fleet operator)."""

    name: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    status: str = "active"
    user_id: int | None = None

    @field_validator("name", "contact_person", "email", "phone", "address", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return safe_str(value) or "active"

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user_id(cls, value: Any) -> int | None:
        return safe_int(value)


class CustomerForm(CrmForm):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "email")

    name: str = ""
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""

    @field_validator("name", "contact_person", "phone", "email", "address", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)
