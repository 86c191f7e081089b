"""Kid model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.normalize import safe_int, safe_str


class Kid(CrmRecord):
    name: str = ""
    parent_id: int | None = None
    age: int | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("parent_id", "age", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)


class KidForm(CrmForm):
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "parent_id")
    LABELS: ClassVar[dict[str, str]] = {"parent_id": "Parent"}

    name: str = ""
    parent_id: int | None = None
    age: int | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("parent_id", "age", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)
