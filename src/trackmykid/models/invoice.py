"""Invoice model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.normalize import safe_float, safe_str


class Invoice(CrmRecord):
    number: str = ""
    customer: str = ""
    amount: float | None = None
    status: str = ""

    @field_validator("number", "customer", "status", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float | None:
        return safe_float(value)


class InvoiceForm(CrmForm):
    REQUIRED: ClassVar[tuple[str, ...]] = ("number",)
    LABELS: ClassVar[dict[str, str]] = {"number": "Invoice number"}

    number: str = ""
    customer: str = ""
    amount: float = 0.0
    status: str = "unpaid"

    @field_validator("number", "customer", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        parsed = safe_float(value)
        return 0.0 if parsed is None else parsed

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return safe_str(value) or "unpaid"
