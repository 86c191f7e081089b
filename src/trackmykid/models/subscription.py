"""Tracking subscription model and form."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_validator

from trackmykid.models._base import CrmForm, CrmRecord
from trackmykid.normalize import safe_float, safe_int, safe_str

SUBSCRIPTION_STATUSES: tuple[str, ...] = ("TRIAL", "ACTIVE", "GRACE", "EXPIRED", "SUSPENDED", "CANCELLED")


class Subscription(CrmRecord):
    customer_name: str = ""
    plan_name: str = ""
    status: str = "unknown"
    start_date: str = ""
    end_date: str = ""

    @field_validator("customer_name", "plan_name", "start_date", "end_date", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return value if isinstance(value, str) and value else "unknown"


class SubscriptionForm(CrmForm):
    """Draft for a new subscription.

    ``amount`` is an optional override of the plan price; leaving it empty
    lets the server apply the plan default.
    """

    REQUIRED: ClassVar[tuple[str, ...]] = ("customer_id", "plan_id")
    LABELS: ClassVar[dict[str, str]] = {"customer_id": "Customer", "plan_id": "Plan"}

    customer_id: int | None = None
    plan_id: int | None = None
    status: str = "ACTIVE"
    start_date: str = ""
    auto_renew: bool = False
    grace_days: int = 3
    amount: float | None = None
    device_ids: list[int] = Field(default_factory=list)
    kid_ids: list[int] = Field(default_factory=list)

    @field_validator("customer_id", "plan_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("grace_days", mode="before")
    @classmethod
    def _coerce_grace_days(cls, value: Any) -> int:
        parsed = safe_int(value)
        return 3 if parsed is None else max(parsed, 0)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        status = safe_str(value).upper() or "ACTIVE"
        if status not in SUBSCRIPTION_STATUSES:
            raise ValueError(f"must be one of {', '.join(SUBSCRIPTION_STATUSES)}")
        return status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if not self.start_date:
            payload.pop("startDate")
        if self.amount is None:
            payload.pop("amount")
        return payload
