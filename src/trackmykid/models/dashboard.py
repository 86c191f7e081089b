"""Dashboard totals."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DashboardStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_customers: int = 0
    total_devices: int = 0
    total_vehicles: int = 0
    total_kids: int = 0
    total_subscriptions: int = 0
    total_jobs: int = 0
    total_alerts: int = 0
