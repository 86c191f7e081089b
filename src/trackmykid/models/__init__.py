"""Data models for CRM API records."""

from trackmykid.models._base import CrmForm, CrmRecord, RecordId
from trackmykid.models.alert import Alert
from trackmykid.models.customer import Customer, CustomerForm
from trackmykid.models.dashboard import DashboardStats
from trackmykid.models.device import Device, DeviceForm
from trackmykid.models.invoice import Invoice, InvoiceForm
from trackmykid.models.job import DeviceRef, Job, NamedRef
from trackmykid.models.kid import Kid, KidForm
from trackmykid.models.subscription import SUBSCRIPTION_STATUSES, Subscription, SubscriptionForm
from trackmykid.models.telemetry import TelemetryPoint
from trackmykid.models.token import LoginResponse
from trackmykid.models.user import User, UserForm
from trackmykid.models.vehicle import Vehicle, VehicleForm, VehicleSummary

__all__ = [
    "Alert",
    "CrmForm",
    "CrmRecord",
    "Customer",
    "CustomerForm",
    "DashboardStats",
    "Device",
    "DeviceForm",
    "DeviceRef",
    "Invoice",
    "InvoiceForm",
    "Job",
    "Kid",
    "KidForm",
    "LoginResponse",
    "NamedRef",
    "RecordId",
    "SUBSCRIPTION_STATUSES",
    "Subscription",
    "SubscriptionForm",
    "TelemetryPoint",
    "User",
    "UserForm",
    "Vehicle",
    "VehicleForm",
    "VehicleSummary",
]
