"""Domain models for customer (lead), washer and expense records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional

LeadType = Literal["One-time", "Monthly"]
LeadStatus = Literal["New", "Converted", "Cancelled"]
ServiceType = Literal["Interior", "Exterior"]
OneTimeStatus = Literal["pending", "completed", "cancelled"]
ScheduledStatus = Literal["scheduled", "completed", "missed", "cancelled"]
HistoryStatus = Literal["pending", "completed", "notcompleted", "in-progress", "cancelled"]
AttendanceStatus = Literal["present", "incomplete", "absent"]

LEAD_SOURCES = ("Pamphlet", "WhatsApp", "Referral", "Walk-in", "Other", "Social Media", "Website")


@dataclass(slots=True)
class OneTimeWash:
    wash_type: Optional[str]
    amount: Optional[float] = None
    scheduled_date: Optional[datetime] = None
    washer: Optional[str] = None
    status: OneTimeStatus = "pending"
    service_type: ServiceType = "Exterior"
    duration: Optional[int] = None
    paid: bool = False
    assigned_at: Optional[datetime] = None


@dataclass(slots=True)
class ScheduledWash:
    wash_number: int
    scheduled_date: datetime
    scheduled_time: str = "10:00"
    status: ScheduledStatus = "scheduled"
    completed_date: Optional[datetime] = None
    washer: Optional[str] = None
    feedback: str = ""
    amount: Optional[float] = None
    paid: bool = False
    service_type: ServiceType = "Exterior"
    duration: Optional[int] = None


@dataclass(slots=True)
class MonthlySubscription:
    package_type: str
    total_washes: int
    monthly_price: float
    start_date: datetime
    end_date: datetime
    custom_plan_name: str = ""
    total_interior_washes: int = 0
    used_interior_washes: int = 0
    completed_washes: int = 0
    is_active: bool = True
    scheduled_washes: List[ScheduledWash] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.package_type or self.custom_plan_name or "Monthly"


@dataclass(slots=True)
class WashHistoryEntry:
    """One row of the wash log; the system of record for completed/paid revenue."""

    wash_type: str
    date: Optional[datetime]
    amount: float = 0.0
    washer: Optional[str] = None
    feedback: str = ""
    paid: bool = False
    wash_status: HistoryStatus = "pending"
    service_type: ServiceType = "Exterior"
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = None


@dataclass(slots=True)
class Reminder:
    date: Optional[datetime]
    note: str = ""


@dataclass(slots=True)
class Lead:
    """A customer or prospective customer with its three wash representations."""

    record_id: str
    lead_id: int
    lead_type: LeadType
    lead_source: str
    customer_name: str
    phone: str
    area: str
    created_at: datetime
    car_model: Optional[str] = None
    vehicle_number: Optional[str] = None
    notes: Optional[str] = None
    status: LeadStatus = "New"
    coordinates: tuple[float, float] = (0.0, 0.0)
    assigned_washer: Optional[str] = None
    one_time_wash: Optional[OneTimeWash] = None
    monthly_subscription: Optional[MonthlySubscription] = None
    wash_history: List[WashHistoryEntry] = field(default_factory=list)
    reminder: Optional[Reminder] = None
    version: int = 0

    def has_wash_records(self) -> bool:
        scheduled = self.monthly_subscription.scheduled_washes if self.monthly_subscription else []
        return bool(self.wash_history or self.one_time_wash or scheduled)


@dataclass(slots=True)
class AttendanceRecord:
    date: datetime
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    duration: float = 0.0
    status: AttendanceStatus = "incomplete"


@dataclass(slots=True)
class SalaryRecord:
    base_salary: float = 0.0
    effective_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class Washer:
    record_id: str
    washer_id: int
    name: str
    phone: str
    email: Optional[str] = None
    area: Optional[str] = None
    status: Literal["Active", "Inactive"] = "Active"
    attendance: List[AttendanceRecord] = field(default_factory=list)
    salary: Optional[SalaryRecord] = None
    created_at: Optional[datetime] = None
    version: int = 0


@dataclass(slots=True)
class Expense:
    record_id: str
    washer_name: str
    amount: float
    reason: str
    date: datetime
    created_by: str = "Admin"
    version: int = 0
