"""Conversion of domain objects into response schemas."""

from __future__ import annotations

from typing import Mapping, Optional

from ..models.domain import (
    AttendanceRecord,
    Expense,
    Lead,
    MonthlySubscription,
    OneTimeWash,
    SalaryRecord,
    ScheduledWash,
    WashHistoryEntry,
    Washer,
)
from ..schemas.leads import (
    LeadModel,
    OneTimeWashModel,
    ScheduledWashEntryModel,
    SubscriptionModel,
    WasherRefModel,
    WashHistoryEntryModel,
)
from ..schemas.schedule import ScheduledWashModel
from ..schemas.washers import AttendanceModel, ExpenseModel, SalaryModel, WasherModel
from ..services.scheduling.models import Occurrence
from ..services.time_rules import to_iso

WasherNames = Mapping[str, str]


def washer_ref(washer_id: Optional[str], names: WasherNames) -> Optional[WasherRefModel]:
    if not washer_id:
        return None
    return WasherRefModel(id=washer_id, name=names.get(washer_id, "Unknown washer"))


def occurrence_model(occurrence: Occurrence, names: WasherNames) -> ScheduledWashModel:
    lead = occurrence.lead
    return ScheduledWashModel(
        id=occurrence.reference,
        customerName=lead.customer_name,
        phone=lead.phone,
        area=lead.area,
        carModel=lead.car_model,
        washType=occurrence.wash_type,
        scheduledDate=to_iso(occurrence.date),
        washer=washer_ref(occurrence.resolved_washer, names),
        leadId=lead.lead_id,
        leadType=lead.lead_type,
        status=occurrence.display_status or "pending",
        rawStatus=occurrence.raw_status,
        source=occurrence.source,
    )


def one_time_model(wash: OneTimeWash, names: WasherNames) -> OneTimeWashModel:
    return OneTimeWashModel(
        washType=wash.wash_type,
        amount=wash.amount,
        scheduledDate=to_iso(wash.scheduled_date),
        washer=washer_ref(wash.washer, names),
        status=wash.status,
        serviceType=wash.service_type,
        duration=wash.duration,
        paid=wash.paid,
        assignedAt=to_iso(wash.assigned_at),
    )


def scheduled_wash_model(wash: ScheduledWash, names: WasherNames) -> ScheduledWashEntryModel:
    return ScheduledWashEntryModel(
        washNumber=wash.wash_number,
        scheduledDate=to_iso(wash.scheduled_date),
        scheduledTime=wash.scheduled_time,
        status=wash.status,
        completedDate=to_iso(wash.completed_date),
        washer=washer_ref(wash.washer, names),
        feedback=wash.feedback,
        amount=wash.amount,
        paid=wash.paid,
        serviceType=wash.service_type,
        duration=wash.duration,
    )


def subscription_model(subscription: MonthlySubscription, names: WasherNames) -> SubscriptionModel:
    return SubscriptionModel(
        packageType=subscription.label,
        customPlanName=subscription.custom_plan_name,
        totalWashes=subscription.total_washes,
        totalInteriorWashes=subscription.total_interior_washes,
        usedInteriorWashes=subscription.used_interior_washes,
        completedWashes=subscription.completed_washes,
        monthlyPrice=subscription.monthly_price,
        startDate=to_iso(subscription.start_date),
        endDate=to_iso(subscription.end_date),
        isActive=subscription.is_active,
        scheduledWashes=[scheduled_wash_model(wash, names) for wash in subscription.scheduled_washes],
    )


def history_model(index: int, entry: WashHistoryEntry, names: WasherNames) -> WashHistoryEntryModel:
    return WashHistoryEntryModel(
        index=index,
        washType=entry.wash_type,
        date=to_iso(entry.date),
        amount=entry.amount,
        washer=washer_ref(entry.washer, names),
        feedback=entry.feedback,
        paid=entry.paid,
        washStatus=entry.wash_status,
        serviceType=entry.service_type,
        startTime=to_iso(entry.start_time),
        endTime=to_iso(entry.end_time),
        duration=entry.duration,
    )


def lead_model(lead: Lead, names: WasherNames) -> LeadModel:
    return LeadModel(
        id=lead.lead_id,
        recordId=lead.record_id,
        leadType=lead.lead_type,
        leadSource=lead.lead_source,
        customerName=lead.customer_name,
        phone=lead.phone,
        area=lead.area,
        carModel=lead.car_model,
        vehicleNumber=lead.vehicle_number,
        notes=lead.notes,
        status=lead.status,
        coordinates=list(lead.coordinates),
        assignedWasher=washer_ref(lead.assigned_washer, names),
        oneTimeWash=one_time_model(lead.one_time_wash, names) if lead.one_time_wash else None,
        monthlySubscription=(
            subscription_model(lead.monthly_subscription, names) if lead.monthly_subscription else None
        ),
        washHistory=[history_model(index, entry, names) for index, entry in enumerate(lead.wash_history)],
        createdAt=to_iso(lead.created_at),
        version=lead.version,
    )


def salary_model(salary: Optional[SalaryRecord]) -> Optional[SalaryModel]:
    if salary is None:
        return None
    return SalaryModel(
        baseSalary=salary.base_salary,
        effectiveDate=to_iso(salary.effective_date),
        updatedAt=to_iso(salary.updated_at),
    )


def washer_model(washer: Washer) -> WasherModel:
    return WasherModel(
        id=washer.washer_id,
        recordId=washer.record_id,
        name=washer.name,
        phone=washer.phone,
        email=washer.email,
        area=washer.area,
        status=washer.status,
        salary=salary_model(washer.salary),
        createdAt=to_iso(washer.created_at),
    )


def attendance_model(record: AttendanceRecord) -> AttendanceModel:
    return AttendanceModel(
        date=to_iso(record.date),
        timeIn=to_iso(record.time_in),
        timeOut=to_iso(record.time_out),
        duration=record.duration,
        status=record.status,
    )


def expense_model(expense: Expense) -> ExpenseModel:
    return ExpenseModel(
        id=expense.record_id,
        washerName=expense.washer_name,
        amount=expense.amount,
        reason=expense.reason,
        date=to_iso(expense.date),
        createdBy=expense.created_by,
    )
