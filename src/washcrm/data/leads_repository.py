"""Data access helpers for loading and saving customer (lead) records."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..errors import RecordNotFoundError
from ..models.domain import (
    Lead,
    MonthlySubscription,
    OneTimeWash,
    Reminder,
    ScheduledWash,
    WashHistoryEntry,
)
from ..persistence import database
from ..persistence.base import DateSpan
from ..services.time_rules import calendar_day, coerce_datetime, start_of_day, to_iso, utc_now

COLLECTION = "leads"
COUNTER = "leadId"


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _one_time_from_document(raw: dict) -> OneTimeWash:
    return OneTimeWash(
        wash_type=raw.get("washType"),
        amount=_coerce_float(raw.get("amount")),
        scheduled_date=coerce_datetime(raw.get("scheduledDate")),
        washer=raw.get("washer") or None,
        status=raw.get("status") or "pending",
        service_type=raw.get("serviceType") or "Exterior",
        duration=_coerce_int(raw.get("duration")),
        paid=bool(raw.get("paid", False)),
        assigned_at=coerce_datetime(raw.get("assignedAt")),
    )


def _scheduled_from_document(raw: dict, position: int) -> ScheduledWash:
    return ScheduledWash(
        wash_number=_coerce_int(raw.get("washNumber")) or position + 1,
        scheduled_date=coerce_datetime(raw.get("scheduledDate")),
        scheduled_time=raw.get("scheduledTime") or "10:00",
        status=raw.get("status") or "scheduled",
        completed_date=coerce_datetime(raw.get("completedDate")),
        washer=raw.get("washer") or None,
        feedback=raw.get("feedback") or "",
        amount=_coerce_float(raw.get("amount")),
        paid=bool(raw.get("paid", False)),
        service_type=raw.get("serviceType") or "Exterior",
        duration=_coerce_int(raw.get("duration")),
    )


def _subscription_from_document(raw: dict) -> MonthlySubscription:
    return MonthlySubscription(
        package_type=raw.get("packageType") or "",
        custom_plan_name=raw.get("customPlanName") or "",
        total_washes=_coerce_int(raw.get("totalWashes")) or 0,
        total_interior_washes=_coerce_int(raw.get("totalInteriorWashes")) or 0,
        used_interior_washes=_coerce_int(raw.get("usedInteriorWashes")) or 0,
        completed_washes=_coerce_int(raw.get("completedWashes")) or 0,
        monthly_price=_coerce_float(raw.get("monthlyPrice")) or 0.0,
        start_date=coerce_datetime(raw.get("startDate")),
        end_date=coerce_datetime(raw.get("endDate")),
        is_active=bool(raw.get("isActive", True)),
        scheduled_washes=[
            _scheduled_from_document(item, index) for index, item in enumerate(raw.get("scheduledWashes") or [])
        ],
    )


def _history_from_document(raw: dict) -> WashHistoryEntry:
    return WashHistoryEntry(
        wash_type=raw.get("washType") or "",
        date=coerce_datetime(raw.get("date")),
        amount=_coerce_float(raw.get("amount")) or 0.0,
        washer=raw.get("washer") or None,
        feedback=raw.get("feedback") or "",
        paid=bool(raw.get("paid", False)),
        wash_status=raw.get("washStatus") or "pending",
        service_type=raw.get("serviceType") or "Exterior",
        start_time=coerce_datetime(raw.get("startTime")),
        end_time=coerce_datetime(raw.get("endTime")),
        duration=_coerce_int(raw.get("duration")),
    )


def lead_from_document(document: dict) -> Lead:
    location = document.get("location") or {}
    coordinates = location.get("coordinates") or [0.0, 0.0]
    reminder = document.get("reminder")
    return Lead(
        record_id=document["_id"],
        lead_id=int(document["id"]),
        lead_type=document.get("leadType") or "One-time",
        lead_source=document.get("leadSource") or "Other",
        customer_name=(document.get("customerName") or "").strip(),
        phone=(document.get("phone") or "").strip(),
        area=(document.get("area") or "").strip(),
        created_at=coerce_datetime(document.get("createdAt")) or utc_now(),
        car_model=document.get("carModel"),
        vehicle_number=document.get("vehicleNumber"),
        notes=document.get("notes"),
        status=document.get("status") or "New",
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        assigned_washer=document.get("assignedWasher") or None,
        one_time_wash=_one_time_from_document(document["oneTimeWash"]) if document.get("oneTimeWash") else None,
        monthly_subscription=(
            _subscription_from_document(document["monthlySubscription"])
            if document.get("monthlySubscription")
            else None
        ),
        wash_history=[_history_from_document(item) for item in document.get("washHistory") or []],
        reminder=Reminder(date=coerce_datetime(reminder.get("date")), note=reminder.get("note") or "") if reminder else None,
        version=int(document.get("version", 0)),
    )


def one_time_to_document(wash: OneTimeWash) -> dict:
    return {
        "washType": wash.wash_type,
        "amount": wash.amount,
        "scheduledDate": to_iso(wash.scheduled_date),
        "washer": wash.washer,
        "status": wash.status,
        "serviceType": wash.service_type,
        "duration": wash.duration,
        "paid": wash.paid,
        "assignedAt": to_iso(wash.assigned_at),
    }


def scheduled_to_document(wash: ScheduledWash) -> dict:
    return {
        "washNumber": wash.wash_number,
        "scheduledDate": to_iso(wash.scheduled_date),
        "scheduledTime": wash.scheduled_time,
        "status": wash.status,
        "completedDate": to_iso(wash.completed_date),
        "washer": wash.washer,
        "feedback": wash.feedback,
        "amount": wash.amount,
        "paid": wash.paid,
        "serviceType": wash.service_type,
        "duration": wash.duration,
    }


def subscription_to_document(subscription: MonthlySubscription) -> dict:
    return {
        "packageType": subscription.package_type,
        "customPlanName": subscription.custom_plan_name,
        "totalWashes": subscription.total_washes,
        "totalInteriorWashes": subscription.total_interior_washes,
        "usedInteriorWashes": subscription.used_interior_washes,
        "completedWashes": subscription.completed_washes,
        "monthlyPrice": subscription.monthly_price,
        "startDate": to_iso(subscription.start_date),
        "endDate": to_iso(subscription.end_date),
        "isActive": subscription.is_active,
        "scheduledWashes": [scheduled_to_document(item) for item in subscription.scheduled_washes],
    }


def history_to_document(entry: WashHistoryEntry) -> dict:
    return {
        "washType": entry.wash_type,
        "date": to_iso(entry.date),
        "amount": entry.amount,
        "washer": entry.washer,
        "feedback": entry.feedback,
        "paid": entry.paid,
        "washStatus": entry.wash_status,
        "serviceType": entry.service_type,
        "startTime": to_iso(entry.start_time),
        "endTime": to_iso(entry.end_time),
        "duration": entry.duration,
    }


def lead_to_document(lead: Lead) -> dict:
    first, last = _wash_span(lead)
    return {
        "_id": lead.record_id,
        "id": lead.lead_id,
        "version": lead.version,
        "leadType": lead.lead_type,
        "leadSource": lead.lead_source,
        "customerName": lead.customer_name,
        "phone": lead.phone,
        "area": lead.area,
        "carModel": lead.car_model,
        "vehicleNumber": lead.vehicle_number,
        "notes": lead.notes,
        "status": lead.status,
        "location": {"type": "Point", "coordinates": list(lead.coordinates)},
        "assignedWasher": lead.assigned_washer,
        "oneTimeWash": one_time_to_document(lead.one_time_wash) if lead.one_time_wash else None,
        "monthlySubscription": (
            subscription_to_document(lead.monthly_subscription) if lead.monthly_subscription else None
        ),
        "washHistory": [history_to_document(entry) for entry in lead.wash_history],
        "reminder": {"date": to_iso(lead.reminder.date), "note": lead.reminder.note} if lead.reminder else None,
        "createdAt": to_iso(lead.created_at),
        "span": {"first": to_iso(first), "last": to_iso(last)},
    }


def _wash_span(lead: Lead):
    """Earliest/latest date any occurrence of this lead can take (coarse query bounds)."""
    dates = [start_of_day(calendar_day(lead.created_at)), lead.created_at]
    if lead.one_time_wash and lead.one_time_wash.scheduled_date:
        dates.append(lead.one_time_wash.scheduled_date)
    if lead.monthly_subscription:
        dates.extend(w.scheduled_date for w in lead.monthly_subscription.scheduled_washes if w.scheduled_date)
    dates.extend(entry.date for entry in lead.wash_history if entry.date)
    return min(dates), max(dates)


def _find_document(reference: str | int) -> dict | None:
    store = database.get_document_store()
    text = str(reference).strip()
    if text.isdigit():
        document = store.find_one(COLLECTION, "id", int(text))
        if document is not None:
            return document
    return store.get(COLLECTION, text)


def get_lead(reference: str | int) -> Lead:
    """Load a lead by numeric sequential id or internal record id."""
    document = _find_document(reference)
    if document is None:
        raise RecordNotFoundError("Lead", reference)
    return lead_from_document(document)


def find_lead_by_phone(phone: str, lead_type: Optional[str] = None) -> Lead | None:
    store = database.get_document_store()
    conditions = {"leadType": lead_type} if lead_type else {}
    document = store.find_one(COLLECTION, "phone", phone.strip(), **conditions)
    if document is None:
        return None
    return lead_from_document(document)


def list_leads(overlapping: DateSpan | None = None) -> list[Lead]:
    store = database.get_document_store()
    leads: list[Lead] = []
    for document in store.list(COLLECTION, overlapping=overlapping):
        try:
            leads.append(lead_from_document(document))
        except (KeyError, ValueError, TypeError) as exc:
            logging.warning(f"Skipping invalid lead document {document.get('_id')}: {exc}")
    return sorted(leads, key=lambda lead: lead.lead_id)


def insert_lead(lead: Lead) -> Lead:
    """Persist a new lead, drawing its numeric id from the atomic counter."""
    store = database.get_document_store()
    lead.lead_id = store.next_sequence(COUNTER)
    document = lead_to_document(lead)
    if not lead.record_id:
        document.pop("_id")
    stored = store.insert(COLLECTION, document)
    logging.info(f"Created lead #{lead.lead_id} ({lead.customer_name})")
    return lead_from_document(stored)


def save_lead(lead: Lead) -> Lead:
    """Write the lead back; raises WriteConflictError when it changed since it was read."""
    store = database.get_document_store()
    stored = store.replace(COLLECTION, lead_to_document(lead), expected_version=lead.version)
    lead.version = int(stored["version"])
    return lead


def delete_lead(reference: str | int) -> None:
    lead = get_lead(reference)
    database.get_document_store().delete(COLLECTION, lead.record_id)
    logging.info(f"Deleted lead #{lead.lead_id}")


def iter_history(leads: Iterable[Lead]):
    for lead in leads:
        for index, entry in enumerate(lead.wash_history):
            yield lead, index, entry
