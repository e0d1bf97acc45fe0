"""Lead intake, lookup and profile updates."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...data import leads_repository, washers_repository
from ...errors import WashValidationError
from ...models.domain import LEAD_SOURCES, Lead, OneTimeWash
from ...config import settings
from ..time_rules import parse_datetime, utc_now

LEAD_TYPES = ("One-time", "Monthly")
LEAD_STATUSES = ("New", "Converted", "Cancelled")
REQUIRED_FIELDS = ("customerName", "phone", "area", "carModel", "leadType", "leadSource")


def _validate_classification(lead_type: Optional[str], lead_source: Optional[str], status: Optional[str]) -> None:
    if lead_type is not None and lead_type not in LEAD_TYPES:
        raise WashValidationError(f"Invalid leadType '{lead_type}'")
    if lead_source is not None and lead_source not in LEAD_SOURCES:
        raise WashValidationError(f"Invalid leadSource '{lead_source}'")
    if status is not None and status not in LEAD_STATUSES:
        raise WashValidationError(f"Invalid status '{status}'")


def create_lead(payload: dict[str, Any]) -> tuple[Lead, bool]:
    """Create a lead from intake data. Returns ``(lead, created)``.

    A One-time lead whose phone number is already on file returns the existing
    record with ``created = False``.
    """
    missing = [name for name in REQUIRED_FIELDS if not str(payload.get(name) or "").strip()]
    if missing:
        raise WashValidationError(f"Missing required fields: {', '.join(missing)}")
    lead_type = payload["leadType"]
    _validate_classification(lead_type, payload["leadSource"], None)

    phone = str(payload["phone"]).strip()
    if lead_type == "One-time":
        existing = leads_repository.find_lead_by_phone(phone, "One-time")
        if existing is not None:
            logging.info(f"Existing one-time customer found for phone {phone} (lead #{existing.lead_id})")
            return existing, False

    assigned = None
    if payload.get("assignedWasher"):
        assigned = washers_repository.get_washer(payload["assignedWasher"]).record_id

    coordinates = payload.get("coordinates") or (0.0, 0.0)
    lead = Lead(
        record_id="",
        lead_id=0,
        lead_type=lead_type,
        lead_source=payload["leadSource"],
        customer_name=str(payload["customerName"]).strip(),
        phone=phone,
        area=str(payload["area"]).strip(),
        created_at=utc_now(),
        car_model=payload.get("carModel"),
        vehicle_number=payload.get("vehicleNumber"),
        notes=payload.get("notes"),
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        assigned_washer=assigned,
    )

    one_time = payload.get("oneTimeWash")
    if lead_type == "One-time" and one_time:
        wash_type = one_time.get("washType") or "Basic"
        scheduled = one_time.get("scheduledDate")
        lead.one_time_wash = OneTimeWash(
            wash_type=wash_type,
            amount=float(one_time["amount"]) if one_time.get("amount") is not None else settings.price_for(wash_type),
            scheduled_date=parse_datetime(scheduled, "oneTimeWash.scheduledDate") if scheduled else None,
            service_type=one_time.get("serviceType") or "Exterior",
        )
        lead.status = "Converted"

    return leads_repository.insert_lead(lead), True


def list_leads(
    *,
    search: Optional[str] = None,
    lead_type: Optional[str] = None,
    lead_source: Optional[str] = None,
    status: Optional[str] = None,
    area: Optional[str] = None,
    plan: Optional[str] = None,
    start_date: Any = None,
    end_date: Any = None,
) -> list[Lead]:
    """Filter leads; text filters are case-insensitive substring matches. Newest id first."""
    start = parse_datetime(start_date, "startDate") if start_date else None
    end = parse_datetime(end_date, "endDate") if end_date else None
    needle = (search or "").strip().lower()

    results = []
    for lead in leads_repository.list_leads():
        if lead.customer_name.startswith("Template-"):
            continue
        if needle and not any(needle in value.lower() for value in (lead.customer_name, lead.phone, lead.area)):
            continue
        if lead_type and lead.lead_type != lead_type:
            continue
        if lead_source and lead.lead_source != lead_source:
            continue
        if status and lead.status != status:
            continue
        if area and area.lower() not in lead.area.lower():
            continue
        if plan and not _matches_plan(lead, plan.lower()):
            continue
        if start and lead.created_at < start:
            continue
        if end and lead.created_at > end:
            continue
        results.append(lead)
    return sorted(results, key=lambda lead: lead.lead_id, reverse=True)


def _matches_plan(lead: Lead, plan: str) -> bool:
    labels = []
    if lead.monthly_subscription:
        labels.extend([lead.monthly_subscription.package_type, lead.monthly_subscription.custom_plan_name])
    if lead.one_time_wash:
        labels.append(lead.one_time_wash.wash_type or "")
    return any(plan in label.lower() for label in labels if label)


def update_lead(reference: str | int, changes: dict[str, Any]) -> Lead:
    """Partial update of profile fields. Wash structures change only through scheduling operations."""
    lead = leads_repository.get_lead(reference)
    _validate_classification(changes.get("leadType"), changes.get("leadSource"), changes.get("status"))

    simple_fields = {
        "customerName": "customer_name",
        "phone": "phone",
        "area": "area",
        "carModel": "car_model",
        "vehicleNumber": "vehicle_number",
        "leadType": "lead_type",
        "leadSource": "lead_source",
        "notes": "notes",
        "status": "status",
    }
    for key, attribute in simple_fields.items():
        if changes.get(key) is not None:
            setattr(lead, attribute, changes[key].strip() if isinstance(changes[key], str) else changes[key])

    if "assignedWasher" in changes:
        washer_ref = changes["assignedWasher"]
        lead.assigned_washer = washers_repository.get_washer(washer_ref).record_id if washer_ref else None

    return leads_repository.save_lead(lead)
