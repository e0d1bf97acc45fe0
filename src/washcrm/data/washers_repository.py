"""Data access helpers for washer (employee) records."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import RecordNotFoundError
from ..models.domain import AttendanceRecord, SalaryRecord, Washer
from ..persistence import database
from ..services.time_rules import coerce_datetime, to_iso

COLLECTION = "washers"
COUNTER = "userId"


def _attendance_from_document(raw: dict) -> AttendanceRecord:
    return AttendanceRecord(
        date=coerce_datetime(raw.get("date")),
        time_in=coerce_datetime(raw.get("timeIn")),
        time_out=coerce_datetime(raw.get("timeOut")),
        duration=float(raw.get("duration") or 0.0),
        status=raw.get("status") or "incomplete",
    )


def washer_from_document(document: dict) -> Washer:
    salary = document.get("salary")
    return Washer(
        record_id=document["_id"],
        washer_id=int(document["id"]),
        name=(document.get("name") or "").strip(),
        phone=(document.get("phone") or "").strip(),
        email=document.get("email"),
        area=document.get("area"),
        status=document.get("status") or "Active",
        attendance=[_attendance_from_document(item) for item in document.get("attendance") or []],
        salary=(
            SalaryRecord(
                base_salary=float(salary.get("baseSalary") or 0.0),
                effective_date=coerce_datetime(salary.get("effectiveDate")),
                updated_at=coerce_datetime(salary.get("updatedAt")),
            )
            if salary
            else None
        ),
        created_at=coerce_datetime(document.get("createdAt")),
        version=int(document.get("version", 0)),
    )


def washer_to_document(washer: Washer) -> dict:
    return {
        "_id": washer.record_id,
        "id": washer.washer_id,
        "role": "washer",
        "version": washer.version,
        "name": washer.name,
        "phone": washer.phone,
        "email": washer.email,
        "area": washer.area,
        "status": washer.status,
        "attendance": [
            {
                "date": to_iso(record.date),
                "timeIn": to_iso(record.time_in),
                "timeOut": to_iso(record.time_out),
                "duration": record.duration,
                "status": record.status,
            }
            for record in washer.attendance
        ],
        "salary": (
            {
                "baseSalary": washer.salary.base_salary,
                "effectiveDate": to_iso(washer.salary.effective_date),
                "updatedAt": to_iso(washer.salary.updated_at),
            }
            if washer.salary
            else None
        ),
        "createdAt": to_iso(washer.created_at),
    }


def find_washer(reference: Optional[str | int]) -> Washer | None:
    """Resolve a washer by numeric id or internal id; None when unknown."""
    if reference is None or str(reference).strip() == "":
        return None
    store = database.get_document_store()
    text = str(reference).strip()
    document = None
    if text.isdigit():
        document = store.find_one(COLLECTION, "id", int(text))
    if document is None:
        document = store.get(COLLECTION, text)
    return washer_from_document(document) if document else None


def get_washer(reference: str | int) -> Washer:
    washer = find_washer(reference)
    if washer is None:
        raise RecordNotFoundError("Washer", reference)
    return washer


def find_washer_by_name(name: str) -> Washer | None:
    document = database.get_document_store().find_one(COLLECTION, "name", name.strip())
    return washer_from_document(document) if document else None


def list_washers(status: Optional[str] = None) -> list[Washer]:
    washers = [washer_from_document(doc) for doc in database.get_document_store().list(COLLECTION)]
    if status:
        washers = [washer for washer in washers if washer.status == status]
    return sorted(washers, key=lambda washer: washer.washer_id)


def washer_names() -> dict[str, str]:
    """Map of internal washer id to display name, used when rendering occurrences."""
    return {washer.record_id: washer.name for washer in list_washers()}


def insert_washer(washer: Washer) -> Washer:
    store = database.get_document_store()
    washer.washer_id = store.next_sequence(COUNTER)
    document = washer_to_document(washer)
    if not washer.record_id:
        document.pop("_id")
    stored = store.insert(COLLECTION, document)
    logging.info(f"Registered washer #{washer.washer_id} ({washer.name})")
    return washer_from_document(stored)


def save_washer(washer: Washer) -> Washer:
    stored = database.get_document_store().replace(
        COLLECTION, washer_to_document(washer), expected_version=washer.version
    )
    washer.version = int(stored["version"])
    return washer
