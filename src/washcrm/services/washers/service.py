"""Washer registry, attendance and salary records."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Literal, Optional

from ...data import washers_repository
from ...errors import WashValidationError
from ...models.domain import AttendanceRecord, SalaryRecord, Washer
from ..time_rules import at_time_of_day, business_today, calendar_day, parse_datetime, start_of_day, utc_now

SHIFT_START = (9, 0)
SHIFT_END = (18, 0)
SHIFT_HOURS = 9.0


def register_washer(name: str, phone: str, *, email: Optional[str] = None, area: Optional[str] = None) -> Washer:
    if not (name or "").strip() or not (phone or "").strip():
        raise WashValidationError("Washer name and phone are required")
    washer = Washer(
        record_id="",
        washer_id=0,
        name=name.strip(),
        phone=phone.strip(),
        email=email,
        area=area,
        created_at=utc_now(),
    )
    return washers_repository.insert_washer(washer)


def update_washer(reference: str | int, changes: dict[str, Any]) -> Washer:
    washer = washers_repository.get_washer(reference)
    for key in ("name", "phone", "email", "area"):
        if changes.get(key) is not None:
            setattr(washer, key, changes[key])
    status = changes.get("status")
    if status is not None:
        if status not in ("Active", "Inactive"):
            raise WashValidationError(f"Invalid washer status '{status}'")
        washer.status = status
    return washers_repository.save_washer(washer)


def _record_for_day(washer: Washer, day: date) -> Optional[AttendanceRecord]:
    for record in washer.attendance:
        if record.date is not None and calendar_day(record.date) == day:
            return record
    return None


def mark_attendance(reference: str | int, kind: Literal["in", "out"], *, now: Optional[datetime] = None) -> AttendanceRecord:
    """Record today's time-in or time-out. Duration is in hours, two decimals."""
    washer = washers_repository.get_washer(reference)
    now = now or utc_now()
    record = _record_for_day(washer, calendar_day(now))

    if kind == "in":
        if record is not None and record.time_in is not None:
            raise WashValidationError("Time-in already marked for today")
        if record is None:
            record = AttendanceRecord(date=now)
            washer.attendance.append(record)
        record.time_in = now
        record.status = "incomplete"
    elif kind == "out":
        if record is None or record.time_in is None:
            raise WashValidationError("Must mark time-in before marking time-out")
        if record.time_out is not None:
            raise WashValidationError("Time-out already marked for today")
        record.time_out = now
        record.duration = round((now - record.time_in).total_seconds() / 3600, 2)
        record.status = "present"
    else:
        raise WashValidationError(f"Attendance type must be 'in' or 'out', got '{kind}'")

    washers_repository.save_washer(washer)
    logging.info(f"Washer #{washer.washer_id} time-{kind} at {now.isoformat()}")
    return record


def set_attendance_for_date(reference: str | int, day: Any, status: str) -> AttendanceRecord:
    """Admin override: present means a full 09:00-18:00 shift, anything else clears the times."""
    if status not in ("present", "absent"):
        raise WashValidationError(f"Attendance status must be 'present' or 'absent', got '{status}'")
    washer = washers_repository.get_washer(reference)
    target = calendar_day(parse_datetime(day, "date"))
    record = _record_for_day(washer, target)
    if record is None:
        record = AttendanceRecord(date=start_of_day(target))
        washer.attendance.append(record)

    record.status = status
    if status == "present":
        record.time_in = at_time_of_day(target, *SHIFT_START)
        record.time_out = at_time_of_day(target, *SHIFT_END)
        record.duration = SHIFT_HOURS
    else:
        record.time_in = None
        record.time_out = None
        record.duration = 0.0

    washers_repository.save_washer(washer)
    return record


def attendance_report(reference: str | int, start_date: Any = None, end_date: Any = None) -> dict:
    washer = washers_repository.get_washer(reference)
    records = washer.attendance
    if start_date and end_date:
        first = calendar_day(parse_datetime(start_date, "startDate"))
        last = calendar_day(parse_datetime(end_date, "endDate"))
        records = [r for r in records if r.date is not None and first <= calendar_day(r.date) <= last]
    records = sorted(records, key=lambda r: r.date or start_of_day(business_today()), reverse=True)
    return {
        "washer": washer,
        "attendance": records,
        "stats": {
            "totalDays": len(records),
            "presentDays": sum(1 for r in records if r.status == "present"),
            "incompleteDays": sum(1 for r in records if r.time_in is not None and r.time_out is None),
            "totalHours": round(sum(r.duration for r in records), 2),
        },
    }


def get_salary(reference: str | int) -> Optional[SalaryRecord]:
    return washers_repository.get_washer(reference).salary


def set_salary(reference: str | int, base_salary: float, effective_date: Any = None) -> SalaryRecord:
    if base_salary is None or float(base_salary) < 0:
        raise WashValidationError("baseSalary must be a non-negative number")
    washer = washers_repository.get_washer(reference)
    washer.salary = SalaryRecord(
        base_salary=float(base_salary),
        effective_date=parse_datetime(effective_date, "effectiveDate") if effective_date else utc_now(),
        updated_at=utc_now(),
    )
    washers_repository.save_washer(washer)
    return washer.salary
