"""Washer registry and attendance helpers."""

from .service import (
    attendance_report,
    get_salary,
    mark_attendance,
    register_washer,
    set_attendance_for_date,
    set_salary,
    update_washer,
)

__all__ = [
    "register_washer",
    "update_washer",
    "mark_attendance",
    "set_attendance_for_date",
    "attendance_report",
    "get_salary",
    "set_salary",
]
