"""Wash scheduling and status reconciliation."""

from .service import (
    add_wash_entry,
    assign_one_time_wash,
    assign_washer_to_date,
    complete_wash,
    create_monthly_subscription,
    list_pending_assignments,
    list_scheduled_washes,
    reschedule,
    start_wash,
    update_wash_entry,
)

__all__ = [
    "list_scheduled_washes",
    "list_pending_assignments",
    "assign_washer_to_date",
    "assign_one_time_wash",
    "add_wash_entry",
    "start_wash",
    "update_wash_entry",
    "reschedule",
    "create_monthly_subscription",
    "complete_wash",
]
