"""Inclusive date windows for calendar queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ...errors import WashValidationError
from ...models.domain import Lead
from ...persistence.base import DateSpan
from ..time_rules import calendar_day, coerce_datetime, start_of_day


@dataclass(slots=True, frozen=True)
class DateWindow:
    """``[start, end]`` inclusive at both ends; no day-boundary normalization is applied."""

    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end

    def as_span(self) -> DateSpan:
        return DateSpan(start=self.start, end=self.end)


def parse_window(start_value: Any, end_value: Any) -> DateWindow:
    if start_value in (None, "") or end_value in (None, ""):
        raise WashValidationError("Start date and end date are required")
    start = coerce_datetime(start_value)
    end = coerce_datetime(end_value)
    if start is None or end is None:
        raise WashValidationError("Invalid date format provided")
    if start > end:
        raise WashValidationError("Start date cannot be after end date")
    return DateWindow(start=start, end=end)


def record_may_match(lead: Lead, window: DateWindow) -> bool:
    """Record-level predicate: any wash structure has a date in range, or the synthetic case applies."""
    one_time = lead.one_time_wash
    if one_time is not None and window.contains(one_time.scheduled_date or lead.created_at):
        return True
    subscription = lead.monthly_subscription
    if subscription is not None and any(
        wash.scheduled_date is not None and window.contains(wash.scheduled_date)
        for wash in subscription.scheduled_washes
    ):
        return True
    if any(entry.date is not None and window.contains(entry.date) for entry in lead.wash_history):
        return True
    if not lead.has_wash_records() and lead.assigned_washer:
        return window.contains(start_of_day(calendar_day(lead.created_at)))
    return False
