"""Same-day / next-day washer auto-assignment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Protocol

from ...models.domain import Lead
from ..time_rules import business_today, calendar_day


class WashEntry(Protocol):
    washer: Optional[str]


@dataclass(slots=True)
class AssignmentOutcome:
    auto_assigned: bool
    washer: Optional[str]
    washer_resolved: bool = True


def is_imminent(value: datetime, today: Optional[date] = None) -> bool:
    """True when ``value`` falls on today or tomorrow in the business timezone."""
    today = today or business_today()
    return calendar_day(value) in (today, today + timedelta(days=1))


def apply_auto_assignment(
    lead: Lead,
    entry: WashEntry,
    entry_date: datetime,
    washer_id: Optional[str],
    *,
    today: Optional[date] = None,
) -> AssignmentOutcome:
    """Write ``washer_id`` to the entry and the lead when the entry is due today or tomorrow.

    Leaves both untouched otherwise. The caller persists the lead.
    """
    if not washer_id or not is_imminent(entry_date, today):
        return AssignmentOutcome(auto_assigned=False, washer=entry.washer)

    entry.washer = washer_id
    lead.assigned_washer = washer_id
    lead.status = "Converted"
    logging.info(f"Auto-assigned washer {washer_id} to lead #{lead.lead_id} for {calendar_day(entry_date)}")
    return AssignmentOutcome(auto_assigned=True, washer=washer_id)
