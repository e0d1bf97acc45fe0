"""Collapse occurrences of the same real wash and order the calendar."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Literal

from ..time_rules import calendar_day
from .models import STATUS_ORDER, Occurrence

DedupeKey = Literal["customer_id", "customer_name"]


def dedupe_key(occurrence: Occurrence, key_by: DedupeKey = "customer_id") -> tuple[str, date]:
    lead = occurrence.lead
    customer = lead.customer_name if key_by == "customer_name" else lead.record_id
    return customer, calendar_day(occurrence.date)


def dedupe_occurrences(occurrences: Iterable[Occurrence], key_by: DedupeKey = "customer_id") -> list[Occurrence]:
    """Keep the highest-priority occurrence per (customer, day); first seen wins on ties.

    Survivors are sorted by date, then assigned before pending before completed.
    """
    kept: dict[tuple[str, date], Occurrence] = {}
    for occurrence in occurrences:
        key = dedupe_key(occurrence, key_by)
        current = kept.get(key)
        if current is None or occurrence.priority > current.priority:
            kept[key] = occurrence
    return sorted(
        kept.values(),
        key=lambda item: (item.date, STATUS_ORDER.get(item.display_status or "pending", 1)),
    )
