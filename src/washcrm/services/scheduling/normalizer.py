"""Flatten a lead's wash structures into a uniform list of occurrences."""

from __future__ import annotations

from typing import List

from ...models.domain import Lead
from ..time_rules import calendar_day, start_of_day
from .models import Occurrence


def normalize_lead(lead: Lead) -> List[Occurrence]:
    """Return one occurrence per one-time wash, scheduled wash and dated history entry.

    A lead with no wash records but an assigned washer yields a single synthetic
    occurrence at its creation day so it still shows up on the calendar.
    """
    occurrences: List[Occurrence] = []

    one_time = lead.one_time_wash
    if one_time is not None:
        occurrences.append(
            Occurrence(
                lead=lead,
                source="oneTimeWash",
                sequence_index=0,
                wash_type=one_time.wash_type or lead.lead_type,
                date=one_time.scheduled_date or lead.created_at,
                washer=one_time.washer,
                raw_status=one_time.status,
            )
        )

    subscription = lead.monthly_subscription
    if subscription is not None:
        for index, wash in enumerate(subscription.scheduled_washes):
            if wash.scheduled_date is None:
                continue
            occurrences.append(
                Occurrence(
                    lead=lead,
                    source="monthlySubscription",
                    sequence_index=index,
                    wash_type=subscription.label,
                    date=wash.scheduled_date,
                    washer=wash.washer,
                    raw_status=wash.status,
                )
            )

    for index, entry in enumerate(lead.wash_history):
        if entry.date is None:
            continue
        occurrences.append(
            Occurrence(
                lead=lead,
                source="washHistory",
                sequence_index=index,
                wash_type=entry.wash_type or lead.lead_type,
                date=entry.date,
                washer=entry.washer,
                raw_status=entry.wash_status,
            )
        )

    if not lead.has_wash_records() and lead.assigned_washer:
        occurrences.append(
            Occurrence(
                lead=lead,
                source="assignedWasher",
                sequence_index=0,
                wash_type=lead.lead_type,
                date=start_of_day(calendar_day(lead.created_at)),
                washer=lead.assigned_washer,
                raw_status="assigned",
            )
        )

    return occurrences
