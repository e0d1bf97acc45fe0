"""High-level orchestration for calendar queries and wash lifecycle operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

from ...config import WASH_PACKAGES, settings
from ...data import leads_repository, washers_repository
from ...errors import RecordNotFoundError, WashValidationError
from ...models.domain import (
    Lead,
    MonthlySubscription,
    OneTimeWash,
    ScheduledWash,
    WashHistoryEntry,
)
from ..time_rules import (
    add_days,
    business_today,
    calendar_day,
    end_of_day,
    minutes_between,
    parse_datetime,
    start_of_day,
    utc_now,
)
from .auto_assign import AssignmentOutcome, apply_auto_assignment
from .dedup import dedupe_occurrences
from .generator import generate_scheduled_washes
from .models import Occurrence, parse_occurrence_ref
from .normalizer import normalize_lead
from .resolver import annotate, resolve_washer
from .transitions import HISTORY_TRANSITIONS, can_transition, check_transition
from .window import DateWindow, parse_window, record_may_match


@dataclass(slots=True)
class AssignmentResult:
    lead: Lead
    occurrence: Occurrence
    outcome: AssignmentOutcome


@dataclass(slots=True)
class WashEntryResult:
    lead: Lead
    history_index: int
    outcome: AssignmentOutcome


@dataclass(slots=True)
class SubscriptionResult:
    lead: Lead
    subscription: MonthlySubscription
    history_indexes: List[int]
    auto_assigned: bool
    washer_resolved: bool


@dataclass(slots=True)
class CompletionResult:
    lead: Lead
    occurrence: Occurrence
    history_index: Optional[int]
    washer_resolved: bool = True
    history_created: bool = False


@dataclass(slots=True)
class PendingAssignments:
    day: date
    occurrences: List[Occurrence] = field(default_factory=list)


def collect_occurrences(leads: Sequence[Lead], window: DateWindow) -> list[Occurrence]:
    """Normalize every lead and keep the occurrences inside the window."""
    occurrences: list[Occurrence] = []
    for lead in leads:
        if not record_may_match(lead, window):
            continue
        occurrences.extend(occ for occ in normalize_lead(lead) if window.contains(occ.date))
    return occurrences


def build_calendar(
    leads: Sequence[Lead],
    window: DateWindow,
    *,
    washer_id: Optional[str] = None,
    include_cancelled: Optional[bool] = None,
    dedupe_by: Optional[str] = None,
) -> list[Occurrence]:
    include_cancelled = settings.calendar_include_cancelled if include_cancelled is None else include_cancelled
    occurrences = annotate(collect_occurrences(leads, window))
    if not include_cancelled:
        occurrences = [occ for occ in occurrences if occ.raw_status != "cancelled"]
    calendar = dedupe_occurrences(occurrences, dedupe_by or settings.dedupe_by)
    if washer_id:
        calendar = [occ for occ in calendar if occ.resolved_washer == washer_id]
    return calendar


def list_scheduled_washes(
    start_date: Any,
    end_date: Any,
    washer_id: Optional[str] = None,
    *,
    include_cancelled: Optional[bool] = None,
) -> list[Occurrence]:
    """De-duplicated, sorted occurrences between ``start_date`` and ``end_date`` inclusive."""
    window = parse_window(start_date, end_date)
    washer_key = washers_repository.get_washer(washer_id).record_id if washer_id else None
    leads = leads_repository.list_leads(overlapping=window.as_span())
    calendar = build_calendar(leads, window, washer_id=washer_key, include_cancelled=include_cancelled)
    logging.info(f"Calendar {window.start.isoformat()} .. {window.end.isoformat()}: {len(calendar)} washes")
    return calendar


def list_pending_assignments(day: Any = None) -> PendingAssignments:
    """Occurrences on ``day`` (default today) that have no resolvable washer."""
    target = calendar_day(parse_datetime(day, "date")) if day else business_today()
    window = DateWindow(start=start_of_day(target), end=end_of_day(target))
    leads = leads_repository.list_leads(overlapping=window.as_span())
    calendar = build_calendar(leads, window, include_cancelled=False)
    return PendingAssignments(day=target, occurrences=[occ for occ in calendar if occ.display_status == "pending"])


def _find_occurrence(lead: Lead, source: str, index: int) -> Occurrence:
    for occurrence in normalize_lead(lead):
        if occurrence.source == source and occurrence.sequence_index == index:
            return annotate([occurrence])[0]
    raise RecordNotFoundError("Wash entry", f"{source}[{index}] of lead #{lead.lead_id}")


def _entry_for(lead: Lead, source: str, index: int):
    if source == "oneTimeWash" and lead.one_time_wash is not None and index == 0:
        return lead.one_time_wash
    if source == "monthlySubscription" and lead.monthly_subscription is not None:
        washes = lead.monthly_subscription.scheduled_washes
        if 0 <= index < len(washes):
            return washes[index]
    if source == "washHistory" and 0 <= index < len(lead.wash_history):
        return lead.wash_history[index]
    raise RecordNotFoundError("Wash entry", f"{source}[{index}] of lead #{lead.lead_id}")


def _resolve_optional_washer(washer_id: Optional[str | int]) -> tuple[Optional[str], bool]:
    """Return (internal washer id or None, resolved flag). Unknown ids are a partial outcome."""
    if washer_id is None or str(washer_id).strip() == "":
        return None, True
    washer = washers_repository.find_washer(washer_id)
    if washer is None:
        logging.warning(f"Washer '{washer_id}' not found; continuing without assignment")
        return None, False
    return washer.record_id, True


def _history_status(value: Optional[str]) -> str:
    status = value or "pending"
    if status not in HISTORY_TRANSITIONS:
        raise WashValidationError(f"Unknown wash status '{status}'")
    return status


def _duration(start_time: Any, end_time: Any, duration: Any) -> tuple[Optional[datetime], Optional[datetime], Optional[int]]:
    start = parse_datetime(start_time, "startTime") if start_time else None
    end = parse_datetime(end_time, "endTime") if end_time else None
    if start and end:
        if end < start:
            raise WashValidationError("endTime cannot be before startTime")
        return start, end, minutes_between(start, end)
    if duration not in (None, ""):
        try:
            minutes = int(duration)
        except (TypeError, ValueError) as exc:
            raise WashValidationError(f"Invalid duration '{duration}'") from exc
        if minutes < 0:
            raise WashValidationError("duration cannot be negative")
        return start, end, minutes
    return start, end, None


def assign_washer_to_date(
    customer_id: str | int,
    washer_id: str | int,
    target_date: Any,
    wash_type: Optional[str] = None,
    *,
    today: Optional[date] = None,
) -> AssignmentResult:
    """Give ``washer_id`` the customer's wash on ``target_date``, creating a history entry if none exists."""
    when = parse_datetime(target_date, "targetDate")
    lead = leads_repository.get_lead(customer_id)
    washer = washers_repository.get_washer(washer_id)
    day = calendar_day(when)

    same_day = [occ for occ in normalize_lead(lead) if occ.source != "assignedWasher" and calendar_day(occ.date) == day]
    candidates = [occ for occ in same_day if occ.raw_status not in ("completed", "cancelled")]
    if same_day and not candidates:
        raise WashValidationError(f"The wash on {day} is already {same_day[0].raw_status}")
    if candidates:
        target = max(candidates, key=lambda occ: occ.priority)
        source, index = target.source, target.sequence_index
        entry = _entry_for(lead, source, index)
        entry_date = target.date
    else:
        label = wash_type or lead.lead_type
        lead.wash_history.append(
            WashHistoryEntry(
                wash_type=label,
                date=when,
                amount=settings.price_for(label),
                wash_status="pending",
            )
        )
        source, index = "washHistory", len(lead.wash_history) - 1
        entry = lead.wash_history[index]
        entry_date = when

    entry.washer = washer.record_id
    outcome = apply_auto_assignment(lead, entry, entry_date, washer.record_id, today=today)
    leads_repository.save_lead(lead)
    logging.info(f"Assigned washer {washer.name} to lead #{lead.lead_id} on {day} ({source}[{index}])")
    return AssignmentResult(lead=lead, occurrence=_find_occurrence(lead, source, index), outcome=outcome)


def add_wash_entry(
    lead_ref: str | int,
    wash_type: str,
    wash_date: Any = None,
    *,
    washer_id: Optional[str | int] = None,
    amount: Optional[float] = None,
    feedback: str = "",
    paid: bool = False,
    wash_status: Optional[str] = None,
    service_type: str = "Exterior",
    today: Optional[date] = None,
) -> WashEntryResult:
    """Append a wash-history entry and run auto-assignment for it."""
    if not wash_type:
        raise WashValidationError("washType is required")
    when = parse_datetime(wash_date, "date") if wash_date else utc_now()
    status = _history_status(wash_status)
    lead = leads_repository.get_lead(lead_ref)
    washer_key, resolved = _resolve_optional_washer(washer_id)

    entry = WashHistoryEntry(
        wash_type=wash_type,
        date=when,
        amount=float(amount) if amount is not None else settings.price_for(wash_type),
        washer=washer_key,
        feedback=feedback or "",
        paid=bool(paid),
        wash_status=status,
        service_type=service_type or "Exterior",
    )
    lead.wash_history.append(entry)
    lead.status = "Converted"
    outcome = apply_auto_assignment(lead, entry, when, washer_key, today=today)
    outcome.washer_resolved = resolved
    leads_repository.save_lead(lead)
    return WashEntryResult(lead=lead, history_index=len(lead.wash_history) - 1, outcome=outcome)


def start_wash(lead_ref: str | int, index: int, start_time: Any = None) -> WashEntryResult:
    lead = leads_repository.get_lead(lead_ref)
    entry = _entry_for(lead, "washHistory", index)
    entry.wash_status = check_transition("washHistory", entry.wash_status, "in-progress")
    entry.start_time = parse_datetime(start_time, "startTime") if start_time else utc_now()
    leads_repository.save_lead(lead)
    return WashEntryResult(lead=lead, history_index=index, outcome=AssignmentOutcome(False, entry.washer))


def update_wash_entry(
    lead_ref: str | int,
    index: int,
    changes: dict[str, Any],
    *,
    today: Optional[date] = None,
) -> WashEntryResult:
    """Apply a partial update to one wash-history entry.

    Status changes go through the history transition table; a new date re-runs
    auto-assignment with the entry's washer (or the lead's default washer).
    """
    lead = leads_repository.get_lead(lead_ref)
    entry = _entry_for(lead, "washHistory", index)
    resolved = True

    if changes.get("washerId") not in (None, ""):
        washer_key, resolved = _resolve_optional_washer(changes["washerId"])
        if washer_key:
            entry.washer = washer_key
    if changes.get("washType") is not None:
        entry.wash_type = changes["washType"]
    if changes.get("amount") is not None:
        entry.amount = float(changes["amount"])
    if changes.get("feedback") is not None:
        entry.feedback = changes["feedback"]
    if changes.get("paid") is not None:
        entry.paid = bool(changes["paid"])
    if changes.get("serviceType") is not None:
        entry.service_type = changes["serviceType"]

    status = changes.get("washStatus")
    newly_completed = False
    if status is not None:
        newly_completed = status == "completed" and entry.wash_status != "completed"
        entry.wash_status = check_transition("washHistory", entry.wash_status, status)
        if status == "completed" and entry.end_time is None:
            entry.end_time = utc_now()
            if entry.start_time is not None:
                entry.duration = minutes_between(entry.start_time, entry.end_time)
    if changes.get("duration") is not None:
        _, _, entry.duration = _duration(None, None, changes["duration"])
    if newly_completed:
        _mirror_history_completion(lead, entry, entry.end_time)

    outcome = AssignmentOutcome(auto_assigned=False, washer=entry.washer)
    if changes.get("date") is not None:
        entry.date = parse_datetime(changes["date"], "date")
        inferred = entry.washer or lead.assigned_washer
        outcome = apply_auto_assignment(lead, entry, entry.date, inferred, today=today)
    outcome.washer_resolved = resolved

    leads_repository.save_lead(lead)
    return WashEntryResult(lead=lead, history_index=index, outcome=outcome)


def assign_one_time_wash(
    lead_ref: str | int,
    wash_type: str,
    scheduled_date: Any = None,
    *,
    washer_id: Optional[str | int] = None,
    amount: Optional[float] = None,
    service_type: str = "Exterior",
    today: Optional[date] = None,
) -> AssignmentResult:
    """Set (or replace) the lead's one-time wash."""
    if not wash_type:
        raise WashValidationError("washType is required")
    when = parse_datetime(scheduled_date, "scheduledDate") if scheduled_date else None
    lead = leads_repository.get_lead(lead_ref)
    if lead.one_time_wash is not None and lead.one_time_wash.status == "completed":
        raise WashValidationError("The one-time wash for this customer is already completed")
    washer_key, resolved = _resolve_optional_washer(washer_id)

    wash = OneTimeWash(
        wash_type=wash_type,
        amount=float(amount) if amount is not None else settings.price_for(wash_type),
        scheduled_date=when,
        washer=washer_key,
        status="pending",
        service_type=service_type or "Exterior",
        assigned_at=utc_now(),
    )
    lead.one_time_wash = wash
    outcome = apply_auto_assignment(lead, wash, when or lead.created_at, washer_key, today=today)
    outcome.washer_resolved = resolved
    leads_repository.save_lead(lead)
    return AssignmentResult(lead=lead, occurrence=_find_occurrence(lead, "oneTimeWash", 0), outcome=outcome)


def reschedule(occurrence_ref: str, new_date: Any, *, today: Optional[date] = None) -> AssignmentResult:
    """Move a not-yet-completed occurrence to ``new_date``.

    Missed scheduled washes go back to ``scheduled``. The pending history entry
    mirroring a scheduled wash moves with it.
    """
    ref = parse_occurrence_ref(occurrence_ref)
    when = parse_datetime(new_date, "newDate")
    lead = leads_repository.get_lead(ref.lead_id)
    if ref.source == "assignedWasher":
        raise WashValidationError("This customer has no wash entry to reschedule")
    entry = _entry_for(lead, ref.source, ref.index)
    occurrence = _find_occurrence(lead, ref.source, ref.index)

    if occurrence.raw_status in ("completed", "cancelled"):
        raise WashValidationError(f"A {occurrence.raw_status} wash cannot be rescheduled")

    if ref.source == "oneTimeWash":
        entry.scheduled_date = when
    elif ref.source == "monthlySubscription":
        mirror = _matching_history(lead, occurrence.date, occurrence.wash_type, pending_only=True)
        if mirror is not None:
            lead.wash_history[mirror].date = when
        if entry.status == "missed":
            entry.status = check_transition("monthlySubscription", entry.status, "scheduled")
        entry.scheduled_date = when
    else:
        if entry.wash_status == "in-progress":
            raise WashValidationError("A wash in progress cannot be rescheduled")
        entry.date = when

    outcome = apply_auto_assignment(lead, entry, when, resolve_washer(occurrence), today=today)
    leads_repository.save_lead(lead)
    logging.info(f"Rescheduled {occurrence_ref} to {calendar_day(when)}")
    return AssignmentResult(lead=lead, occurrence=_find_occurrence(lead, ref.source, ref.index), outcome=outcome)


def _subscription_terms(
    package_type: Optional[str],
    custom_plan_name: Optional[str],
    total_washes: Optional[int],
    total_interior_washes: Optional[int],
    monthly_price: Optional[float],
) -> tuple[str, str, int, int, float]:
    if package_type and package_type != "Custom":
        if package_type not in WASH_PACKAGES:
            raise WashValidationError(f"Unknown package type '{package_type}'")
        washes, price, interior = WASH_PACKAGES[package_type]
        return (
            package_type,
            custom_plan_name or "",
            int(total_washes or washes),
            int(total_interior_washes if total_interior_washes is not None else interior),
            float(monthly_price if monthly_price is not None else price),
        )
    if not custom_plan_name:
        raise WashValidationError("packageType or customPlanName is required")
    if not total_washes or monthly_price is None:
        raise WashValidationError("totalWashes and monthlyPrice are required for a custom plan")
    return "", custom_plan_name, int(total_washes), int(total_interior_washes or 0), float(monthly_price)


def create_monthly_subscription(
    lead_ref: str | int,
    *,
    package_type: Optional[str] = None,
    custom_plan_name: Optional[str] = None,
    total_washes: Optional[int] = None,
    total_interior_washes: Optional[int] = None,
    monthly_price: Optional[float] = None,
    scheduled_dates: Optional[Sequence[Any]] = None,
    start_date: Any = None,
    washer_id: Optional[str | int] = None,
    today: Optional[date] = None,
) -> SubscriptionResult:
    """Convert a lead to a monthly subscriber.

    Scheduled washes come from ``scheduled_dates`` when given, otherwise from the
    schedule generator. Every scheduled wash gets a pending, unpaid mirror entry
    in the wash history.
    """
    package, plan_name, washes, interior, price = _subscription_terms(
        package_type, custom_plan_name, total_washes, total_interior_washes, monthly_price
    )
    if washes < 1:
        raise WashValidationError("totalWashes must be at least 1")
    if price < 0:
        raise WashValidationError("monthlyPrice cannot be negative")
    if interior > washes:
        raise WashValidationError("totalInteriorWashes cannot exceed totalWashes")

    dates = [parse_datetime(value, f"scheduledDates[{position}]") for position, value in enumerate(scheduled_dates or [])]
    if len(dates) > washes:
        raise WashValidationError(f"{len(dates)} scheduled dates given for a plan of {washes} washes")
    start = parse_datetime(start_date, "startDate") if start_date else (min(dates) if dates else utc_now())

    lead = leads_repository.get_lead(lead_ref)
    if lead.monthly_subscription is not None and lead.monthly_subscription.is_active:
        raise WashValidationError(f"Lead #{lead.lead_id} already has an active monthly subscription")
    washer_key, resolved = _resolve_optional_washer(washer_id)

    if dates:
        scheduled = [
            ScheduledWash(wash_number=number, scheduled_date=when, scheduled_time=settings.default_scheduled_time)
            for number, when in enumerate(sorted(dates), start=1)
        ]
    else:
        scheduled = generate_scheduled_washes(start, washes)

    amount_per_wash = float(round(price / washes))
    for wash in scheduled:
        wash.amount = amount_per_wash

    subscription = MonthlySubscription(
        package_type=package,
        custom_plan_name=plan_name,
        total_washes=washes,
        total_interior_washes=interior,
        monthly_price=price,
        start_date=start,
        end_date=add_days(start, settings.subscription_period_days),
        scheduled_washes=scheduled,
    )
    lead.monthly_subscription = subscription
    lead.lead_type = "Monthly"
    lead.status = "Converted"

    auto_assigned = False
    for wash in scheduled:
        outcome = apply_auto_assignment(lead, wash, wash.scheduled_date, washer_key, today=today)
        auto_assigned = auto_assigned or outcome.auto_assigned

    history_indexes = []
    for wash in scheduled:
        lead.wash_history.append(
            WashHistoryEntry(
                wash_type=subscription.label,
                date=wash.scheduled_date,
                amount=amount_per_wash,
                washer=wash.washer,
                paid=False,
                wash_status="pending",
            )
        )
        history_indexes.append(len(lead.wash_history) - 1)

    leads_repository.save_lead(lead)
    logging.info(
        f"Created {subscription.label} subscription for lead #{lead.lead_id}: "
        f"{len(scheduled)} washes, {price:.2f} per month"
    )
    return SubscriptionResult(
        lead=lead,
        subscription=subscription,
        history_indexes=history_indexes,
        auto_assigned=auto_assigned,
        washer_resolved=resolved,
    )


def _matching_history(lead: Lead, when: datetime, wash_type: str, *, pending_only: bool = False) -> Optional[int]:
    """Index of the history entry for the same day and wash type that can still be completed."""
    day = calendar_day(when)
    for index, entry in enumerate(lead.wash_history):
        if entry.date is None or calendar_day(entry.date) != day or entry.wash_type != wash_type:
            continue
        if pending_only and entry.wash_status != "pending":
            continue
        if entry.wash_status != "completed" and can_transition("washHistory", entry.wash_status, "completed"):
            return index
    return None


def _mirror_completion(
    lead: Lead,
    occurrence: Occurrence,
    *,
    washer: Optional[str],
    amount: Optional[float],
    paid: bool,
    feedback: str,
    service_type: str,
    start: Optional[datetime],
    end: datetime,
    duration: Optional[int],
) -> tuple[int, bool]:
    index = _matching_history(lead, occurrence.date, occurrence.wash_type)
    if index is None:
        lead.wash_history.append(
            WashHistoryEntry(
                wash_type=occurrence.wash_type,
                date=occurrence.date,
                amount=amount if amount is not None else settings.price_for(occurrence.wash_type),
            )
        )
        index, created = len(lead.wash_history) - 1, True
    else:
        created = False
    entry = lead.wash_history[index]
    entry.wash_status = "completed"
    entry.washer = washer
    entry.paid = paid
    entry.feedback = feedback
    entry.service_type = service_type
    entry.start_time = start or entry.start_time
    entry.end_time = end
    entry.duration = duration
    if not entry.amount and amount is not None:
        entry.amount = amount
    return index, created


def _count_subscription_wash(lead: Lead) -> None:
    subscription = lead.monthly_subscription
    subscription.completed_washes = min(subscription.completed_washes + 1, subscription.total_washes)
    if subscription.completed_washes >= subscription.total_washes:
        subscription.is_active = False
        logging.info(f"All washes of lead #{lead.lead_id}'s subscription completed; marking inactive")


def _mirror_history_completion(lead: Lead, entry: WashHistoryEntry, finished_at: datetime) -> Optional[int]:
    """Complete the scheduled subscription wash a finished history entry stands for."""
    subscription = lead.monthly_subscription
    if subscription is None or entry.date is None or entry.wash_type != subscription.label:
        return None
    day = calendar_day(entry.date)
    for index, wash in enumerate(subscription.scheduled_washes):
        if wash.scheduled_date is None or calendar_day(wash.scheduled_date) != day:
            continue
        if wash.status not in ("scheduled", "missed"):
            continue
        wash.status = check_transition("monthlySubscription", wash.status, "completed")
        wash.completed_date = finished_at
        wash.washer = entry.washer or wash.washer
        wash.feedback = entry.feedback or wash.feedback
        wash.paid = entry.paid
        wash.duration = entry.duration
        _count_subscription_wash(lead)
        return index
    return None


def complete_wash(
    occurrence_ref: str,
    *,
    washer_id: Optional[str | int] = None,
    paid: Optional[bool] = None,
    feedback: Optional[str] = None,
    start_time: Any = None,
    end_time: Any = None,
    duration: Any = None,
    service_type: Optional[str] = None,
) -> CompletionResult:
    """Mark an occurrence completed and mirror it into the wash history."""
    ref = parse_occurrence_ref(occurrence_ref)
    start, end, minutes = _duration(start_time, end_time, duration)
    finished_at = end or utc_now()
    lead = leads_repository.get_lead(ref.lead_id)
    occurrence = _find_occurrence(lead, ref.source, ref.index)
    if occurrence.raw_status == "completed":
        raise WashValidationError("This wash is already completed")
    washer_key, resolved = _resolve_optional_washer(washer_id)
    washer = washer_key or occurrence.resolved_washer

    history_index: Optional[int] = None
    created = False

    if ref.source == "washHistory":
        entry = _entry_for(lead, ref.source, ref.index)
        entry.wash_status = check_transition("washHistory", entry.wash_status, "completed")
        entry.washer = washer
        entry.start_time = start or entry.start_time
        entry.end_time = finished_at
        if minutes is None and entry.start_time is not None:
            minutes = minutes_between(entry.start_time, finished_at)
        entry.duration = minutes
        if paid is not None:
            entry.paid = bool(paid)
        if feedback is not None:
            entry.feedback = feedback
        if service_type:
            entry.service_type = service_type
        history_index = ref.index
        _mirror_history_completion(lead, entry, finished_at)
    elif ref.source == "assignedWasher":
        lead.wash_history.append(
            WashHistoryEntry(
                wash_type=occurrence.wash_type,
                date=start_of_day(calendar_day(finished_at)),
                amount=settings.price_for(occurrence.wash_type),
            )
        )
        history_index, created = len(lead.wash_history) - 1, True
        entry = lead.wash_history[history_index]
        entry.wash_status = "completed"
        entry.washer = washer
        entry.paid = bool(paid)
        entry.feedback = feedback or ""
        entry.service_type = service_type or "Exterior"
        entry.start_time = start
        entry.end_time = finished_at
        entry.duration = minutes
    else:
        entry = _entry_for(lead, ref.source, ref.index)
        if ref.source == "oneTimeWash":
            entry.status = check_transition("oneTimeWash", entry.status, "completed")
        else:
            entry.status = check_transition("monthlySubscription", entry.status, "completed")
            entry.completed_date = finished_at
            entry.feedback = feedback or entry.feedback
            _count_subscription_wash(lead)
        entry.washer = washer
        entry.duration = minutes
        if paid is not None:
            entry.paid = bool(paid)
        if service_type:
            entry.service_type = service_type
        history_index, created = _mirror_completion(
            lead,
            occurrence,
            washer=washer,
            amount=entry.amount,
            paid=entry.paid,
            feedback=feedback or "",
            service_type=entry.service_type,
            start=start,
            end=finished_at,
            duration=minutes,
        )

    leads_repository.save_lead(lead)
    logging.info(f"Completed {occurrence_ref} for lead #{lead.lead_id}")
    completed = (
        _find_occurrence(lead, "washHistory", history_index)
        if ref.source == "assignedWasher"
        else _find_occurrence(lead, ref.source, ref.index)
    )
    return CompletionResult(
        lead=lead,
        occurrence=completed,
        history_index=history_index,
        washer_resolved=resolved,
        history_created=created,
    )
