from datetime import timedelta
from itertools import count

import pytest

from conftest import TODAY
from washcrm.data import leads_repository
from washcrm.errors import RecordNotFoundError, WashValidationError
from washcrm.services import scheduling
from washcrm.services.leads import create_lead
from washcrm.services.time_rules import calendar_day

_phones = count(9845000001)


def _new_lead(**extra):
    payload = {
        "customerName": "Ravi Kumar",
        "phone": str(next(_phones)),
        "area": "Indiranagar",
        "carModel": "Swift",
        "leadType": "One-time",
        "leadSource": "WhatsApp",
    }
    payload.update(extra)
    lead, created = create_lead(payload)
    assert created
    return lead


def _day(offset: int = 0) -> str:
    return (TODAY + timedelta(days=offset)).isoformat()


def test_assigning_washer_to_todays_one_time_wash(store, washer) -> None:
    lead = _new_lead()
    scheduling.assign_one_time_wash(lead.lead_id, "Basic", _day(), today=TODAY)
    assert leads_repository.get_lead(lead.lead_id).status == "New"

    result = scheduling.assign_washer_to_date(lead.lead_id, washer.washer_id, _day(), today=TODAY)

    assert result.outcome.auto_assigned is True
    assert result.occurrence.source == "oneTimeWash"
    assert result.occurrence.resolved_washer == washer.record_id
    stored = leads_repository.get_lead(lead.lead_id)
    assert stored.one_time_wash.washer == washer.record_id
    assert stored.assigned_washer == washer.record_id
    assert stored.status == "Converted"
    assert stored.wash_history == []


def test_assigning_washer_to_empty_day_creates_pending_history_entry(store, washer) -> None:
    lead = _new_lead()

    result = scheduling.assign_washer_to_date(lead.record_id, str(washer.washer_id), _day(5), today=TODAY)

    assert result.outcome.auto_assigned is False
    assert result.occurrence.source == "washHistory"
    stored = leads_repository.get_lead(lead.lead_id)
    (entry,) = stored.wash_history
    assert entry.wash_status == "pending"
    assert entry.washer == washer.record_id
    assert entry.wash_type == "One-time"
    assert entry.amount == 120.0
    assert stored.assigned_washer is None


def test_assigning_unknown_washer_or_customer_fails_without_changes(store, washer) -> None:
    lead = _new_lead()

    with pytest.raises(RecordNotFoundError):
        scheduling.assign_washer_to_date(lead.lead_id, "999", _day(), today=TODAY)
    with pytest.raises(RecordNotFoundError):
        scheduling.assign_washer_to_date(4242, washer.washer_id, _day(), today=TODAY)
    with pytest.raises(WashValidationError):
        scheduling.assign_washer_to_date(lead.lead_id, washer.washer_id, None, today=TODAY)

    assert leads_repository.get_lead(lead.lead_id).version == lead.version


def test_wash_entry_with_unknown_washer_is_a_partial_outcome(store) -> None:
    lead = _new_lead()

    result = scheduling.add_wash_entry(lead.lead_id, "Premium", _day(), washer_id="ghost", today=TODAY)

    assert result.outcome.washer_resolved is False
    assert result.outcome.auto_assigned is False
    entry = result.lead.wash_history[result.history_index]
    assert entry.washer is None
    assert entry.amount == 150.0
    assert result.lead.status == "Converted"


def test_updating_entry_date_reruns_auto_assignment(store, washer) -> None:
    lead = _new_lead()
    scheduling.add_wash_entry(lead.lead_id, "Basic", _day(10), washer_id=washer.washer_id, today=TODAY)
    assert leads_repository.get_lead(lead.lead_id).assigned_washer is None

    result = scheduling.update_wash_entry(lead.lead_id, 0, {"date": _day(1), "paid": True}, today=TODAY)

    assert result.outcome.auto_assigned is True
    stored = leads_repository.get_lead(lead.lead_id)
    assert stored.assigned_washer == washer.record_id
    assert stored.wash_history[0].paid is True
    assert calendar_day(stored.wash_history[0].date) == TODAY + timedelta(days=1)


def test_history_status_changes_follow_transition_table(store) -> None:
    lead = _new_lead()
    scheduling.add_wash_entry(lead.lead_id, "Basic", _day(), wash_status="completed", today=TODAY)

    with pytest.raises(WashValidationError, match="Cannot change status"):
        scheduling.update_wash_entry(lead.lead_id, 0, {"washStatus": "pending"}, today=TODAY)
    with pytest.raises(RecordNotFoundError):
        scheduling.update_wash_entry(lead.lead_id, 3, {"paid": True}, today=TODAY)


def test_monthly_subscription_schedules_washes_and_mirrors_history(store, washer) -> None:
    lead = _new_lead()

    result = scheduling.create_monthly_subscription(
        lead.lead_id,
        package_type="Premium",
        start_date=_day(),
        washer_id=washer.washer_id,
        today=TODAY,
    )

    subscription = result.subscription
    assert subscription.total_washes == 4
    assert subscription.monthly_price == 400.0
    assert [calendar_day(w.scheduled_date) - TODAY for w in subscription.scheduled_washes] == [
        timedelta(days=d) for d in (0, 7, 14, 21)
    ]
    assert [w.amount for w in subscription.scheduled_washes] == [100.0] * 4
    assert [w.washer for w in subscription.scheduled_washes] == [washer.record_id, None, None, None]
    assert result.auto_assigned is True

    stored = leads_repository.get_lead(lead.lead_id)
    assert stored.lead_type == "Monthly"
    assert stored.status == "Converted"
    assert stored.assigned_washer == washer.record_id
    assert [entry.wash_type for entry in stored.wash_history] == ["Premium"] * 4
    assert all(entry.wash_status == "pending" and not entry.paid for entry in stored.wash_history)

    calendar = scheduling.list_scheduled_washes(_day(), f"{_day(30)}T23:59:59")
    assert [occ.source for occ in calendar] == ["monthlySubscription"] * 4

    with pytest.raises(WashValidationError, match="already has an active"):
        scheduling.create_monthly_subscription(lead.lead_id, package_type="Basic", today=TODAY)


def test_custom_subscription_requires_terms_and_accepts_explicit_dates(store) -> None:
    lead = _new_lead()

    with pytest.raises(WashValidationError, match="required for a custom plan"):
        scheduling.create_monthly_subscription(lead.lead_id, custom_plan_name="Fleet", today=TODAY)
    with pytest.raises(WashValidationError, match="cannot exceed"):
        scheduling.create_monthly_subscription(
            lead.lead_id, custom_plan_name="Fleet", total_washes=2, total_interior_washes=3, monthly_price=500, today=TODAY
        )

    result = scheduling.create_monthly_subscription(
        lead.lead_id,
        custom_plan_name="Fleet",
        total_washes=3,
        monthly_price=500,
        scheduled_dates=[_day(20), _day(4)],
        today=TODAY,
    )

    assert result.subscription.label == "Fleet"
    assert [calendar_day(w.scheduled_date) for w in result.subscription.scheduled_washes] == [
        TODAY + timedelta(days=4),
        TODAY + timedelta(days=20),
    ]
    assert [w.amount for w in result.subscription.scheduled_washes] == [167.0, 167.0]
    assert result.auto_assigned is False


def test_completing_monthly_wash_updates_matching_history_entry(store, washer) -> None:
    lead = _new_lead()
    scheduling.create_monthly_subscription(
        lead.lead_id, package_type="Basic", start_date=_day(), washer_id=washer.washer_id, today=TODAY
    )

    result = scheduling.complete_wash(f"monthly_{lead.lead_id}_0", paid=True, feedback="Spotless")

    assert result.history_created is False
    assert result.history_index == 0
    assert result.occurrence.display_status == "completed"
    stored = leads_repository.get_lead(lead.lead_id)
    assert stored.monthly_subscription.scheduled_washes[0].status == "completed"
    assert stored.monthly_subscription.completed_washes == 1
    entry = stored.wash_history[0]
    assert (entry.wash_status, entry.paid, entry.feedback, entry.washer) == (
        "completed",
        True,
        "Spotless",
        washer.record_id,
    )
    assert [e.wash_status for e in stored.wash_history[1:]] == ["pending", "pending"]

    with pytest.raises(WashValidationError, match="already completed"):
        scheduling.complete_wash(f"monthly_{lead.lead_id}_0")


def test_completing_mirrored_history_entry_completes_subscription_wash(store, washer) -> None:
    lead = _new_lead()
    scheduling.create_monthly_subscription(
        lead.lead_id, package_type="Basic", start_date=_day(), washer_id=washer.washer_id, today=TODAY
    )

    scheduling.complete_wash(f"history_{lead.lead_id}_0", paid=True)

    calendar = scheduling.list_scheduled_washes(_day(), f"{_day()}T23:59:59")
    assert [(o.source, o.raw_status, o.display_status) for o in calendar] == [
        ("monthlySubscription", "completed", "completed")
    ]
    subscription = leads_repository.get_lead(lead.lead_id).monthly_subscription
    assert subscription.completed_washes == 1
    assert subscription.scheduled_washes[0].paid is True
    with pytest.raises(WashValidationError, match="already completed"):
        scheduling.complete_wash(f"monthly_{lead.lead_id}_0")

    scheduling.update_wash_entry(lead.lead_id, 1, {"washStatus": "completed"})

    subscription = leads_repository.get_lead(lead.lead_id).monthly_subscription
    assert [wash.status for wash in subscription.scheduled_washes] == ["completed", "completed", "scheduled"]
    assert subscription.completed_washes == 2
    assert subscription.is_active is True


def test_assigning_washer_to_day_with_completed_wash_is_rejected(store, washer) -> None:
    lead = _new_lead()
    scheduling.assign_one_time_wash(lead.lead_id, "Basic", _day(), today=TODAY)
    scheduling.complete_wash(f"onetime_{lead.lead_id}_0")

    with pytest.raises(WashValidationError, match="already completed"):
        scheduling.assign_washer_to_date(lead.lead_id, washer.washer_id, _day(), today=TODAY)

    assert len(leads_repository.get_lead(lead.lead_id).wash_history) == 1


def test_completing_every_wash_deactivates_subscription(store) -> None:
    lead = _new_lead()
    scheduling.create_monthly_subscription(
        lead.lead_id, custom_plan_name="Duo", total_washes=2, monthly_price=200, start_date=_day(), today=TODAY
    )

    scheduling.complete_wash(f"monthly_{lead.lead_id}_0")
    scheduling.complete_wash(f"monthly_{lead.lead_id}_1")

    subscription = leads_repository.get_lead(lead.lead_id).monthly_subscription
    assert subscription.completed_washes == 2
    assert subscription.is_active is False


def test_completing_one_time_wash_creates_history_entry(store) -> None:
    lead = _new_lead()
    scheduling.assign_one_time_wash(lead.lead_id, "Deluxe", _day(), amount=250, today=TODAY)

    result = scheduling.complete_wash(f"onetime_{lead.lead_id}_0", duration=40)

    assert result.history_created is True
    stored = leads_repository.get_lead(lead.lead_id)
    assert stored.one_time_wash.status == "completed"
    (entry,) = stored.wash_history
    assert (entry.wash_type, entry.amount, entry.wash_status, entry.duration) == ("Deluxe", 250.0, "completed", 40)
    assert calendar_day(entry.date) == TODAY

    with pytest.raises(WashValidationError, match="already completed"):
        scheduling.assign_one_time_wash(lead.lead_id, "Basic", _day(2), today=TODAY)


def test_started_history_wash_records_duration_on_completion(store) -> None:
    lead = _new_lead()
    scheduling.add_wash_entry(lead.lead_id, "Basic", _day(), today=TODAY)
    scheduling.start_wash(lead.lead_id, 0, f"{_day()}T10:00:00+05:30")

    result = scheduling.complete_wash(f"history_{lead.lead_id}_0", end_time=f"{_day()}T10:45:00+05:30")

    entry = result.lead.wash_history[0]
    assert entry.wash_status == "completed"
    assert entry.duration == 45
    assert result.history_index == 0
    assert result.history_created is False


def test_completing_synthetic_occurrence_logs_a_wash(store, washer) -> None:
    lead = _new_lead(assignedWasher=str(washer.washer_id))

    result = scheduling.complete_wash(f"lead_{lead.lead_id}_0", paid=True)

    assert result.history_created is True
    assert result.occurrence.source == "washHistory"
    (entry,) = result.lead.wash_history
    assert entry.washer == washer.record_id
    assert entry.paid is True


def test_reschedule_moves_monthly_wash_and_its_mirror(store) -> None:
    lead = _new_lead()
    scheduling.create_monthly_subscription(lead.lead_id, package_type="Premium", start_date=_day(), today=TODAY)

    result = scheduling.reschedule(f"monthly_{lead.lead_id}_1", _day(9), today=TODAY)

    assert result.outcome.auto_assigned is False
    stored = leads_repository.get_lead(lead.lead_id)
    assert calendar_day(stored.monthly_subscription.scheduled_washes[1].scheduled_date) == TODAY + timedelta(days=9)
    assert calendar_day(stored.wash_history[1].date) == TODAY + timedelta(days=9)
    assert calendar_day(stored.wash_history[2].date) == TODAY + timedelta(days=14)


def test_reschedule_rejects_completed_and_synthetic_occurrences(store, washer) -> None:
    lead = _new_lead()
    scheduling.add_wash_entry(lead.lead_id, "Basic", _day(), wash_status="completed", today=TODAY)
    synthetic = _new_lead(assignedWasher=washer.record_id)

    with pytest.raises(WashValidationError, match="completed wash cannot be rescheduled"):
        scheduling.reschedule(f"history_{lead.lead_id}_0", _day(3), today=TODAY)
    with pytest.raises(WashValidationError, match="no wash entry"):
        scheduling.reschedule(f"lead_{synthetic.lead_id}_0", _day(3), today=TODAY)


def test_pending_assignments_lists_unassigned_washes_of_the_day(store, washer) -> None:
    unassigned = _new_lead()
    assigned = _new_lead()
    cancelled = _new_lead()
    scheduling.add_wash_entry(unassigned.lead_id, "Basic", _day(), today=TODAY)
    scheduling.add_wash_entry(assigned.lead_id, "Basic", _day(), washer_id=washer.washer_id, today=TODAY)
    scheduling.add_wash_entry(cancelled.lead_id, "Basic", _day(), wash_status="cancelled", today=TODAY)

    pending = scheduling.list_pending_assignments(_day())

    assert pending.day == TODAY
    assert [occ.lead.lead_id for occ in pending.occurrences] == [unassigned.lead_id]


def test_calendar_filters_by_washer_and_rejects_unknown_washer(store, washer) -> None:
    mine = _new_lead()
    other = _new_lead()
    scheduling.add_wash_entry(mine.lead_id, "Basic", _day(), washer_id=washer.washer_id, today=TODAY)
    scheduling.add_wash_entry(other.lead_id, "Basic", _day(), today=TODAY)

    calendar = scheduling.list_scheduled_washes(_day(), f"{_day()}T23:59:59", str(washer.washer_id))

    assert [occ.lead.lead_id for occ in calendar] == [mine.lead_id]
    with pytest.raises(RecordNotFoundError):
        scheduling.list_scheduled_washes(_day(), f"{_day()}T23:59:59", "404")
