from datetime import timedelta

import pytest

from conftest import TODAY, at, make_lead
from washcrm.errors import WashValidationError
from washcrm.models.domain import MonthlySubscription, OneTimeWash, ScheduledWash, WashHistoryEntry
from washcrm.services.scheduling.auto_assign import apply_auto_assignment, is_imminent
from washcrm.services.scheduling.dedup import dedupe_occurrences
from washcrm.services.scheduling.generator import generate_scheduled_washes
from washcrm.services.scheduling.models import format_occurrence_ref, parse_occurrence_ref
from washcrm.services.scheduling.normalizer import normalize_lead
from washcrm.services.scheduling.resolver import annotate, derive_display_status, resolve_washer
from washcrm.services.scheduling.service import build_calendar
from washcrm.services.scheduling.transitions import can_transition, check_transition
from washcrm.services.scheduling.window import DateWindow, parse_window, record_may_match
from washcrm.services.time_rules import add_days, calendar_day, end_of_day, start_of_day


def _subscription(*dates, washer=None) -> MonthlySubscription:
    return MonthlySubscription(
        package_type="Premium",
        total_washes=4,
        monthly_price=400.0,
        start_date=at(TODAY),
        end_date=add_days(at(TODAY), 30),
        scheduled_washes=[
            ScheduledWash(wash_number=number, scheduled_date=when, washer=washer)
            for number, when in enumerate(dates, start=1)
        ],
    )


def _day_window(day=TODAY, days=1) -> DateWindow:
    return DateWindow(start=start_of_day(day), end=end_of_day(day + timedelta(days=days - 1)))


def test_normalizer_emits_one_occurrence_per_dated_entry() -> None:
    lead = make_lead(
        one_time_wash=OneTimeWash(wash_type="Premium", scheduled_date=at(TODAY)),
        monthly_subscription=_subscription(at(TODAY), at(TODAY + timedelta(days=7))),
        wash_history=[
            WashHistoryEntry(wash_type="Basic", date=at(TODAY)),
            WashHistoryEntry(wash_type="Basic", date=at(TODAY + timedelta(days=1))),
            WashHistoryEntry(wash_type="Basic", date=None),
        ],
    )

    occurrences = normalize_lead(lead)

    sources = [occ.source for occ in occurrences]
    assert sources.count("oneTimeWash") == 1
    assert sources.count("monthlySubscription") == 2
    assert sources.count("washHistory") == 2
    assert "assignedWasher" not in sources
    assert [occ.reference for occ in occurrences][:3] == ["onetime_1_0", "monthly_1_0", "monthly_1_1"]
    assert occurrences[1].wash_type == "Premium"


def test_normalizer_falls_back_to_creation_date_and_lead_type() -> None:
    lead = make_lead(one_time_wash=OneTimeWash(wash_type=None))

    (occurrence,) = normalize_lead(lead)

    assert occurrence.date == lead.created_at
    assert occurrence.wash_type == "One-time"
    assert occurrence.raw_status == "pending"


def test_normalizer_synthesizes_occurrence_for_assigned_lead_without_washes() -> None:
    lead = make_lead(assigned_washer="washer-a")

    (occurrence,) = normalize_lead(lead)

    assert occurrence.source == "assignedWasher"
    assert occurrence.raw_status == "assigned"
    assert occurrence.washer == "washer-a"
    assert occurrence.date == start_of_day(calendar_day(lead.created_at))
    assert normalize_lead(make_lead()) == []


def test_parse_window_validates_bounds() -> None:
    with pytest.raises(WashValidationError, match="required"):
        parse_window(None, "2026-03-10")
    with pytest.raises(WashValidationError, match="Invalid date format"):
        parse_window("yesterday", "2026-03-10")
    with pytest.raises(WashValidationError, match="cannot be after"):
        parse_window("2026-03-11", "2026-03-10")

    window = parse_window("2026-03-10T00:00:00+05:30", "2026-03-10T23:59:59.999+05:30")
    assert window.contains(start_of_day(TODAY))
    assert window.contains(at(TODAY, 23, 59))
    assert not window.contains(start_of_day(TODAY + timedelta(days=1)))


def test_record_level_predicate_matches_any_structure() -> None:
    window = _day_window()
    in_history = make_lead(wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY))])
    out_of_range = make_lead(wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY + timedelta(days=3)))])
    synthetic = make_lead(assigned_washer="washer-a", created_at=at(TODAY, 15))

    assert record_may_match(in_history, window)
    assert not record_may_match(out_of_range, window)
    assert record_may_match(synthetic, window)


def test_calendar_excludes_out_of_window_occurrences_of_matching_records() -> None:
    lead = make_lead(
        wash_history=[
            WashHistoryEntry(wash_type="Basic", date=at(TODAY)),
            WashHistoryEntry(wash_type="Basic", date=at(TODAY + timedelta(days=5))),
        ]
    )

    calendar = build_calendar([lead], _day_window(), dedupe_by="customer_id")

    assert [occ.reference for occ in calendar] == ["history_1_0"]


def test_display_status_derivation() -> None:
    assert derive_display_status("completed", None) == "completed"
    assert derive_display_status("completed", "washer-a") == "completed"
    assert derive_display_status("scheduled", "washer-a") == "assigned"
    assert derive_display_status("pending", None) == "pending"
    assert derive_display_status("missed", "") == "pending"


def test_washer_resolution_falls_back_to_lead_default() -> None:
    lead = make_lead(
        assigned_washer="default-washer",
        wash_history=[
            WashHistoryEntry(wash_type="Basic", date=at(TODAY), washer="own-washer"),
            WashHistoryEntry(wash_type="Basic", date=at(TODAY)),
        ],
    )

    own, inherited = annotate(normalize_lead(lead))

    assert resolve_washer(own) == "own-washer"
    assert inherited.resolved_washer == "default-washer"
    assert inherited.display_status == "assigned"


def test_monthly_occurrence_wins_over_history_mirror() -> None:
    lead = make_lead(
        monthly_subscription=_subscription(at(TODAY, 10)),
        wash_history=[WashHistoryEntry(wash_type="Premium", date=at(TODAY, 16))],
    )

    calendar = dedupe_occurrences(annotate(normalize_lead(lead)))

    assert [occ.source for occ in calendar] == ["monthlySubscription"]


def test_equal_priority_keeps_first_seen() -> None:
    lead = make_lead(
        wash_history=[
            WashHistoryEntry(wash_type="Basic", date=at(TODAY, 9)),
            WashHistoryEntry(wash_type="Premium", date=at(TODAY, 17)),
        ]
    )

    (kept,) = dedupe_occurrences(annotate(normalize_lead(lead)))

    assert kept.sequence_index == 0


def test_dedupe_key_by_id_or_by_name() -> None:
    first = make_lead(1, "Asha", wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY))])
    namesake = make_lead(2, "Asha", wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY, 14))])
    occurrences = annotate(normalize_lead(first) + normalize_lead(namesake))

    assert len(dedupe_occurrences(occurrences, "customer_id")) == 2
    assert len(dedupe_occurrences(occurrences, "customer_name")) == 1


def test_calendar_sorted_by_date_then_status() -> None:
    when = at(TODAY)
    completed = make_lead(1, wash_history=[WashHistoryEntry(wash_type="Basic", date=when, wash_status="completed")])
    pending = make_lead(2, wash_history=[WashHistoryEntry(wash_type="Basic", date=when)])
    assigned = make_lead(3, wash_history=[WashHistoryEntry(wash_type="Basic", date=when, washer="w")])
    earlier = make_lead(4, wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY, 8))])

    calendar = build_calendar([completed, pending, assigned, earlier], _day_window(), dedupe_by="customer_id")

    assert [occ.lead.lead_id for occ in calendar] == [4, 3, 2, 1]
    assert [occ.display_status for occ in calendar] == ["pending", "assigned", "pending", "completed"]


def test_calendar_washer_filter_uses_resolved_washer() -> None:
    lead = make_lead(assigned_washer="w1", wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY))])
    other = make_lead(2, wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY), washer="w2")])

    calendar = build_calendar([lead, other], _day_window(), washer_id="w1", dedupe_by="customer_id")

    assert [occ.lead.lead_id for occ in calendar] == [1]


def test_calendar_can_hide_cancelled_occurrences() -> None:
    lead = make_lead(wash_history=[WashHistoryEntry(wash_type="Basic", date=at(TODAY), wash_status="cancelled")])

    shown = build_calendar([lead], _day_window(), include_cancelled=True, dedupe_by="customer_id")
    hidden = build_calendar([lead], _day_window(), include_cancelled=False, dedupe_by="customer_id")

    assert [occ.raw_status for occ in shown] == ["cancelled"]
    assert hidden == []


@pytest.mark.parametrize(
    ("offset", "expected"),
    [(-1, False), (0, True), (1, True), (2, False)],
)
def test_imminence_covers_today_and_tomorrow(offset: int, expected: bool) -> None:
    assert is_imminent(at(TODAY + timedelta(days=offset), 23, 30), TODAY) is expected


def test_auto_assignment_writes_entry_and_lead() -> None:
    lead = make_lead()
    entry = WashHistoryEntry(wash_type="Basic", date=at(TODAY + timedelta(days=1)))

    outcome = apply_auto_assignment(lead, entry, entry.date, "washer-a", today=TODAY)

    assert outcome.auto_assigned is True
    assert entry.washer == "washer-a"
    assert lead.assigned_washer == "washer-a"
    assert lead.status == "Converted"


def test_auto_assignment_skips_distant_or_unresolved_washes() -> None:
    lead = make_lead()
    distant = WashHistoryEntry(wash_type="Basic", date=at(TODAY + timedelta(days=2)))
    soon = WashHistoryEntry(wash_type="Basic", date=at(TODAY))

    assert apply_auto_assignment(lead, distant, distant.date, "washer-a", today=TODAY).auto_assigned is False
    assert apply_auto_assignment(lead, soon, soon.date, None, today=TODAY).auto_assigned is False
    assert distant.washer is None
    assert lead.assigned_washer is None
    assert lead.status == "New"


def test_generator_spreads_washes_over_thirty_days() -> None:
    start = at(TODAY)

    washes = generate_scheduled_washes(start, 5)

    assert [wash.wash_number for wash in washes] == [1, 2, 3, 4, 5]
    assert [calendar_day(wash.scheduled_date) - TODAY for wash in washes] == [timedelta(days=d) for d in (0, 6, 12, 18, 24)]
    assert all(wash.scheduled_date <= add_days(start, 30) for wash in washes)
    assert all(wash.status == "scheduled" and wash.scheduled_time == "10:00" for wash in washes)


def test_generator_single_wash_and_invalid_total() -> None:
    assert len(generate_scheduled_washes(at(TODAY), 1)) == 1
    with pytest.raises(WashValidationError):
        generate_scheduled_washes(at(TODAY), 0)


def test_generator_does_not_guard_against_repeated_runs() -> None:
    subscription = _subscription()
    subscription.scheduled_washes.extend(generate_scheduled_washes(at(TODAY), 4))
    subscription.scheduled_washes.extend(generate_scheduled_washes(at(TODAY), 4))

    assert len(subscription.scheduled_washes) == 8


def test_status_transitions() -> None:
    assert can_transition("monthlySubscription", "scheduled", "completed")
    assert can_transition("monthlySubscription", "missed", "scheduled")
    assert can_transition("washHistory", "pending", "in-progress")
    assert can_transition("oneTimeWash", "completed", "completed")
    assert not can_transition("monthlySubscription", "completed", "scheduled")

    with pytest.raises(WashValidationError, match="Cannot change status"):
        check_transition("washHistory", "completed", "pending")
    with pytest.raises(WashValidationError, match="Unknown status"):
        check_transition("oneTimeWash", "pending", "done")


def test_occurrence_references() -> None:
    ref = parse_occurrence_ref(format_occurrence_ref("monthlySubscription", 12, 3))

    assert (ref.source, ref.lead_id, ref.index) == ("monthlySubscription", 12, 3)
    assert parse_occurrence_ref("lead_7_0").source == "assignedWasher"
    for bad in ("", "monthly_x_1", "weekly_1_0", "history_1"):
        with pytest.raises(WashValidationError):
            parse_occurrence_ref(bad)
