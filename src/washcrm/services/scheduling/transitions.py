"""Allowed status transitions for each kind of wash entry."""

from __future__ import annotations

from ...errors import WashValidationError

SCHEDULED_TRANSITIONS: dict[str, frozenset[str]] = {
    "scheduled": frozenset({"completed", "missed", "cancelled"}),
    "missed": frozenset({"scheduled", "completed"}),
    "cancelled": frozenset(),
    "completed": frozenset(),
}

HISTORY_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"in-progress", "completed", "notcompleted", "cancelled"}),
    "in-progress": frozenset({"completed", "notcompleted"}),
    "notcompleted": frozenset({"pending"}),
    "cancelled": frozenset(),
    "completed": frozenset(),
}

ONE_TIME_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"completed", "cancelled"}),
    "cancelled": frozenset({"pending"}),
    "completed": frozenset(),
}

_TABLES = {
    "monthlySubscription": SCHEDULED_TRANSITIONS,
    "washHistory": HISTORY_TRANSITIONS,
    "oneTimeWash": ONE_TIME_TRANSITIONS,
}


def can_transition(kind: str, current: str, target: str) -> bool:
    if current == target:
        return True
    return target in _TABLES[kind].get(current, frozenset())


def check_transition(kind: str, current: str, target: str) -> str:
    """Return ``target`` or raise when moving from ``current`` is not allowed."""
    table = _TABLES[kind]
    if target not in table:
        raise WashValidationError(f"Unknown status '{target}'")
    if not can_transition(kind, current, target):
        raise WashValidationError(f"Cannot change status from '{current}' to '{target}'")
    return target
