"""Scheduling domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from ...errors import WashValidationError
from ...models.domain import Lead

Source = Literal["oneTimeWash", "monthlySubscription", "washHistory", "assignedWasher"]
DisplayStatus = Literal["completed", "assigned", "pending"]

SOURCE_PRIORITY: dict[str, int] = {
    "monthlySubscription": 3,
    "oneTimeWash": 2,
    "washHistory": 1,
    "assignedWasher": 0,
}

STATUS_ORDER: dict[str, int] = {"assigned": 0, "pending": 1, "completed": 2}

_REF_PREFIXES: dict[str, str] = {
    "oneTimeWash": "onetime",
    "monthlySubscription": "monthly",
    "washHistory": "history",
    "assignedWasher": "lead",
}
_PREFIX_SOURCES = {prefix: source for source, prefix in _REF_PREFIXES.items()}


@dataclass(slots=True)
class Occurrence:
    """A single wash event taken from one of a lead's three wash structures."""

    lead: Lead
    source: Source
    sequence_index: int
    wash_type: str
    date: datetime
    washer: Optional[str]
    raw_status: str
    resolved_washer: Optional[str] = None
    display_status: Optional[DisplayStatus] = None

    @property
    def priority(self) -> int:
        return SOURCE_PRIORITY[self.source]

    @property
    def reference(self) -> str:
        return format_occurrence_ref(self.source, self.lead.lead_id, self.sequence_index)


@dataclass(slots=True, frozen=True)
class OccurrenceRef:
    source: Source
    lead_id: int
    index: int


def format_occurrence_ref(source: str, lead_id: int, index: int) -> str:
    return f"{_REF_PREFIXES[source]}_{lead_id}_{index}"


def parse_occurrence_ref(reference: str) -> OccurrenceRef:
    """Parse ``monthly_12_3``-style references produced by the calendar."""
    parts = (reference or "").strip().split("_")
    if len(parts) != 3 or parts[0] not in _PREFIX_SOURCES or not parts[1].isdigit() or not parts[2].isdigit():
        raise WashValidationError(f"Invalid occurrence reference '{reference}'")
    return OccurrenceRef(source=_PREFIX_SOURCES[parts[0]], lead_id=int(parts[1]), index=int(parts[2]))
