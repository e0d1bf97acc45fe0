"""Washer fallback and display status for occurrences."""

from __future__ import annotations

from typing import Iterable, Optional

from .models import DisplayStatus, Occurrence


def resolve_washer(occurrence: Occurrence) -> Optional[str]:
    """Occurrence-level washer, else the lead's default washer."""
    return occurrence.washer or occurrence.lead.assigned_washer or None


def derive_display_status(raw_status: Optional[str], washer: Optional[str]) -> DisplayStatus:
    if raw_status == "completed":
        return "completed"
    if washer:
        return "assigned"
    return "pending"


def annotate(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    annotated = []
    for occurrence in occurrences:
        occurrence.resolved_washer = resolve_washer(occurrence)
        occurrence.display_status = derive_display_status(occurrence.raw_status, occurrence.resolved_washer)
        annotated.append(occurrence)
    return annotated
