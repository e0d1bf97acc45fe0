"""Calendar and wash lifecycle endpoints."""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter, Query, Response, status

from ...data.washers_repository import washer_names
from ...schemas.schedule import (
    AssignmentResponse,
    AssignWasherDateRequest,
    CompleteWashRequest,
    CompletionResponse,
    PendingAssignmentsResponse,
    RescheduleRequest,
    ScheduledWashModel,
)
from ...services import scheduling
from ...services.outputs.formatter import schedule_to_csv, schedule_to_json
from ..errors import http_error
from ..serializers import history_model, occurrence_model, subscription_model, washer_ref

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _calendar(start_date: str | None, end_date: str | None, washer_id: str | None) -> List[ScheduledWashModel]:
    occurrences = scheduling.list_scheduled_washes(start_date, end_date, washer_id)
    names = washer_names()
    return [occurrence_model(occurrence, names) for occurrence in occurrences]


@router.get("/scheduled-washes", response_model=List[ScheduledWashModel], status_code=status.HTTP_200_OK)
def list_scheduled_washes(
    startDate: str | None = Query(default=None, description="Window start (inclusive), ISO format."),
    endDate: str | None = Query(default=None, description="Window end (inclusive), ISO format."),
    washerId: str | None = Query(default=None, description="Only washes resolved to this washer."),
) -> List[ScheduledWashModel]:
    """De-duplicated calendar of wash occurrences in the window."""
    try:
        return _calendar(startDate, endDate, washerId)
    except Exception as exc:
        raise http_error(exc, "listing scheduled washes") from exc


@router.get("/export", status_code=status.HTTP_200_OK)
def export_schedule(
    startDate: str | None = Query(default=None),
    endDate: str | None = Query(default=None),
    washerId: str | None = Query(default=None),
    format: Literal["csv", "json"] = Query(default="csv"),
):
    try:
        washes = _calendar(startDate, endDate, washerId)
    except Exception as exc:
        raise http_error(exc, "exporting schedule") from exc
    if format == "json":
        return schedule_to_json(washes)
    return Response(
        content=schedule_to_csv(washes),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="schedule.csv"'},
    )


@router.get("/pending-assignments", response_model=PendingAssignmentsResponse, status_code=status.HTTP_200_OK)
def pending_assignments(date: str | None = Query(default=None, description="Day to inspect; defaults to today.")):
    try:
        pending = scheduling.list_pending_assignments(date)
    except Exception as exc:
        raise http_error(exc, "listing pending assignments") from exc
    names = washer_names()
    data = [occurrence_model(occurrence, names) for occurrence in pending.occurrences]
    return PendingAssignmentsResponse(date=pending.day.isoformat(), total=len(data), data=data)


@router.post("/assign-washer-date", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
def assign_washer_date(payload: AssignWasherDateRequest) -> AssignmentResponse:
    try:
        result = scheduling.assign_washer_to_date(
            payload.customerId, payload.washerId, payload.targetDate, payload.washType
        )
    except Exception as exc:
        raise http_error(exc, "assigning washer to date") from exc
    names = washer_names()
    return AssignmentResponse(
        occurrence=occurrence_model(result.occurrence, names),
        autoAssigned=result.outcome.auto_assigned,
        assignedWasher=washer_ref(result.lead.assigned_washer, names),
        washerResolved=result.outcome.washer_resolved,
    )


@router.post("/complete", response_model=CompletionResponse, status_code=status.HTTP_200_OK)
def complete_wash(payload: CompleteWashRequest) -> CompletionResponse:
    try:
        result = scheduling.complete_wash(
            payload.occurrenceRef,
            washer_id=payload.washerId,
            paid=payload.paid,
            feedback=payload.feedback,
            start_time=payload.startTime,
            end_time=payload.endTime,
            duration=payload.duration,
            service_type=payload.serviceType,
        )
    except Exception as exc:
        raise http_error(exc, "completing wash") from exc
    names = washer_names()
    lead = result.lead
    history_entry = None
    if result.history_index is not None:
        history_entry = history_model(result.history_index, lead.wash_history[result.history_index], names)
    return CompletionResponse(
        occurrence=occurrence_model(result.occurrence, names),
        historyEntry=history_entry,
        historyCreated=result.history_created,
        washerResolved=result.washer_resolved,
        subscription=subscription_model(lead.monthly_subscription, names) if lead.monthly_subscription else None,
    )


@router.post("/reschedule", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
def reschedule_wash(payload: RescheduleRequest) -> AssignmentResponse:
    try:
        result = scheduling.reschedule(payload.occurrenceRef, payload.newDate)
    except Exception as exc:
        raise http_error(exc, "rescheduling wash") from exc
    names = washer_names()
    return AssignmentResponse(
        occurrence=occurrence_model(result.occurrence, names),
        autoAssigned=result.outcome.auto_assigned,
        assignedWasher=washer_ref(result.lead.assigned_washer, names),
    )
