"""Lead (customer) endpoints: intake, wash entries, subscriptions and bills."""

from __future__ import annotations

import json
from typing import List

from fastapi import APIRouter, File, Form, HTTPException, Query, Response, UploadFile, status

from ...data import leads_repository
from ...data.washers_repository import washer_names
from ...schemas.leads import (
    BillResponse,
    ImportResultResponse,
    LeadCreateRequest,
    LeadCreateResponse,
    LeadModel,
    LeadUpdateRequest,
    OneTimeAssignRequest,
    StartWashRequest,
    SubscriptionRequest,
    SubscriptionResponse,
    WashEntryRequest,
    WashEntryResponse,
    WashEntryUpdateRequest,
)
from ...schemas.schedule import AssignmentResponse
from ...services import scheduling
from ...services.leads import build_bill, create_lead, list_leads, update_lead
from ...services.leads.importer import IMPORT_FIELDS, import_leads, read_rows, suggest_column_mappings
from ..errors import http_error
from ..serializers import history_model, lead_model, occurrence_model, subscription_model, washer_ref

router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("", response_model=List[LeadModel], status_code=status.HTTP_200_OK)
def get_leads(
    searchQuery: str | None = Query(default=None, description="Matches name, phone or area."),
    leadType: str | None = Query(default=None),
    leadSource: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    location: str | None = Query(default=None),
    plan: str | None = Query(default=None),
    startDate: str | None = Query(default=None),
    endDate: str | None = Query(default=None),
) -> List[LeadModel]:
    try:
        leads = list_leads(
            search=searchQuery,
            lead_type=leadType,
            lead_source=leadSource,
            status=status_filter,
            area=location,
            plan=plan,
            start_date=startDate,
            end_date=endDate,
        )
        names = washer_names()
    except Exception as exc:
        raise http_error(exc, "listing leads") from exc
    return [lead_model(lead, names) for lead in leads]


@router.post("", response_model=LeadCreateResponse, status_code=status.HTTP_201_CREATED)
def post_lead(payload: LeadCreateRequest, response: Response) -> LeadCreateResponse:
    try:
        lead, created = create_lead(payload.model_dump(exclude_none=True))
        names = washer_names()
    except Exception as exc:
        raise http_error(exc, "creating lead") from exc
    if not created:
        response.status_code = status.HTTP_200_OK
    message = f"{lead.lead_type} lead created successfully" if created else "Existing customer found"
    return LeadCreateResponse(created=created, message=message, lead=lead_model(lead, names))


@router.post("/import/preview")
async def preview_lead_file(file: UploadFile = File(...)) -> dict:
    """Preview CSV/Excel file headers and suggest column mappings."""
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required.")
    try:
        headers, rows = read_rows(file.filename, await file.read())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc
    return {
        "fileName": file.filename,
        "detectedColumns": headers,
        "rowCount": len(rows),
        "suggestedMappings": suggest_column_mappings(headers),
        "requiredFields": IMPORT_FIELDS,
    }


@router.post("/import", response_model=ImportResultResponse, status_code=status.HTTP_201_CREATED)
async def import_lead_file(
    file: UploadFile = File(...),
    mappings: str = Form(None),
    leadType: str = Form("One-time"),
    leadSource: str = Form("Other"),
) -> ImportResultResponse:
    """Create leads from a spreadsheet.

    Args:
        file: CSV or Excel file, one lead per row
        mappings: JSON string of column mappings (e.g., {"customerName": "Name", "phone": "Mobile"})
        leadType: lead type for rows without one
        leadSource: lead source for rows without one
    """
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required.")

    column_mappings: dict[str, str] = {}
    if mappings:
        try:
            column_mappings = json.loads(mappings)
        except json.JSONDecodeError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid mappings JSON")

    try:
        headers, rows = read_rows(file.filename, await file.read())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc

    try:
        summary = import_leads(
            rows,
            column_mappings or suggest_column_mappings(headers),
            default_lead_type=leadType,
            default_lead_source=leadSource,
        )
    except Exception as exc:
        raise http_error(exc, "importing leads") from exc
    return ImportResultResponse(**summary)


@router.get("/{lead_id}", response_model=LeadModel, status_code=status.HTTP_200_OK)
def get_lead(lead_id: str) -> LeadModel:
    try:
        lead = leads_repository.get_lead(lead_id)
        names = washer_names()
    except Exception as exc:
        raise http_error(exc, "loading lead") from exc
    return lead_model(lead, names)


@router.put("/{lead_id}", response_model=LeadModel, status_code=status.HTTP_200_OK)
def put_lead(lead_id: str, payload: LeadUpdateRequest) -> LeadModel:
    try:
        lead = update_lead(lead_id, payload.model_dump(exclude_unset=True))
        names = washer_names()
    except Exception as exc:
        raise http_error(exc, "updating lead") from exc
    return lead_model(lead, names)


@router.delete("/{lead_id}", status_code=status.HTTP_200_OK)
def delete_lead(lead_id: str) -> dict:
    try:
        leads_repository.delete_lead(lead_id)
    except Exception as exc:
        raise http_error(exc, "deleting lead") from exc
    return {"message": "Customer deleted successfully"}


@router.get("/{lead_id}/bill", response_model=BillResponse, status_code=status.HTTP_200_OK)
def get_bill(lead_id: str) -> BillResponse:
    try:
        return BillResponse(**build_bill(lead_id))
    except Exception as exc:
        raise http_error(exc, "building bill") from exc


def _wash_entry_response(result) -> WashEntryResponse:
    names = washer_names()
    lead = result.lead
    return WashEntryResponse(
        leadId=lead.lead_id,
        historyIndex=result.history_index,
        entry=history_model(result.history_index, lead.wash_history[result.history_index], names),
        autoAssigned=result.outcome.auto_assigned,
        assignedWasher=washer_ref(lead.assigned_washer, names),
        washerResolved=result.outcome.washer_resolved,
    )


@router.post("/{lead_id}/wash-history", response_model=WashEntryResponse, status_code=status.HTTP_201_CREATED)
def add_wash_entry(lead_id: str, payload: WashEntryRequest) -> WashEntryResponse:
    try:
        result = scheduling.add_wash_entry(
            lead_id,
            payload.washType,
            payload.date,
            washer_id=payload.washerId,
            amount=payload.amount,
            feedback=payload.feedback,
            paid=payload.paid,
            wash_status=payload.washStatus,
            service_type=payload.serviceType,
        )
        return _wash_entry_response(result)
    except Exception as exc:
        raise http_error(exc, "adding wash entry") from exc


@router.put("/{lead_id}/wash-history/{index}/start", response_model=WashEntryResponse, status_code=status.HTTP_200_OK)
def start_wash(lead_id: str, index: int, payload: StartWashRequest | None = None) -> WashEntryResponse:
    try:
        result = scheduling.start_wash(lead_id, index, payload.startTime if payload else None)
        return _wash_entry_response(result)
    except Exception as exc:
        raise http_error(exc, "starting wash") from exc


@router.put("/{lead_id}/wash-history/{index}", response_model=WashEntryResponse, status_code=status.HTTP_200_OK)
def update_wash_entry(lead_id: str, index: int, payload: WashEntryUpdateRequest) -> WashEntryResponse:
    try:
        result = scheduling.update_wash_entry(lead_id, index, payload.model_dump(exclude_unset=True))
        return _wash_entry_response(result)
    except Exception as exc:
        raise http_error(exc, "updating wash entry") from exc


@router.put("/{lead_id}/assign-onetime", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
def assign_one_time(lead_id: str, payload: OneTimeAssignRequest) -> AssignmentResponse:
    try:
        result = scheduling.assign_one_time_wash(
            lead_id,
            payload.washType,
            payload.scheduledDate,
            washer_id=payload.washerId,
            amount=payload.amount,
            service_type=payload.serviceType,
        )
        names = washer_names()
    except Exception as exc:
        raise http_error(exc, "assigning one-time wash") from exc
    return AssignmentResponse(
        occurrence=occurrence_model(result.occurrence, names),
        autoAssigned=result.outcome.auto_assigned,
        assignedWasher=washer_ref(result.lead.assigned_washer, names),
        washerResolved=result.outcome.washer_resolved,
    )


@router.post(
    "/{lead_id}/monthly-subscription",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(lead_id: str, payload: SubscriptionRequest) -> SubscriptionResponse:
    try:
        result = scheduling.create_monthly_subscription(
            lead_id,
            package_type=payload.packageType,
            custom_plan_name=payload.customPlanName,
            total_washes=payload.totalWashes,
            total_interior_washes=payload.totalInteriorWashes,
            monthly_price=payload.monthlyPrice,
            scheduled_dates=payload.scheduledDates,
            start_date=payload.startDate,
            washer_id=payload.washerId,
        )
        names = washer_names()
    except Exception as exc:
        raise http_error(exc, "creating monthly subscription") from exc
    lead = result.lead
    return SubscriptionResponse(
        leadId=lead.lead_id,
        subscription=subscription_model(result.subscription, names),
        washHistory=[history_model(index, lead.wash_history[index], names) for index in result.history_indexes],
        autoAssigned=result.auto_assigned,
        assignedWasher=washer_ref(lead.assigned_washer, names),
        washerResolved=result.washer_resolved,
    )
