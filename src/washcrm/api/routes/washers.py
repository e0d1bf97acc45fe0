"""Washer registry, attendance and salary endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from ...data import washers_repository
from ...schemas.washers import (
    AttendanceDateRequest,
    AttendanceModel,
    AttendanceReportResponse,
    AttendanceRequest,
    AttendanceStatsModel,
    SalaryModel,
    SalaryRequest,
    WasherCreateRequest,
    WasherModel,
    WasherUpdateRequest,
)
from ...services.washers import service as washers
from ..errors import http_error
from ..serializers import attendance_model, salary_model, washer_model

router = APIRouter(prefix="/washers", tags=["washers"])


@router.get("", response_model=List[WasherModel], status_code=status.HTTP_200_OK)
def list_washers(status_filter: str | None = Query(default=None, alias="status")) -> List[WasherModel]:
    try:
        return [washer_model(washer) for washer in washers_repository.list_washers(status_filter)]
    except Exception as exc:
        raise http_error(exc, "listing washers") from exc


@router.post("", response_model=WasherModel, status_code=status.HTTP_201_CREATED)
def create_washer(payload: WasherCreateRequest) -> WasherModel:
    try:
        washer = washers.register_washer(payload.name, payload.phone, email=payload.email, area=payload.area)
    except Exception as exc:
        raise http_error(exc, "registering washer") from exc
    return washer_model(washer)


@router.post("/attendance", response_model=AttendanceModel, status_code=status.HTTP_200_OK)
def mark_attendance(payload: AttendanceRequest) -> AttendanceModel:
    try:
        return attendance_model(washers.mark_attendance(payload.washerId, payload.type))
    except Exception as exc:
        raise http_error(exc, f"marking time-{payload.type}") from exc


@router.get("/{washer_id}", response_model=WasherModel, status_code=status.HTTP_200_OK)
def get_washer(washer_id: str) -> WasherModel:
    try:
        return washer_model(washers_repository.get_washer(washer_id))
    except Exception as exc:
        raise http_error(exc, "loading washer") from exc


@router.put("/{washer_id}", response_model=WasherModel, status_code=status.HTTP_200_OK)
def update_washer(washer_id: str, payload: WasherUpdateRequest) -> WasherModel:
    try:
        return washer_model(washers.update_washer(washer_id, payload.model_dump(exclude_unset=True)))
    except Exception as exc:
        raise http_error(exc, "updating washer") from exc


@router.get("/{washer_id}/attendance", response_model=AttendanceReportResponse, status_code=status.HTTP_200_OK)
def get_attendance(
    washer_id: str,
    startDate: str | None = Query(default=None),
    endDate: str | None = Query(default=None),
) -> AttendanceReportResponse:
    try:
        report = washers.attendance_report(washer_id, startDate, endDate)
    except Exception as exc:
        raise http_error(exc, "loading attendance") from exc
    return AttendanceReportResponse(
        washerId=report["washer"].washer_id,
        attendance=[attendance_model(record) for record in report["attendance"]],
        stats=AttendanceStatsModel(**report["stats"]),
    )


@router.put("/{washer_id}/attendance/date/{day}", response_model=AttendanceModel, status_code=status.HTTP_200_OK)
def set_attendance(washer_id: str, day: str, payload: AttendanceDateRequest) -> AttendanceModel:
    try:
        return attendance_model(washers.set_attendance_for_date(washer_id, day, payload.status))
    except Exception as exc:
        raise http_error(exc, "updating attendance") from exc


@router.get("/{washer_id}/salary", response_model=SalaryModel | None, status_code=status.HTTP_200_OK)
def get_salary(washer_id: str) -> SalaryModel | None:
    try:
        salary = washers.get_salary(washer_id)
    except Exception as exc:
        raise http_error(exc, "loading salary") from exc
    return salary_model(salary)


@router.post("/{washer_id}/salary", response_model=SalaryModel, status_code=status.HTTP_200_OK)
def set_salary(washer_id: str, payload: SalaryRequest) -> SalaryModel:
    try:
        salary = washers.set_salary(washer_id, payload.baseSalary, payload.effectiveDate)
    except Exception as exc:
        raise http_error(exc, "updating salary") from exc
    return salary_model(salary)
