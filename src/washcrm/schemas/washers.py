"""Washer, attendance and expense schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SalaryModel(BaseModel):
    baseSalary: float
    effectiveDate: Optional[str] = None
    updatedAt: Optional[str] = None


class AttendanceModel(BaseModel):
    date: Optional[str] = None
    timeIn: Optional[str] = None
    timeOut: Optional[str] = None
    duration: float
    status: str


class WasherModel(BaseModel):
    id: int
    recordId: str
    name: str
    phone: str
    email: Optional[str] = None
    area: Optional[str] = None
    status: str
    salary: Optional[SalaryModel] = None
    createdAt: Optional[str] = None


class WasherCreateRequest(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    area: Optional[str] = None


class WasherUpdateRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    area: Optional[str] = None
    status: Optional[Literal["Active", "Inactive"]] = None


class AttendanceRequest(BaseModel):
    washerId: str
    type: Literal["in", "out"]


class AttendanceDateRequest(BaseModel):
    status: Literal["present", "absent"]


class AttendanceStatsModel(BaseModel):
    totalDays: int
    presentDays: int
    incompleteDays: int
    totalHours: float


class AttendanceReportResponse(BaseModel):
    washerId: int
    attendance: List[AttendanceModel]
    stats: AttendanceStatsModel


class SalaryRequest(BaseModel):
    baseSalary: float = Field(..., ge=0)
    effectiveDate: Optional[str] = None


class ExpenseModel(BaseModel):
    id: str
    washerName: str
    amount: float
    reason: str
    date: str
    createdBy: str


class ExpenseRequest(BaseModel):
    washerName: Optional[str] = None
    amount: Optional[float] = None
    reason: Optional[str] = None
    date: Optional[str] = None


class SalaryCalculationModel(BaseModel):
    washerId: int
    washerName: str
    baseSalary: float
    washCount: int
    presentDays: int
    totalWorkingDays: int
    attendancePercentage: float
    expenses: float
    lossOfPay: float
    totalSalary: float
    month: int
    year: int
