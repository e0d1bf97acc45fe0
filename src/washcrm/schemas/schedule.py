"""Calendar and wash lifecycle schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .leads import SubscriptionModel, WasherRefModel, WashHistoryEntryModel


class ScheduledWashModel(BaseModel):
    id: str = Field(..., description="Occurrence reference, e.g. 'monthly_12_0'.")
    customerName: str
    phone: str
    area: str
    carModel: Optional[str] = None
    washType: str
    scheduledDate: str
    washer: Optional[WasherRefModel] = None
    leadId: int
    leadType: str
    status: str = Field(..., description="completed, assigned or pending.")
    rawStatus: str
    source: str


class AssignWasherDateRequest(BaseModel):
    customerId: str
    washerId: str
    targetDate: Optional[str] = None
    washType: Optional[str] = None


class AssignmentResponse(BaseModel):
    occurrence: ScheduledWashModel
    autoAssigned: bool
    assignedWasher: Optional[WasherRefModel] = None
    washerResolved: bool = True


class CompleteWashRequest(BaseModel):
    occurrenceRef: str
    washerId: Optional[str] = None
    paid: Optional[bool] = None
    feedback: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0, description="Minutes; ignored when start and end are given.")
    serviceType: Optional[str] = None


class CompletionResponse(BaseModel):
    occurrence: ScheduledWashModel
    historyEntry: Optional[WashHistoryEntryModel] = None
    historyCreated: bool
    washerResolved: bool = True
    subscription: Optional[SubscriptionModel] = None


class RescheduleRequest(BaseModel):
    occurrenceRef: str
    newDate: Optional[str] = None


class PendingAssignmentsResponse(BaseModel):
    date: str
    total: int
    data: List[ScheduledWashModel]
