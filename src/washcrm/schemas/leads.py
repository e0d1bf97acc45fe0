"""Lead request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class WasherRefModel(BaseModel):
    id: str
    name: str


class OneTimeWashModel(BaseModel):
    washType: Optional[str] = None
    amount: Optional[float] = None
    scheduledDate: Optional[str] = None
    washer: Optional[WasherRefModel] = None
    status: str
    serviceType: str
    duration: Optional[int] = None
    paid: bool = False
    assignedAt: Optional[str] = None


class ScheduledWashEntryModel(BaseModel):
    washNumber: int
    scheduledDate: Optional[str] = None
    scheduledTime: str
    status: str
    completedDate: Optional[str] = None
    washer: Optional[WasherRefModel] = None
    feedback: str = ""
    amount: Optional[float] = None
    paid: bool = False
    serviceType: str
    duration: Optional[int] = None


class SubscriptionModel(BaseModel):
    packageType: str
    customPlanName: str = ""
    totalWashes: int
    totalInteriorWashes: int = 0
    usedInteriorWashes: int = 0
    completedWashes: int = 0
    monthlyPrice: float
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    isActive: bool
    scheduledWashes: List[ScheduledWashEntryModel]


class WashHistoryEntryModel(BaseModel):
    index: int
    washType: str
    date: Optional[str] = None
    amount: float
    washer: Optional[WasherRefModel] = None
    feedback: str = ""
    paid: bool = False
    washStatus: str
    serviceType: str
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    duration: Optional[int] = None


class LeadModel(BaseModel):
    id: int
    recordId: str
    leadType: str
    leadSource: str
    customerName: str
    phone: str
    area: str
    carModel: Optional[str] = None
    vehicleNumber: Optional[str] = None
    notes: Optional[str] = None
    status: str
    coordinates: List[float]
    assignedWasher: Optional[WasherRefModel] = None
    oneTimeWash: Optional[OneTimeWashModel] = None
    monthlySubscription: Optional[SubscriptionModel] = None
    washHistory: List[WashHistoryEntryModel] = Field(default_factory=list)
    createdAt: Optional[str] = None
    version: int


class OneTimeWashRequest(BaseModel):
    washType: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    scheduledDate: Optional[str] = None
    serviceType: Optional[str] = None


class LeadCreateRequest(BaseModel):
    """Required fields are checked by the service so that missing ones are reported together."""

    customerName: Optional[str] = None
    phone: Optional[str] = None
    area: Optional[str] = None
    carModel: Optional[str] = None
    leadType: Optional[str] = None
    leadSource: Optional[str] = None
    vehicleNumber: Optional[str] = None
    notes: Optional[str] = None
    coordinates: Optional[List[float]] = Field(default=None, min_length=2, max_length=2)
    assignedWasher: Optional[str] = None
    oneTimeWash: Optional[OneTimeWashRequest] = None


class LeadCreateResponse(BaseModel):
    created: bool
    message: str
    lead: LeadModel


class LeadUpdateRequest(BaseModel):
    customerName: Optional[str] = None
    phone: Optional[str] = None
    area: Optional[str] = None
    carModel: Optional[str] = None
    vehicleNumber: Optional[str] = None
    leadType: Optional[str] = None
    leadSource: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    assignedWasher: Optional[str] = None


class WashEntryRequest(BaseModel):
    washType: Optional[str] = None
    date: Optional[str] = Field(default=None, description="ISO date/datetime or MM/DD/YYYY; defaults to now.")
    washerId: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    feedback: str = ""
    paid: bool = False
    washStatus: Optional[str] = None
    serviceType: str = "Exterior"


class WashEntryUpdateRequest(BaseModel):
    washType: Optional[str] = None
    washerId: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    date: Optional[str] = None
    feedback: Optional[str] = None
    paid: Optional[bool] = None
    washStatus: Optional[str] = None
    serviceType: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)


class StartWashRequest(BaseModel):
    startTime: Optional[str] = None


class WashEntryResponse(BaseModel):
    leadId: int
    historyIndex: int
    entry: WashHistoryEntryModel
    autoAssigned: bool
    assignedWasher: Optional[WasherRefModel] = None
    washerResolved: bool = True


class OneTimeAssignRequest(BaseModel):
    washType: Optional[str] = None
    scheduledDate: Optional[str] = None
    washerId: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    serviceType: str = "Exterior"


class SubscriptionRequest(BaseModel):
    packageType: Optional[str] = None
    customPlanName: Optional[str] = None
    totalWashes: Optional[int] = Field(default=None, ge=1)
    totalInteriorWashes: Optional[int] = Field(default=None, ge=0)
    monthlyPrice: Optional[float] = Field(default=None, ge=0)
    scheduledDates: Optional[List[str]] = Field(
        default=None, description="Explicit wash dates; generated evenly over 30 days when omitted."
    )
    startDate: Optional[str] = None
    washerId: Optional[str] = None


class SubscriptionResponse(BaseModel):
    leadId: int
    subscription: SubscriptionModel
    washHistory: List[WashHistoryEntryModel]
    autoAssigned: bool
    assignedWasher: Optional[WasherRefModel] = None
    washerResolved: bool = True


class BillItemModel(BaseModel):
    entryId: str
    description: str
    date: Optional[str] = None
    time: Optional[str] = None
    vehicleNumber: str
    washType: str
    washStatus: str
    amount: float
    isPaid: bool
    source: str


class BillResponse(BaseModel):
    customerId: int
    customerName: str
    phone: str
    area: str
    carModel: Optional[str] = None
    leadType: str
    billDate: str
    items: List[BillItemModel]
    totalAmount: float
    paidAmount: float
    pendingAmount: float
    subscriptionDetails: Optional[dict] = None


class ImportResultResponse(BaseModel):
    totalRows: int
    created: List[int]
    existing: List[int]
    failed: List[dict]
