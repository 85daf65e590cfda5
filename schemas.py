"""
Pydantic schemas for API request/response validation.
These define the structure of data sent to and from the API, and the
result objects returned by the bonus services.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import date, datetime, time
from decimal import Decimal

from constants import BonusStatus, RequestStatus


# ============================================
# Daily Revenue Schemas
# ============================================

class EmployeeContributionCreate(BaseModel):
    """One employee's share of a daily revenue entry"""
    employee_id: int = Field(..., gt=0)
    cash: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    network: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    total: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


class DailyRevenueCreate(BaseModel):
    """Daily revenue submission for one branch and day"""
    branch_id: int = Field(..., gt=0)
    revenue_date: date
    cash: Decimal = Field(..., ge=0, decimal_places=2)
    network: Decimal = Field(..., ge=0, decimal_places=2)
    total: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    balance: Optional[Decimal] = Field(None, decimal_places=2)
    employee_revenues: List[EmployeeContributionCreate] = Field(..., min_length=1)
    unmatch_reason: Optional[str] = Field(None, max_length=2000)

    @field_validator('employee_revenues')
    @classmethod
    def unique_employees(cls, value: List[EmployeeContributionCreate]):
        ids = [c.employee_id for c in value]
        if len(ids) != len(set(ids)):
            raise ValueError('Each employee may appear only once per daily revenue')
        return value


class RevenueValidationRequest(BaseModel):
    """Amounts to check against the accounting identity"""
    cash: Decimal
    network: Decimal
    total: Decimal
    balance: Decimal
    employee_total: Decimal


class RevenueValidationResponse(BaseModel):
    is_matched: bool
    reasons: List[str] = []


class EmployeeRevenueResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    cash: Decimal
    network: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class DailyRevenueResponse(BaseModel):
    id: int
    branch_id: int
    branch_name: Optional[str] = None
    revenue_date: date
    cash: Decimal
    network: Decimal
    total: Decimal
    balance: Decimal
    employee_total: Decimal
    is_matched: bool
    unmatch_reason: Optional[str] = None
    mismatch_details: Optional[List[str]] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    employee_revenues: List[EmployeeRevenueResponse] = []

    model_config = ConfigDict(from_attributes=True)


# ============================================
# Weekly Bonus Schemas
# ============================================

class BonusBucket(BaseModel):
    """(branch, year, month, week) identifying one weekly bonus"""
    branch_id: int = Field(..., gt=0)
    year: int = Field(..., ge=2020, le=9999)
    month: int = Field(..., ge=1, le=12)
    week_number: int = Field(..., ge=1, le=5)


class BonusLineResponse(BaseModel):
    """Per-employee bonus line"""
    id: int
    employee_id: int
    employee_code: Optional[str] = None
    employee_name: Optional[str] = None
    weekly_revenue: Decimal
    bonus_tier: str
    bonus_amount: Decimal
    is_eligible: bool

    model_config = ConfigDict(from_attributes=True)


class WeeklyBonusResponse(BaseModel):
    """Weekly bonus record without lines"""
    id: int
    branch_id: int
    branch_name: Optional[str] = None
    year: int
    month: int
    week_number: int
    week_start: date
    week_end: date
    total_revenue: Decimal
    total_amount: Decimal
    employee_count: int
    eligible_count: int
    status: BonusStatus
    requested_at: Optional[datetime] = None
    requested_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    last_synced_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WeeklyBonusDetailResponse(WeeklyBonusResponse):
    """Weekly bonus record with its employee breakdown"""
    details: List[BonusLineResponse] = []


class BonusHistoryStats(BaseModel):
    total_paid: Decimal = Decimal("0.00")
    average_per_employee: Decimal = Decimal("0.00")
    approval_rate: float = Field(0.0, ge=0, le=100)
    pending_count: int = 0


class BonusHistoryResponse(BaseModel):
    bonuses: List[WeeklyBonusResponse] = []
    stats: BonusHistoryStats


class BonusRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)

    @field_validator('reason')
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('Rejection reason is required')
        return value.strip()


class BulkBonusAction(BaseModel):
    """Bulk approve request"""
    weekly_bonus_ids: List[int] = Field(..., min_length=1, max_length=500)


class BulkBonusReject(BulkBonusAction):
    """Bulk reject request; one reason for the whole batch"""
    reason: str = Field(..., min_length=1, max_length=2000)

    @field_validator('reason')
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('Rejection reason is required')
        return value.strip()


class BulkItemResult(BaseModel):
    weekly_bonus_id: int
    success: bool
    message: str


class BulkActionResult(BaseModel):
    total: int
    success_count: int
    failed_count: int
    results: List[BulkItemResult] = []


class BonusAuditEntryResponse(BaseModel):
    id: int
    weekly_bonus_id: int
    action: str
    performed_by: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    performed_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================
# Sync Schemas
# ============================================

class SyncData(BaseModel):
    weekly_bonus_id: int
    week_start: date
    week_end: date
    total_revenue: Decimal
    total_amount: Decimal
    employee_count: int
    eligible_count: int
    changed: bool = True


class SyncResult(BaseModel):
    """
    Outcome of syncing one bucket.

    success=False with conflict=False means there was nothing to sync
    (no employees or no revenue); conflict=True means the record has left
    'pending' and was not touched.
    """
    success: bool
    message: str
    branch_id: int
    year: int
    month: int
    week_number: int
    conflict: bool = False
    status: Optional[BonusStatus] = None
    data: Optional[SyncData] = None


class BranchSyncResult(BaseModel):
    branch_id: int
    branch_name: str
    success: bool
    message: str
    conflict: bool = False
    skipped: bool = False
    data: Optional[SyncData] = None


class SweepResult(BaseModel):
    success: bool
    message: str
    sync_date: date
    year: int
    month: int
    week_number: int
    is_closing_day: bool
    total: int
    success_count: int
    skipped_count: int = 0
    failed_count: int
    results: List[BranchSyncResult] = []


class DailyRevenueCreateResponse(BaseModel):
    revenue: DailyRevenueResponse
    sync: Optional[SyncResult] = None


# ============================================
# Employee Request Schemas
# ============================================

class _RequestPayloadBase(BaseModel):
    model_config = ConfigDict(extra='forbid')


class AdvancePayload(_RequestPayloadBase):
    request_type: Literal['advance'] = 'advance'
    amount: Decimal = Field(..., ge=1, le=50000, decimal_places=2)
    reason: Optional[str] = Field(None, max_length=1000)


class LeavePayload(_RequestPayloadBase):
    request_type: Literal['leave'] = 'leave'
    start_date: date
    days: int = Field(..., ge=1, le=365)
    reason: Optional[str] = Field(None, max_length=1000)

    @field_validator('start_date')
    @classmethod
    def not_in_past(cls, value: date) -> date:
        if value < date.today():
            raise ValueError('Leave must start today or later')
        return value


class ArrearsPayload(_RequestPayloadBase):
    request_type: Literal['arrears'] = 'arrears'
    amount: Decimal = Field(..., ge=1, decimal_places=2)
    reason: Optional[str] = Field(None, max_length=1000)


class PermissionPayload(_RequestPayloadBase):
    request_type: Literal['permission'] = 'permission'
    permission_date: date
    start_time: time
    end_time: time
    reason: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode='after')
    def check_window(self):
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        if start >= end:
            raise ValueError('Start time must be before end time')
        if end - start > 8 * 60:
            raise ValueError('Permission may not exceed 8 hours')
        return self


class ViolationObjectionPayload(_RequestPayloadBase):
    request_type: Literal['violation_objection'] = 'violation_objection'
    reason: str = Field(..., min_length=1, max_length=1000)
    details: str = Field(..., min_length=1, max_length=5000)


class ResignationPayload(_RequestPayloadBase):
    request_type: Literal['resignation'] = 'resignation'
    text: str = Field(..., min_length=1, max_length=5000)
    national_id: str = Field(..., min_length=14, max_length=14)


EmployeeRequestPayload = Annotated[
    Union[
        AdvancePayload,
        LeavePayload,
        ArrearsPayload,
        PermissionPayload,
        ViolationObjectionPayload,
        ResignationPayload,
    ],
    Field(discriminator='request_type'),
]


class EmployeeRequestCreate(BaseModel):
    branch_id: int = Field(..., gt=0)
    employee_id: int = Field(..., gt=0)
    payload: EmployeeRequestPayload


class EmployeeRequestRespond(BaseModel):
    status: Literal['approved', 'rejected']
    admin_response: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode='after')
    def rejection_needs_response(self):
        if self.status == 'rejected' and not (self.admin_response or '').strip():
            raise ValueError('A response is required when rejecting a request')
        return self


class EmployeeRequestResponse(BaseModel):
    id: int
    branch_id: int
    employee_id: int
    employee_name: Optional[str] = None
    request_type: str
    payload: Dict[str, Any]
    status: RequestStatus
    admin_response: Optional[str] = None
    responded_by: Optional[int] = None
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
