"""
Revenue API endpoints.
Daily revenue intake per branch and the accounting check behind it.
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dependencies import get_repository, get_revenue_intake
from schemas import (
    DailyRevenueCreate,
    DailyRevenueCreateResponse,
    DailyRevenueResponse,
    RevenueValidationRequest,
    RevenueValidationResponse,
)
from services.accounting import validate_revenue_matching
from services.bonus_repository import BonusRepository
from services.revenue_intake import DailyRevenueIntake
from utils.response_builders import build_daily_revenue_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/revenues/validate", response_model=RevenueValidationResponse)
async def validate_revenue(payload: RevenueValidationRequest):
    """
    Check amounts against the accounting identity without storing anything.

    Rules: balance == network, total == cash + network, employee_total == total
    (each within 0.01).
    """
    result = validate_revenue_matching(
        payload.cash, payload.network, payload.total, payload.balance, payload.employee_total
    )
    return RevenueValidationResponse(is_matched=result.is_matched, reasons=result.reasons)


@router.post("/revenues/daily", response_model=DailyRevenueCreateResponse, status_code=201)
async def create_daily_revenue(
    payload: DailyRevenueCreate,
    actor_id: Optional[int] = Query(None, gt=0, description="ID of the user recording the revenue"),
    intake: DailyRevenueIntake = Depends(get_revenue_intake),
    repository: BonusRepository = Depends(get_repository),
):
    """
    Record one day of revenue for a branch.

    This will:
    1. Validate the amounts (an unmatched day needs unmatch_reason)
    2. Store the entry and its employee contributions
    3. Resync the weekly bonus of the bucket the date falls in
    4. Alert the branch manager when the day does not match
    """
    revenue, sync_result = intake.record(payload, actor_id=actor_id)

    stored = repository.list_daily_revenues(revenue.branch_id, revenue.revenue_date, revenue.revenue_date)
    return DailyRevenueCreateResponse(
        revenue=build_daily_revenue_response(stored[0]),
        sync=sync_result,
    )


@router.get("/revenues/daily", response_model=List[DailyRevenueResponse])
async def list_daily_revenues(
    branch_id: Optional[int] = Query(None, gt=0, description="Filter by branch"),
    start_date: Optional[date] = Query(None, description="Earliest revenue date (inclusive)"),
    end_date: Optional[date] = Query(None, description="Latest revenue date (inclusive)"),
    repository: BonusRepository = Depends(get_repository),
):
    """
    List daily revenue entries, newest first.
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    revenues = repository.list_daily_revenues(branch_id, start_date, end_date)
    return [build_daily_revenue_response(r) for r in revenues]
