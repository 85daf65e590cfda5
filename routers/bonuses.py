"""
Weekly bonus API endpoints.

Calculation (sync), approval workflow, history and audit trail of the
weekly per-branch employee bonuses.
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from constants import BonusStatus
from dependencies import get_lifecycle, get_queries, get_sync_service
from schemas import (
    BonusAuditEntryResponse,
    BonusBucket,
    BonusHistoryResponse,
    BonusRejectRequest,
    BulkActionResult,
    BulkBonusAction,
    BulkBonusReject,
    SweepResult,
    SyncResult,
    WeeklyBonusDetailResponse,
    WeeklyBonusResponse,
)
from services.bonus_lifecycle import BonusLifecycle
from services.bonus_queries import BonusQueries
from services.revenue_sync import RevenueSyncService
from utils.response_builders import build_weekly_bonus_detail_response, build_weekly_bonus_response

router = APIRouter()
logger = logging.getLogger(__name__)


# ============================================
# Queries
# ============================================

@router.get("/bonuses/current", response_model=Optional[WeeklyBonusDetailResponse])
async def get_current_week_bonus(
    branch_id: int = Query(..., gt=0, description="Branch ID"),
    queries: BonusQueries = Depends(get_queries),
):
    """
    Get the weekly bonus of the bucket containing today (business timezone).

    Returns null when nothing has been synced for the current week yet.
    """
    bonus = queries.get_current_week_bonus(branch_id)
    if not bonus:
        return None
    return build_weekly_bonus_detail_response(bonus)


@router.get("/bonuses/week", response_model=WeeklyBonusDetailResponse)
async def get_weekly_bonus(
    branch_id: int = Query(..., gt=0),
    year: int = Query(..., ge=2020, le=9999),
    month: int = Query(..., ge=1, le=12),
    week_number: int = Query(..., ge=1, le=5),
    queries: BonusQueries = Depends(get_queries),
):
    """
    Get one weekly bonus with its per-employee lines.
    """
    bonus = queries.get_weekly_bonus_with_details(branch_id, year, month, week_number)
    if not bonus:
        raise HTTPException(
            status_code=404,
            detail=f"No weekly bonus for branch {branch_id}, week {week_number} of {year}-{month:02d}",
        )
    return build_weekly_bonus_detail_response(bonus)


@router.get("/bonuses/history", response_model=BonusHistoryResponse)
async def get_bonus_history(
    year: int = Query(..., ge=2020, le=9999),
    branch_id: Optional[int] = Query(None, gt=0, description="Filter by branch"),
    month: Optional[int] = Query(None, ge=1, le=12),
    status: Optional[BonusStatus] = Query(None, description="Filter by status"),
    queries: BonusQueries = Depends(get_queries),
):
    """
    List weekly bonuses of a year (newest first) with summary stats.
    """
    bonuses, stats = queries.get_bonus_history_with_stats(
        year, branch_id=branch_id, month=month, status=status.value if status else None
    )
    return BonusHistoryResponse(
        bonuses=[build_weekly_bonus_response(b) for b in bonuses],
        stats=stats,
    )


@router.get("/bonuses/pending", response_model=List[WeeklyBonusResponse])
async def get_pending_bonus_requests(
    queries: BonusQueries = Depends(get_queries),
):
    """
    List bonuses awaiting approval, oldest request first.
    """
    return [build_weekly_bonus_response(b) for b in queries.get_pending_bonus_requests()]


@router.get("/bonuses/{weekly_bonus_id}/audit", response_model=List[BonusAuditEntryResponse])
async def get_bonus_audit_history(
    weekly_bonus_id: int,
    queries: BonusQueries = Depends(get_queries),
):
    """
    Audit trail of one weekly bonus, oldest entry first. Unknown ids return an empty list.
    """
    return queries.get_audit_history(weekly_bonus_id)


# ============================================
# Calculation
# ============================================

@router.post("/bonuses/calculate", response_model=SyncResult)
async def calculate_weekly_bonus(
    bucket: BonusBucket,
    actor_id: Optional[int] = Query(None, gt=0, description="ID of the user triggering the calculation"),
    sync_service: RevenueSyncService = Depends(get_sync_service),
):
    """
    Recalculate the weekly bonus of one bucket from its daily revenues.

    A missing week of data is reported with success=false; a bonus that has
    already been requested or decided is left untouched (conflict=true).
    """
    return sync_service.sync_weekly_revenue(
        bucket.branch_id, bucket.week_number, bucket.month, bucket.year, actor_id=actor_id
    )


@router.post("/bonuses/sync/trigger", response_model=SweepResult)
async def trigger_bonus_sync(
    sync_date: Optional[date] = Query(None, description="Business date to sync for (defaults to today)"),
    actor_id: Optional[int] = Query(None, gt=0, description="ID of the user triggering the sweep"),
    sync_service: RevenueSyncService = Depends(get_sync_service),
):
    """
    Run the all-branches sweep now. Same code path as the daily scheduled run.
    """
    return sync_service.trigger_manual_sync(today=sync_date, actor_id=actor_id)


# ============================================
# Approval workflow
# ============================================

@router.post("/bonuses/{weekly_bonus_id}/request", response_model=WeeklyBonusResponse)
async def request_bonus_payout(
    weekly_bonus_id: int,
    actor_id: int = Query(..., gt=0, description="ID of the user requesting payout"),
    lifecycle: BonusLifecycle = Depends(get_lifecycle),
):
    """
    Submit a pending weekly bonus for approval.
    """
    bonus = lifecycle.request(weekly_bonus_id, actor_id)
    return build_weekly_bonus_response(bonus)


@router.post("/bonuses/{weekly_bonus_id}/approve", response_model=WeeklyBonusResponse)
async def approve_bonus(
    weekly_bonus_id: int,
    actor_id: int = Query(..., gt=0, description="ID of the admin approving"),
    lifecycle: BonusLifecycle = Depends(get_lifecycle),
):
    """
    Approve a requested weekly bonus.
    """
    bonus = lifecycle.approve(weekly_bonus_id, actor_id)
    return build_weekly_bonus_response(bonus)


@router.post("/bonuses/{weekly_bonus_id}/reject", response_model=WeeklyBonusResponse)
async def reject_bonus(
    weekly_bonus_id: int,
    rejection: BonusRejectRequest,
    actor_id: int = Query(..., gt=0, description="ID of the admin rejecting"),
    lifecycle: BonusLifecycle = Depends(get_lifecycle),
):
    """
    Reject a requested weekly bonus with a reason.
    """
    bonus = lifecycle.reject(weekly_bonus_id, actor_id, rejection.reason)
    return build_weekly_bonus_response(bonus)


@router.post("/bonuses/bulk-approve", response_model=BulkActionResult)
async def bulk_approve_bonuses(
    payload: BulkBonusAction,
    actor_id: int = Query(..., gt=0, description="ID of the admin approving"),
    lifecycle: BonusLifecycle = Depends(get_lifecycle),
):
    """
    Approve several requested bonuses; each id succeeds or fails on its own.
    """
    return lifecycle.bulk_approve(payload.weekly_bonus_ids, actor_id)


@router.post("/bonuses/bulk-reject", response_model=BulkActionResult)
async def bulk_reject_bonuses(
    payload: BulkBonusReject,
    actor_id: int = Query(..., gt=0, description="ID of the admin rejecting"),
    lifecycle: BonusLifecycle = Depends(get_lifecycle),
):
    """
    Reject several requested bonuses with one reason; per-id results are returned.
    """
    return lifecycle.bulk_reject(payload.weekly_bonus_ids, actor_id, payload.reason)
