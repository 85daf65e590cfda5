"""
Read-side queries over weekly bonus records.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from constants import BonusStatus, UNDECIDED_BONUS_STATUSES, business_today
from models import BonusAuditLog, WeeklyBonus
from schemas import BonusHistoryStats
from services.accounting import money_sum, to_money
from services.bonus_repository import BonusRepository
from services.exceptions import BonusValidationError
from services.weeks import bucket_for_date, validate_bucket


class BonusQueries:
    def __init__(self, repository: BonusRepository):
        self.repository = repository

    def get_current_week_bonus(self, branch_id: int, today: Optional[date] = None) -> Optional[WeeklyBonus]:
        """Record of the bucket containing `today` (business date), or None."""
        year, month, week_number = bucket_for_date(today or business_today())
        return self.repository.get_weekly_bonus_with_details(branch_id, year, month, week_number)

    def get_weekly_bonus_with_details(
        self, branch_id: int, year: int, month: int, week_number: int
    ) -> Optional[WeeklyBonus]:
        validate_bucket(year, month, week_number)
        return self.repository.get_weekly_bonus_with_details(branch_id, year, month, week_number)

    def get_pending_bonus_requests(self) -> List[WeeklyBonus]:
        """Records awaiting approval, oldest request first."""
        return self.repository.list_requested_bonuses()

    def get_bonus_history_with_stats(
        self,
        year: int,
        branch_id: Optional[int] = None,
        month: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[WeeklyBonus], BonusHistoryStats]:
        if month is not None and not 1 <= month <= 12:
            raise BonusValidationError(f"Month must be between 1 and 12, got {month}")
        if status is not None:
            status = BonusStatus(status).value

        bonuses = self.repository.list_weekly_bonuses(branch_id=branch_id, year=year, month=month, status=status)
        return bonuses, calculate_history_stats(bonuses)

    def get_audit_history(self, weekly_bonus_id: int) -> List[BonusAuditLog]:
        return self.repository.get_audit_entries(weekly_bonus_id)


def calculate_history_stats(bonuses: List[WeeklyBonus]) -> BonusHistoryStats:
    """
    Summary figures for a list of weekly bonus records.

    total_paid sums approved totals; average_per_employee divides it by the
    eligible employees of those approved records; approval_rate is
    approved / (approved + rejected) as a percentage; pending_count counts
    records not yet decided.
    """
    approved = [b for b in bonuses if b.status == BonusStatus.APPROVED.value]
    rejected_count = sum(1 for b in bonuses if b.status == BonusStatus.REJECTED.value)

    total_paid = money_sum(b.total_amount for b in approved)
    paid_employees = sum(b.eligible_count or 0 for b in approved)
    average = to_money(total_paid / paid_employees) if paid_employees else Decimal("0.00")

    decided = len(approved) + rejected_count
    approval_rate = round(len(approved) / decided * 100, 2) if decided else 0.0

    return BonusHistoryStats(
        total_paid=total_paid,
        average_per_employee=average,
        approval_rate=approval_rate,
        pending_count=sum(1 for b in bonuses if b.status in UNDECIDED_BONUS_STATUSES),
    )
