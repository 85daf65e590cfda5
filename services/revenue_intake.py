"""
Daily revenue intake: validate, persist, then sync the affected bucket.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from models import DailyRevenue, EmployeeRevenue
from schemas import DailyRevenueCreate, SyncResult
from services.accounting import (
    calculate_balance, calculate_total, money_sum, to_money, validate_revenue_matching,
)
from services.bonus_repository import BonusRepository
from services.exceptions import BonusNotFoundError, BonusStateError, BonusValidationError
from services.notifications import bonus_recipients, unmatched_revenue_message
from services.revenue_sync import RevenueSyncService
from services.weeks import bucket_for_date

logger = logging.getLogger(__name__)


class DailyRevenueIntake:
    def __init__(
        self,
        repository: BonusRepository,
        sync_service: RevenueSyncService,
        notify=None,
        admin_emails: Optional[List[str]] = None,
    ):
        self.repository = repository
        self.sync_service = sync_service
        self.notify = notify
        self.admin_emails = admin_emails

    def record(
        self, data: DailyRevenueCreate, actor_id: Optional[int] = None
    ) -> Tuple[DailyRevenue, Optional[SyncResult]]:
        """
        Store one branch-day of revenue and resync its weekly bonus.

        Raises BonusNotFoundError for an unknown branch, BonusValidationError
        for foreign employees or an unmatched entry without a reason, and
        BonusStateError when the branch already has an entry for that day.
        The revenue stays committed even if the follow-up sync fails; the
        sync outcome is returned alongside it.
        """
        branch = self.repository.get_branch(data.branch_id)
        if branch is None:
            raise BonusNotFoundError(f"Branch {data.branch_id} not found")

        employee_ids = [c.employee_id for c in data.employee_revenues]
        employees = {e.id: e for e in self.repository.get_employees(employee_ids)}
        foreign = [i for i in employee_ids if i not in employees or employees[i].branch_id != data.branch_id]
        if foreign:
            raise BonusValidationError(
                f"Employees {', '.join(str(i) for i in foreign)} do not belong to branch {data.branch_id}"
            )

        if self.repository.get_daily_revenue_by_date(data.branch_id, data.revenue_date):
            raise BonusStateError(
                f"Daily revenue for branch {data.branch_id} on {data.revenue_date} is already recorded"
            )

        contributions = [
            EmployeeRevenue(
                employee_id=c.employee_id,
                cash=to_money(c.cash),
                network=to_money(c.network),
                total=to_money(c.total) if c.total is not None else calculate_total(c.cash, c.network),
            )
            for c in data.employee_revenues
        ]
        employee_total = money_sum(c.total for c in contributions)
        total = to_money(data.total) if data.total is not None else calculate_total(data.cash, data.network)
        balance = to_money(data.balance) if data.balance is not None else calculate_balance(employee_total, data.cash)

        validation = validate_revenue_matching(data.cash, data.network, total, balance, employee_total)
        reason = (data.unmatch_reason or "").strip()
        if not validation.is_matched and not reason:
            raise BonusValidationError(
                "Revenue does not match: " + "; ".join(validation.reasons)
                + ". A mismatch reason is required."
            )

        revenue = DailyRevenue(
            branch_id=data.branch_id,
            revenue_date=data.revenue_date,
            cash=to_money(data.cash),
            network=to_money(data.network),
            total=total,
            balance=balance,
            employee_total=employee_total,
            is_matched=validation.is_matched,
            unmatch_reason=None if validation.is_matched else reason,
            mismatch_details=validation.reasons or None,
            created_by=actor_id,
            employee_revenues=contributions,
        )
        try:
            self.repository.add_daily_revenue(revenue)
            self.repository.commit()
        except IntegrityError:
            self.repository.rollback()
            raise BonusStateError(
                f"Daily revenue for branch {data.branch_id} on {data.revenue_date} is already recorded"
            )

        logger.info(
            "Daily revenue %s recorded for branch %s on %s (matched: %s)",
            revenue.id, data.branch_id, data.revenue_date, validation.is_matched,
        )

        if not validation.is_matched:
            logger.warning(
                "Unmatched daily revenue %s for branch %s: %s",
                revenue.id, data.branch_id, "; ".join(validation.reasons),
            )
            self._alert_unmatched(revenue, branch)

        return revenue, self._sync(revenue, actor_id)

    def _sync(self, revenue: DailyRevenue, actor_id: Optional[int]) -> SyncResult:
        revenue_id, branch_id, revenue_date = revenue.id, revenue.branch_id, revenue.revenue_date
        try:
            return self.sync_service.sync_on_revenue_change(branch_id, revenue_date, actor_id)
        except Exception as e:
            logger.exception("Bonus sync after daily revenue %s failed", revenue_id)
            self.repository.rollback()
            year, month, week_number = bucket_for_date(revenue_date)
            return SyncResult(
                success=False,
                message=f"Bonus sync failed: {e}",
                branch_id=branch_id,
                year=year,
                month=month,
                week_number=week_number,
            )

    def _alert_unmatched(self, revenue: DailyRevenue, branch) -> None:
        if self.notify is None:
            return
        try:
            recipients = bonus_recipients(branch.manager_email, self.admin_emails)
            subject, body = unmatched_revenue_message(revenue, branch.name)
            self.notify(recipients, subject, body)
        except Exception:
            logger.warning("Unmatched revenue alert for %s failed", revenue.id, exc_info=True)
