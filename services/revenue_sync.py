"""
Weekly bonus synchronization.

Recomputes a bucket's bonus from the daily revenues and upserts the weekly
bonus record plus its employee lines. The same code path serves the
on-demand calculation, the hook run after a daily revenue is recorded, and
the daily all-branches sweep.

A record that has left 'pending' is never modified by a sync: the sync
reports a conflict and returns without writing anything.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError

from constants import FROZEN_BONUS_STATUSES, BonusStatus, business_now, business_today
from models import BonusDetail, WeeklyBonus
from schemas import BranchSyncResult, SweepResult, SyncData, SyncResult
from services.accounting import money_sum, to_money
from services.bonus_audit import BonusAuditLogger
from services.bonus_repository import BonusRepository
from services.bonus_tiers import BonusTier, calculate_bonus_tier, configured_bonus_tiers, validate_tiers
from services.revenue_aggregator import AggregationResult, RevenueAggregator
from services.weeks import bucket_for_date, get_week_range, is_closing_day, validate_bucket

logger = logging.getLogger(__name__)


def _line_key(line: BonusDetail):
    return (
        line.employee_id,
        to_money(line.weekly_revenue),
        line.bonus_tier,
        to_money(line.bonus_amount),
        bool(line.is_eligible),
    )


class RevenueSyncService:
    """Keeps weekly bonus records in step with daily revenue."""

    def __init__(
        self,
        repository: BonusRepository,
        tiers: Optional[Sequence[BonusTier]] = None,
        aggregator: Optional[RevenueAggregator] = None,
        audit: Optional[BonusAuditLogger] = None,
    ):
        self.repository = repository
        self.tiers = validate_tiers(tiers) if tiers is not None else configured_bonus_tiers()
        self.aggregator = aggregator or RevenueAggregator(repository)
        self.audit = audit or BonusAuditLogger(repository)

    # ------------------------------------------------------------------
    # Single bucket
    # ------------------------------------------------------------------

    def sync_weekly_revenue(
        self,
        branch_id: int,
        week_number: int,
        month: int,
        year: int,
        actor_id: Optional[int] = None,
    ) -> SyncResult:
        """
        Recompute and upsert the weekly bonus of one bucket.

        Returns a SyncResult; data absence and non-pending records are
        reported in the result rather than raised. Invalid bucket
        coordinates raise BonusValidationError; persistence errors propagate
        after the transaction is rolled back.
        """
        validate_bucket(year, month, week_number)
        bucket = dict(branch_id=branch_id, year=year, month=month, week_number=week_number)

        if self.repository.get_branch(branch_id) is None:
            return SyncResult(success=False, message=f"Branch {branch_id} not found", **bucket)

        try:
            # Row lock is held from here until commit; revenue is read under it
            bonus = self._get_or_create(branch_id, year, month, week_number)

            if bonus.status in FROZEN_BONUS_STATUSES:
                status = bonus.status
                # Nothing written; release the row lock
                self.repository.rollback()
                logger.warning(
                    "Sync refused for weekly bonus %s (branch %s, %s-%02d week %s): status is %s",
                    bonus.id, branch_id, year, month, week_number, status,
                )
                return SyncResult(
                    success=False,
                    conflict=True,
                    status=status,
                    message=(
                        f"Weekly bonus for week {week_number} of {year}-{month:02d} is already "
                        f"{status}; revenue changes are not applied to it"
                    ),
                    **bucket,
                )

            aggregation = self.aggregator.aggregate(branch_id, year, month, week_number)
            if not aggregation.ok:
                # Drops a record created above and releases the lock
                self.repository.rollback()
                return SyncResult(success=False, message=aggregation.message, **bucket)

            lines = self._build_lines(aggregation)
            total_amount = money_sum(line.bonus_amount for line in lines)
            eligible_count = sum(1 for line in lines if line.is_eligible)
            changed = self._apply(bonus, aggregation, lines, total_amount, eligible_count)

            data = SyncData(
                weekly_bonus_id=bonus.id,
                week_start=aggregation.week_start,
                week_end=aggregation.week_end,
                total_revenue=aggregation.total_revenue,
                total_amount=total_amount,
                employee_count=len(lines),
                eligible_count=eligible_count,
                changed=changed,
            )
            self.audit.log_revenue_sync(bonus.id, actor_id, data.model_dump(exclude={"weekly_bonus_id"}))
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info(
            "Synced weekly bonus %s (branch %s, %s-%02d week %s): revenue=%s bonus=%s employees=%d eligible=%d changed=%s",
            data.weekly_bonus_id, branch_id, year, month, week_number,
            data.total_revenue, data.total_amount, data.employee_count, data.eligible_count, changed,
        )
        return SyncResult(
            success=True,
            status=BonusStatus.PENDING,
            message=(
                f"Successfully synced week {week_number} of {year}-{month:02d}: "
                f"{data.employee_count} employees, total bonus {data.total_amount}"
            ),
            data=data,
            **bucket,
        )

    def sync_on_revenue_change(
        self, branch_id: int, revenue_date: date, actor_id: Optional[int] = None
    ) -> SyncResult:
        """Sync the bucket containing `revenue_date` after its revenue changed."""
        year, month, week_number = bucket_for_date(revenue_date)
        return self.sync_weekly_revenue(branch_id, week_number, month, year, actor_id)

    def _build_lines(self, aggregation: AggregationResult) -> List[BonusDetail]:
        lines = []
        for employee in aggregation.employees:
            assignment = calculate_bonus_tier(employee.weekly_revenue, self.tiers)
            lines.append(BonusDetail(
                employee_id=employee.employee_id,
                weekly_revenue=employee.weekly_revenue,
                bonus_tier=assignment.tier,
                bonus_amount=assignment.bonus_amount,
                is_eligible=assignment.is_eligible,
            ))
        return lines

    def _get_or_create(self, branch_id: int, year: int, month: int, week_number: int) -> WeeklyBonus:
        bonus = self.repository.get_weekly_bonus_by_bucket(
            branch_id, year, month, week_number, for_update=True
        )
        if bonus is not None:
            return bonus

        week_start, week_end = get_week_range(year, month, week_number)
        try:
            return self.repository.add_weekly_bonus(WeeklyBonus(
                branch_id=branch_id,
                year=year,
                month=month,
                week_number=week_number,
                week_start=week_start,
                week_end=week_end,
                total_revenue=Decimal("0.00"),
                total_amount=Decimal("0.00"),
                employee_count=0,
                eligible_count=0,
                status=BonusStatus.PENDING.value,
            ))
        except IntegrityError:
            # A concurrent sync created the bucket first; continue with its row
            self.repository.rollback()
            bonus = self.repository.get_weekly_bonus_by_bucket(
                branch_id, year, month, week_number, for_update=True
            )
            if bonus is None:
                raise
            return bonus

    def _apply(
        self,
        bonus: WeeklyBonus,
        aggregation: AggregationResult,
        lines: List[BonusDetail],
        total_amount: Decimal,
        eligible_count: int,
    ) -> bool:
        """Write totals and lines; returns False when everything was already current."""
        existing = self.repository.get_bonus_lines(bonus.id)
        lines_changed = [_line_key(line) for line in existing] != [_line_key(line) for line in lines]
        if lines_changed:
            self.repository.replace_bonus_lines(bonus.id, lines)

        totals = {
            "week_start": aggregation.week_start,
            "week_end": aggregation.week_end,
            "total_revenue": aggregation.total_revenue,
            "total_amount": total_amount,
            "employee_count": len(lines),
            "eligible_count": eligible_count,
        }
        totals_changed = False
        for attr, value in totals.items():
            if getattr(bonus, attr) != value:
                setattr(bonus, attr, value)
                totals_changed = True

        changed = lines_changed or totals_changed
        if changed:
            bonus.last_synced_at = business_now()
        self.repository.flush()
        return changed

    # ------------------------------------------------------------------
    # All branches
    # ------------------------------------------------------------------

    def trigger_manual_sync(
        self, today: Optional[date] = None, actor_id: Optional[int] = None
    ) -> SweepResult:
        """
        Sync every active branch for the bucket containing `today`.

        On a closing day that is the bucket being closed; on other days it is
        the in-progress bucket. Each branch runs in its own transaction and a
        failure in one branch is recorded without stopping the others.
        Branches refused for a frozen record or lacking revenue count as
        skipped, not failed.
        Safe to call repeatedly; scheduled and manual runs share this path.
        """
        today = today or business_today()
        closing = is_closing_day(today)
        year, month, week_number = bucket_for_date(today)

        targets = [(branch.id, branch.name) for branch in self.repository.list_active_branches()]
        logger.info(
            "Sweep started for %s (week %s of %s-%02d, closing day: %s): %d branches",
            today, week_number, year, month, closing.is_last, len(targets),
        )

        results = []
        for branch_id, branch_name in targets:
            try:
                result = self.sync_weekly_revenue(branch_id, week_number, month, year, actor_id)
                results.append(BranchSyncResult(
                    branch_id=branch_id,
                    branch_name=branch_name,
                    success=result.success,
                    conflict=result.conflict,
                    skipped=not result.success,
                    message=result.message,
                    data=result.data,
                ))
            except Exception as e:
                logger.exception("Sweep failed for branch %s (%s)", branch_id, branch_name)
                self.repository.rollback()
                results.append(BranchSyncResult(
                    branch_id=branch_id,
                    branch_name=branch_name,
                    success=False,
                    message=f"Sync failed: {e}",
                ))

        success_count = sum(1 for r in results if r.success)
        skipped_count = sum(1 for r in results if r.skipped)
        failed_count = len(results) - success_count - skipped_count
        message = f"Synced {success_count} of {len(results)} branches for week {week_number} of {year}-{month:02d}"
        if skipped_count:
            message += f", {skipped_count} skipped"
        if failed_count:
            message += f", {failed_count} failed"
        logger.info("Sweep finished: %s", message)

        return SweepResult(
            success=failed_count == 0,
            message=message,
            sync_date=today,
            year=year,
            month=month,
            week_number=week_number,
            is_closing_day=closing.is_last,
            total=len(results),
            success_count=success_count,
            skipped_count=skipped_count,
            failed_count=failed_count,
            results=results,
        )
