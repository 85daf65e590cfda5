"""
Weekly bonus lifecycle: pending -> requested -> approved | rejected.

Each transition locks the record, checks the source state, stamps the
actor and time, appends an audit entry and commits. A notification is
dispatched after the commit; its failure is logged and never undoes the
transition.
"""
import logging
from typing import Callable, Iterable, List, Optional

from constants import BonusStatus, business_now
from models import WeeklyBonus
from schemas import BulkActionResult, BulkItemResult
from services.bonus_audit import BonusAuditLogger
from services.bonus_repository import BonusRepository
from services.exceptions import BonusError, BonusNotFoundError, BonusStateError, BonusValidationError
from services.notifications import bonus_recipients, bonus_status_message

logger = logging.getLogger(__name__)

# notify(recipients, subject, body)
NotifyCallable = Callable[[List[str], str, str], object]


def _snapshot(bonus: WeeklyBonus) -> dict:
    return {
        "branch_id": bonus.branch_id,
        "year": bonus.year,
        "month": bonus.month,
        "week_number": bonus.week_number,
        "total_revenue": bonus.total_revenue,
        "total_amount": bonus.total_amount,
        "employee_count": bonus.employee_count,
        "eligible_count": bonus.eligible_count,
    }


class BonusLifecycle:
    """Status transitions of weekly bonus records."""

    def __init__(
        self,
        repository: BonusRepository,
        audit: Optional[BonusAuditLogger] = None,
        notify: Optional[NotifyCallable] = None,
        admin_emails: Optional[List[str]] = None,
    ):
        self.repository = repository
        self.audit = audit or BonusAuditLogger(repository)
        self.notify = notify
        self.admin_emails = admin_emails

    def _load_for_transition(self, weekly_bonus_id: int, expected: BonusStatus, verb: str) -> WeeklyBonus:
        bonus = self.repository.get_weekly_bonus(weekly_bonus_id, for_update=True)
        if bonus is None:
            self.repository.rollback()
            raise BonusNotFoundError(f"Weekly bonus {weekly_bonus_id} not found")
        if bonus.status != expected.value:
            status = bonus.status
            self.repository.rollback()
            raise BonusStateError(
                f"Cannot {verb} weekly bonus {weekly_bonus_id}: status is '{status}', "
                f"expected '{expected.value}'"
            )
        return bonus

    def request(self, weekly_bonus_id: int, actor_id: int) -> WeeklyBonus:
        """Submit a pending record for approval."""
        bonus = self._load_for_transition(weekly_bonus_id, BonusStatus.PENDING, "request")
        try:
            bonus.status = BonusStatus.REQUESTED.value
            bonus.requested_at = business_now()
            bonus.requested_by = actor_id
            self.audit.log_request(bonus.id, actor_id, _snapshot(bonus))
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info("Weekly bonus %s requested by %s", weekly_bonus_id, actor_id)
        self._notify(bonus)
        return bonus

    def approve(self, weekly_bonus_id: int, actor_id: int, bulk: bool = False) -> WeeklyBonus:
        """Approve a requested record."""
        bonus = self._load_for_transition(weekly_bonus_id, BonusStatus.REQUESTED, "approve")
        try:
            bonus.status = BonusStatus.APPROVED.value
            bonus.approved_at = business_now()
            bonus.approved_by = actor_id
            self.audit.log_approval(bonus.id, actor_id, _snapshot(bonus), bulk=bulk)
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info("Weekly bonus %s approved by %s%s", weekly_bonus_id, actor_id, " (bulk)" if bulk else "")
        self._notify(bonus)
        return bonus

    def reject(self, weekly_bonus_id: int, actor_id: int, reason: str, bulk: bool = False) -> WeeklyBonus:
        """Reject a requested record; a non-blank reason is mandatory."""
        reason = (reason or "").strip()
        if not reason:
            raise BonusValidationError("Rejection reason is required")

        bonus = self._load_for_transition(weekly_bonus_id, BonusStatus.REQUESTED, "reject")
        try:
            bonus.status = BonusStatus.REJECTED.value
            bonus.rejected_at = business_now()
            bonus.rejected_by = actor_id
            bonus.rejection_reason = reason
            self.audit.log_rejection(bonus.id, actor_id, reason, _snapshot(bonus), bulk=bulk)
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info("Weekly bonus %s rejected by %s%s", weekly_bonus_id, actor_id, " (bulk)" if bulk else "")
        self._notify(bonus)
        return bonus

    def bulk_approve(self, weekly_bonus_ids: Iterable[int], actor_id: int) -> BulkActionResult:
        return self._bulk(weekly_bonus_ids, "Approved", lambda bonus_id: self.approve(bonus_id, actor_id, bulk=True))

    def bulk_reject(self, weekly_bonus_ids: Iterable[int], actor_id: int, reason: str) -> BulkActionResult:
        reason = (reason or "").strip()
        if not reason:
            raise BonusValidationError("Rejection reason is required")
        return self._bulk(
            weekly_bonus_ids, "Rejected", lambda bonus_id: self.reject(bonus_id, actor_id, reason, bulk=True)
        )

    def _bulk(self, weekly_bonus_ids: Iterable[int], done_message: str, transition) -> BulkActionResult:
        """Apply `transition` to every id, each in its own transaction."""
        results = []
        for bonus_id in weekly_bonus_ids:
            try:
                transition(bonus_id)
                results.append(BulkItemResult(weekly_bonus_id=bonus_id, success=True, message=done_message))
            except BonusError as e:
                results.append(BulkItemResult(weekly_bonus_id=bonus_id, success=False, message=e.message))
            except Exception as e:
                logger.exception("Bulk transition failed for weekly bonus %s", bonus_id)
                self.repository.rollback()
                results.append(BulkItemResult(weekly_bonus_id=bonus_id, success=False, message=str(e)))

        success_count = sum(1 for r in results if r.success)
        logger.info("Bulk %s: %d of %d succeeded", done_message.lower(), success_count, len(results))
        return BulkActionResult(
            total=len(results),
            success_count=success_count,
            failed_count=len(results) - success_count,
            results=results,
        )

    def _notify(self, bonus: WeeklyBonus) -> None:
        if self.notify is None:
            return
        try:
            branch = self.repository.get_branch(bonus.branch_id)
            recipients = bonus_recipients(branch.manager_email if branch else None, self.admin_emails)
            subject, body = bonus_status_message(bonus, branch.name if branch else None)
            self.notify(recipients, subject, body)
        except Exception:
            logger.warning("Notification for weekly bonus %s failed", bonus.id, exc_info=True)
