"""
Append-only audit trail for weekly bonus records.

No update or delete path exists. History is returned oldest entry first.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from constants import AuditAction, business_now
from models import BonusAuditLog
from services.bonus_repository import BonusRepository

logger = logging.getLogger(__name__)


def _json_safe(details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Decimals and dates become strings so the payload fits a JSON column."""
    safe = {}
    for key, value in (details or {}).items():
        if isinstance(value, Decimal):
            safe[key] = str(value)
        elif isinstance(value, dict):
            safe[key] = _json_safe(value)
        elif hasattr(value, "isoformat"):
            safe[key] = value.isoformat()
        else:
            safe[key] = value
    return safe


class BonusAuditLogger:
    """Writes and reads bonus audit entries through the repository."""

    def __init__(self, repository: BonusRepository):
        self.repository = repository

    def log(
        self,
        weekly_bonus_id: int,
        action: AuditAction,
        actor_id: Optional[int],
        details: Optional[Dict[str, Any]] = None,
    ) -> BonusAuditLog:
        """
        Append one entry. Joins the caller's transaction; the caller commits.

        Raises on persistence failure.
        """
        entry = BonusAuditLog(
            weekly_bonus_id=weekly_bonus_id,
            action=AuditAction(action).value,
            performed_by=actor_id,
            details=_json_safe(details),
            performed_at=business_now(),
        )
        self.repository.add_audit_entry(entry)
        logger.info(
            "Bonus audit: %s on weekly bonus %s by %s",
            entry.action, weekly_bonus_id, actor_id if actor_id is not None else "system",
        )
        return entry

    def log_revenue_sync(self, weekly_bonus_id: int, actor_id: Optional[int], details: Dict[str, Any]):
        return self.log(weekly_bonus_id, AuditAction.REVENUE_SYNCED, actor_id, details)

    def log_request(self, weekly_bonus_id: int, actor_id: int, details: Dict[str, Any]):
        return self.log(weekly_bonus_id, AuditAction.REQUESTED, actor_id, details)

    def log_approval(self, weekly_bonus_id: int, actor_id: int, details: Dict[str, Any], bulk: bool = False):
        action = AuditAction.BULK_APPROVED if bulk else AuditAction.APPROVED
        return self.log(weekly_bonus_id, action, actor_id, details)

    def log_rejection(
        self,
        weekly_bonus_id: int,
        actor_id: int,
        reason: str,
        details: Dict[str, Any],
        bulk: bool = False,
    ):
        action = AuditAction.BULK_REJECTED if bulk else AuditAction.REJECTED
        return self.log(weekly_bonus_id, action, actor_id, {**details, "reason": reason})

    def get_history(self, weekly_bonus_id: int) -> List[BonusAuditLog]:
        """Entries for one record, oldest first; empty for an unknown id."""
        return self.repository.get_audit_entries(weekly_bonus_id)
