"""
Shared constants for the backend.

Centralizes bonus statuses, audit action tags and money tolerances used
across services and routers.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from zoneinfo import ZoneInfo

from app_config.settings import BUSINESS_TIMEZONE


class BonusStatus(str, Enum):
    """
    Lifecycle states of a weekly bonus record.

    Using str + Enum allows direct comparison with string values and JSON serialization.
    """
    PENDING = 'pending'
    REQUESTED = 'requested'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class AuditAction(str, Enum):
    """Action tags written to the bonus audit trail."""
    REVENUE_SYNCED = 'revenue_synced'
    REQUESTED = 'requested'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    BULK_APPROVED = 'bulk_approved'
    BULK_REJECTED = 'bulk_rejected'


class RequestStatus(str, Enum):
    """Statuses of an employee request (advance, leave, ...)."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


# Statuses a sync may never overwrite
FROZEN_BONUS_STATUSES = [
    BonusStatus.REQUESTED.value,
    BonusStatus.APPROVED.value,
    BonusStatus.REJECTED.value,
]

# Records still awaiting a decision (history "pending" counter)
UNDECIDED_BONUS_STATUSES = [
    BonusStatus.PENDING.value,
    BonusStatus.REQUESTED.value,
]

# Monetary comparisons absorb rounding up to one cent
MONEY_TOLERANCE = Decimal("0.01")
MONEY_QUANT = Decimal("0.01")

MIN_WEEK_NUMBER = 1
MAX_WEEK_NUMBER = 5

_business_tz = ZoneInfo(BUSINESS_TIMEZONE)


def business_now() -> datetime:
    """Current naive datetime in the business timezone (DB columns are naive)."""
    return datetime.now(_business_tz).replace(tzinfo=None)


def business_today() -> date:
    """Current calendar date in the business timezone."""
    return business_now().date()
