"""Services package: revenue validation, weekly bonus engine and notifications."""

from .bonus_lifecycle import BonusLifecycle
from .bonus_queries import BonusQueries
from .bonus_repository import BonusRepository
from .exceptions import BonusError, BonusNotFoundError, BonusStateError, BonusValidationError
from .notifications import WebhookNotifier
from .revenue_intake import DailyRevenueIntake
from .revenue_sync import RevenueSyncService

__all__ = [
    'BonusLifecycle',
    'BonusQueries',
    'BonusRepository',
    'BonusError',
    'BonusNotFoundError',
    'BonusStateError',
    'BonusValidationError',
    'WebhookNotifier',
    'DailyRevenueIntake',
    'RevenueSyncService',
]
