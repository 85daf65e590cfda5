"""
FastAPI dependencies wiring the bonus services to a request session.

Usage:
    @router.post("/bonuses/{bonus_id}/approve")
    async def approve(lifecycle: BonusLifecycle = Depends(get_lifecycle)):
        ...
"""
from functools import lru_cache, partial

from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app_config.settings import BONUS_ADMIN_EMAILS
from database import get_db
from services.bonus_lifecycle import BonusLifecycle
from services.bonus_queries import BonusQueries
from services.bonus_repository import BonusRepository
from services.bonus_tiers import configured_bonus_tiers
from services.notifications import WebhookNotifier, send_notification
from services.revenue_intake import DailyRevenueIntake
from services.revenue_sync import RevenueSyncService


def get_repository(db: Session = Depends(get_db)) -> BonusRepository:
    return BonusRepository(db)


@lru_cache(maxsize=1)
def get_notifier() -> WebhookNotifier:
    return WebhookNotifier()


def get_sync_service(repository: BonusRepository = Depends(get_repository)) -> RevenueSyncService:
    return RevenueSyncService(repository, tiers=configured_bonus_tiers())


def get_queries(repository: BonusRepository = Depends(get_repository)) -> BonusQueries:
    return BonusQueries(repository)


def get_lifecycle(
    background_tasks: BackgroundTasks,
    repository: BonusRepository = Depends(get_repository),
    notifier: WebhookNotifier = Depends(get_notifier),
) -> BonusLifecycle:
    """Lifecycle whose notifications run after the response is sent."""
    return BonusLifecycle(
        repository,
        notify=partial(background_tasks.add_task, send_notification, notifier),
        admin_emails=BONUS_ADMIN_EMAILS,
    )


def get_revenue_intake(
    background_tasks: BackgroundTasks,
    repository: BonusRepository = Depends(get_repository),
    sync_service: RevenueSyncService = Depends(get_sync_service),
    notifier: WebhookNotifier = Depends(get_notifier),
) -> DailyRevenueIntake:
    return DailyRevenueIntake(
        repository,
        sync_service,
        notify=partial(background_tasks.add_task, send_notification, notifier),
        admin_emails=BONUS_ADMIN_EMAILS,
    )
