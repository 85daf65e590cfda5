"""
Outbound notifications for bonus status changes and unmatched revenue.

Messages are posted as JSON to a single webhook (mail relay, chat robot,
...). Delivery is best-effort: failures are logged and reported as False,
never raised, so a notification problem cannot undo a committed change.
"""
import logging
from typing import Iterable, List, Optional

import httpx

from app_config.settings import BONUS_ADMIN_EMAILS, NOTIFY_TIMEOUT, NOTIFY_WEBHOOK_URL

logger = logging.getLogger(__name__)


def _is_configured(url: Optional[str]) -> bool:
    return bool(url) and not url.startswith("PLACEHOLDER")


class WebhookNotifier:
    """Posts {recipients, subject, body} to the configured webhook."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.webhook_url = NOTIFY_WEBHOOK_URL if webhook_url is None else webhook_url
        self.timeout = NOTIFY_TIMEOUT if timeout is None else timeout
        self.transport = transport

    def notify(self, recipients: Iterable[str], subject: str, body: str) -> bool:
        recipients = list(recipients)
        if not recipients:
            logger.info("Notification '%s' skipped: no recipients", subject)
            return False

        if not _is_configured(self.webhook_url):
            logger.info(
                "Notification webhook not configured; '%s' for %s not sent",
                subject, ", ".join(recipients),
            )
            return False

        payload = {"recipients": recipients, "subject": subject, "body": body}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.error("Notification webhook timeout for '%s'", subject)
            return False
        except httpx.HTTPError as e:
            logger.error("Notification send error for '%s': %s", subject, e)
            return False

        logger.info("Notification '%s' sent to %d recipients", subject, len(recipients))
        return True


def send_notification(notifier: WebhookNotifier, recipients: Iterable[str], subject: str, body: str) -> bool:
    """Run a notifier from a background task; errors are logged, never raised."""
    try:
        return notifier.notify(recipients, subject, body)
    except Exception:
        logger.warning("Notification '%s' failed", subject, exc_info=True)
        return False


def bonus_recipients(manager_email: Optional[str], admin_emails: Optional[List[str]] = None) -> List[str]:
    """Branch manager plus bonus administrators, de-duplicated, order kept."""
    admins = BONUS_ADMIN_EMAILS if admin_emails is None else admin_emails
    candidates = ([manager_email] if manager_email else []) + list(admins)
    return list(dict.fromkeys(email for email in candidates if email))


def bonus_status_message(bonus, branch_name: Optional[str]) -> tuple:
    """Subject and body for a weekly bonus status change."""
    branch_label = branch_name or f"Branch {bonus.branch_id}"
    subject = (
        f"Weekly bonus {bonus.status}: {branch_label}, "
        f"week {bonus.week_number} of {bonus.year}-{bonus.month:02d}"
    )
    lines = [
        f"Branch: {branch_label}",
        f"Period: {bonus.week_start} to {bonus.week_end}",
        f"Status: {bonus.status}",
        f"Total revenue: {bonus.total_revenue}",
        f"Total bonus: {bonus.total_amount}",
        f"Eligible employees: {bonus.eligible_count} of {bonus.employee_count}",
    ]
    if bonus.rejection_reason:
        lines.append(f"Reason: {bonus.rejection_reason}")
    return subject, "\n".join(lines)


def unmatched_revenue_message(revenue, branch_name: Optional[str]) -> tuple:
    """Subject and body alerting that a daily revenue entry does not reconcile."""
    branch_label = branch_name or f"Branch {revenue.branch_id}"
    subject = f"Unmatched daily revenue: {branch_label}, {revenue.revenue_date}"
    lines = [
        f"Branch: {branch_label}",
        f"Date: {revenue.revenue_date}",
        f"Cash: {revenue.cash}",
        f"Network: {revenue.network}",
        f"Total: {revenue.total}",
        f"Balance: {revenue.balance}",
        f"Employee total: {revenue.employee_total}",
    ]
    lines.extend(revenue.mismatch_details or [])
    if revenue.unmatch_reason:
        lines.append(f"Explanation: {revenue.unmatch_reason}")
    return subject, "\n".join(lines)
