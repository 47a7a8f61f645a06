"""
Scheduled license maintenance handlers.

Run by management commands and celery beat; they act on every ledger.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List

from billing.ports.billing_provider import BillingProvider, LineItem, ProrationMode
from core.domain.exceptions import ProviderUnavailableError, SeatInvariantViolationError
from core.domain.value_objects import LicenseStatus, NotificationClass
from core.infrastructure.events import event_bus
from core.metrics import license_notifications_total
from licenses.domain.events import LicenseExpiryWarning, LicenseScheduledChangeApplied
from licenses.domain.ledger import GRACE_PERIOD_DAYS
from licenses.domain.notification import (
    NotificationRecord,
    classify_expiry_notice,
    expired_reminder_due,
)
from licenses.domain.status import days_remaining, evaluate_status
from licenses.ports.ledger_repository import LedgerRepository
from licenses.ports.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass
class ExpirationCheckResult:
    """Summary of one expiry check run."""

    checked: int = 0
    notified: List[NotificationRecord] = field(default_factory=list)
    grace_windows_opened: int = 0


class CheckLicenseExpirationsHandler:
    """Surfaces expiry warnings once per (org, ledger, class, date)."""

    def __init__(
        self,
        ledger_repository: LedgerRepository,
        notification_repository: NotificationRepository,
    ):
        self.ledger_repository = ledger_repository
        self.notification_repository = notification_repository

    async def handle(self, now: datetime, dry_run: bool = False) -> ExpirationCheckResult:
        """
        Check every ledger for a due expiry warning.

        Args:
            now: Evaluation time
            dry_run: Classify only, record nothing

        Returns:
            ExpirationCheckResult
        """
        result = ExpirationCheckResult()
        today = now.date()
        for ledger in await self.ledger_repository.find_all():
            result.checked += 1
            report = evaluate_status(ledger, now)
            if (
                not dry_run
                and report.status == LicenseStatus.GRACE_PERIOD
                and ledger.grace_period_start is None
            ):
                opened = await self.ledger_repository.open_grace_window(
                    ledger.organization_id,
                    ledger.expires_at,
                    ledger.expires_at + timedelta(days=GRACE_PERIOD_DAYS),
                )
                result.grace_windows_opened += int(opened)

            notice = classify_expiry_notice(ledger, now)
            if notice is None:
                continue
            if notice == NotificationClass.EXPIRED:
                last = await self.notification_repository.last_notified_on(
                    ledger.organization_id, ledger.id, notice
                )
                if not expired_reminder_due(last, today):
                    continue

            record = NotificationRecord(
                organization_id=ledger.organization_id,
                ledger_id=ledger.id,
                notification_class=notice,
                notified_on=today,
                days_remaining=days_remaining(ledger.expires_at, now),
            )
            if dry_run:
                result.notified.append(record)
                continue
            if not await self.notification_repository.record(record):
                continue

            result.notified.append(record)
            license_notifications_total.labels(notification_class=notice.value).inc()
            await event_bus.publish(
                LicenseExpiryWarning(
                    organization_id=ledger.organization_id,
                    notification_class=notice.value,
                    days_remaining=record.days_remaining,
                    expires_at=ledger.expires_at,
                )
            )
        return result


class ApplyScheduledLicenseChangesHandler:
    """
    Applies scheduled total-seat changes that have come due.

    The provider's subscription is changed first. The ledger follows only
    when the provider accepted the change; otherwise the schedule stays in
    place and the next run retries it.
    """

    def __init__(self, ledger_repository: LedgerRepository, billing_provider: BillingProvider):
        self.ledger_repository = ledger_repository
        self.billing_provider = billing_provider

    async def handle(self, now: datetime) -> int:
        """
        Apply due scheduled changes.

        A change that would drop below the seats in use is kept and
        logged for an operator instead of being forced.

        Returns:
            Number of changes applied
        """
        applied = 0
        for ledger in await self.ledger_repository.find_due_scheduled_changes(now):
            total_seats = ledger.scheduled_total_seats
            extra = {"organization_id": str(ledger.organization_id)}
            if total_seats < ledger.used_seats:
                logger.error(
                    "Scheduled change for %s not applied: %s seat(s) in use, %s scheduled",
                    ledger.organization_id,
                    ledger.used_seats,
                    total_seats,
                    extra=extra,
                )
                continue
            if ledger.subscription_ref is None:
                logger.error(
                    "Scheduled change for %s not applied: no subscription on record",
                    ledger.organization_id,
                    extra=extra,
                )
                continue

            try:
                await self.billing_provider.create_or_modify_subscription(
                    ledger.subscription_ref,
                    [LineItem(quantity=total_seats, license_class=ledger.license_class)],
                    ProrationMode.PRORATED_IMMEDIATELY,
                    {
                        "organization_id": str(ledger.organization_id),
                        "scheduled_change": True,
                    },
                )
            except ProviderUnavailableError as exc:
                logger.warning(
                    "Scheduled change for %s kept for retry: %s",
                    ledger.organization_id,
                    exc.message,
                    extra=extra,
                )
                continue

            try:
                await self.ledger_repository.set_total(ledger.organization_id, total_seats)
            except SeatInvariantViolationError as exc:
                # members joined after the read
                logger.error(
                    "Scheduled change for %s not applied: %s",
                    ledger.organization_id,
                    exc.message,
                    extra=extra,
                )
                continue
            await self.ledger_repository.clear_scheduled_change(ledger.organization_id)
            applied += 1
            await event_bus.publish(
                LicenseScheduledChangeApplied(
                    organization_id=ledger.organization_id,
                    total_seats=total_seats,
                    note=ledger.scheduled_change_note,
                )
            )
        return applied
