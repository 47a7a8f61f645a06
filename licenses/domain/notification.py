"""
Expiry notification classification.

A notification record marks that a warning class was surfaced for a
ledger on a given date, so re-running the checker never repeats it.
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from core.domain.value_objects import NotificationClass
from licenses.domain.ledger import GRACE_PERIOD_DAYS, LedgerEntry
from licenses.domain.status import days_remaining

WARNING_THRESHOLDS = {
    30: NotificationClass.THIRTY_DAY,
    14: NotificationClass.FOURTEEN_DAY,
    7: NotificationClass.SEVEN_DAY,
    1: NotificationClass.ONE_DAY,
}
EXPIRED_REMINDER_INTERVAL_DAYS = 7


@dataclass(frozen=True)
class NotificationRecord:
    """Idempotency marker for a surfaced expiry warning."""

    organization_id: uuid.UUID
    ledger_id: uuid.UUID
    notification_class: NotificationClass
    notified_on: date
    days_remaining: int


def classify_expiry_notice(ledger: LedgerEntry, now: datetime) -> Optional[NotificationClass]:
    """
    Decide which warning class, if any, applies to a ledger today.

    Warnings fire on the exact day the remaining days hit a threshold.
    The ``expired`` class applies from 1 to 30 days after expiry.
    """
    remaining = days_remaining(ledger.expires_at, now)
    if remaining in WARNING_THRESHOLDS:
        return WARNING_THRESHOLDS[remaining]
    if -GRACE_PERIOD_DAYS <= remaining <= -1:
        return NotificationClass.EXPIRED
    return None


def expired_reminder_due(last_sent: Optional[date], today: date) -> bool:
    """The expired reminder repeats at most once per interval."""
    if last_sent is None:
        return True
    return today - last_sent >= timedelta(days=EXPIRED_REMINDER_INTERVAL_DAYS)
