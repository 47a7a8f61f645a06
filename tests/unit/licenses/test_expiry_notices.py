"""
Unit tests for expiry notice classification.
"""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from core.domain.value_objects import NotificationClass
from licenses.domain.ledger import LedgerEntry
from licenses.domain.notification import classify_expiry_notice, expired_reminder_due

NOW = datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)


def _ledger(expires_in_days):
    return LedgerEntry.create(
        organization_id=uuid.uuid4(),
        total_seats=2,
        now=NOW - timedelta(days=200),
        expires_at=NOW + timedelta(days=expires_in_days),
    )


@pytest.mark.parametrize(
    "days,expected",
    [
        (30, NotificationClass.THIRTY_DAY),
        (14, NotificationClass.FOURTEEN_DAY),
        (7, NotificationClass.SEVEN_DAY),
        (1, NotificationClass.ONE_DAY),
        (-1, NotificationClass.EXPIRED),
        (-30, NotificationClass.EXPIRED),
        (29, None),
        (-31, None),
    ],
)
def test_classify_expiry_notice(days, expected):
    assert classify_expiry_notice(_ledger(days), NOW) == expected


def test_expired_reminder_repeats_weekly():
    today = date(2025, 1, 15)

    assert expired_reminder_due(None, today) is True
    assert expired_reminder_due(today - timedelta(days=3), today) is False
    assert expired_reminder_due(today - timedelta(days=7), today) is True
