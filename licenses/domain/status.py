"""
License status evaluation.

Status is never stored: it is derived from the ledger and the current time
whenever it is asked for, so the grace period starts and ends without any
scheduled job.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.domain.value_objects import LicenseStatus, Severity
from licenses.domain.ledger import GRACE_PERIOD_DAYS, LedgerEntry

CRITICAL_WINDOW_DAYS = 7
WARNING_WINDOW_DAYS = 30


@dataclass(frozen=True)
class LicenseStatusReport:
    """Status of an organization's license at a point in time."""

    status: LicenseStatus
    severity: Severity
    days_remaining: Optional[int] = None
    grace_days_left: int = 0
    expires_at: Optional[datetime] = None
    total_seats: int = 0
    used_seats: int = 0

    @property
    def available_seats(self) -> int:
        return max(0, self.total_seats - self.used_seats)

    @property
    def can_add_member(self) -> bool:
        if self.status in (LicenseStatus.NO_LICENSE, LicenseStatus.EXPIRED):
            return False
        return self.used_seats < self.total_seats


def days_remaining(expires_at: datetime, now: datetime) -> int:
    """Whole days until expiry, rounded up; negative once expired."""
    return math.ceil((expires_at - now) / timedelta(days=1))


def evaluate_status(ledger: Optional[LedgerEntry], now: datetime) -> LicenseStatusReport:
    """
    Derive the license status for a ledger entry.

    Args:
        ledger: Ledger entry, or None when the organization never purchased
        now: Evaluation time

    Returns:
        LicenseStatusReport
    """
    if ledger is None:
        return LicenseStatusReport(status=LicenseStatus.NO_LICENSE, severity=Severity.INFO)

    remaining = days_remaining(ledger.expires_at, now)
    common = {
        "days_remaining": remaining,
        "expires_at": ledger.expires_at,
        "total_seats": ledger.total_seats,
        "used_seats": ledger.used_seats,
    }

    if ledger.is_past_grace(now):
        return LicenseStatusReport(
            status=LicenseStatus.EXPIRED, severity=Severity.CRITICAL, **common
        )
    if ledger.is_expired(now):
        return LicenseStatusReport(
            status=LicenseStatus.GRACE_PERIOD,
            severity=Severity.WARNING,
            grace_days_left=GRACE_PERIOD_DAYS + remaining,
            **common,
        )
    if remaining <= CRITICAL_WINDOW_DAYS:
        return LicenseStatusReport(
            status=LicenseStatus.EXPIRING_SOON, severity=Severity.CRITICAL, **common
        )
    if remaining <= WARNING_WINDOW_DAYS:
        return LicenseStatusReport(
            status=LicenseStatus.EXPIRING_SOON, severity=Severity.WARNING, **common
        )
    return LicenseStatusReport(status=LicenseStatus.ACTIVE, severity=Severity.INFO, **common)
