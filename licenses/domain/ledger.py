"""
License ledger domain entity.

The ledger entry is the single source of truth for an organization's seat
counts and expiry. ``0 <= used_seats <= total_seats`` holds for every
persisted entry.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

DEFAULT_LICENSE_CLASS = "standard"
LICENSE_TERM_DAYS = 365
GRACE_PERIOD_DAYS = 30


@dataclass(frozen=True)
class LedgerEntry:
    """
    License ledger entry.

    ``version`` increases on every expiry or renewal write and guards
    optimistic updates. Seat counters are changed only through the
    repository's conditional updates.
    """

    id: uuid.UUID
    organization_id: uuid.UUID
    total_seats: int
    used_seats: int
    license_class: str
    expires_at: datetime
    subscription_ref: Optional[str]
    created_at: datetime
    updated_at: datetime
    grace_period_start: Optional[datetime] = None
    grace_period_end: Optional[datetime] = None
    last_renewed_at: Optional[datetime] = None
    seats_synced_at: Optional[datetime] = None
    version: int = 1
    scheduled_total_seats: Optional[int] = None
    scheduled_change_at: Optional[datetime] = None
    scheduled_change_note: str = ""

    def __post_init__(self):
        """Validate ledger entry."""
        if self.total_seats < 0:
            raise ValueError("Total seats cannot be negative")
        if self.used_seats < 0:
            raise ValueError("Used seats cannot be negative")
        if self.used_seats > self.total_seats:
            raise ValueError("Used seats cannot exceed total seats")

    @classmethod
    def create(
        cls,
        organization_id: uuid.UUID,
        total_seats: int,
        now: datetime,
        license_class: str = DEFAULT_LICENSE_CLASS,
        subscription_ref: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> "LedgerEntry":
        """
        Create the first ledger entry for an organization.

        The owner's seat is counted from the start, so ``used_seats`` is 1.

        Args:
            organization_id: Organization UUID
            total_seats: Purchased seats
            now: Purchase time
            license_class: License class label
            subscription_ref: External subscription reference
            expires_at: Expiry (defaults to one license term from ``now``)

        Returns:
            LedgerEntry instance
        """
        if total_seats < 1:
            raise ValueError("A purchase must include at least one seat")
        return cls(
            id=uuid.uuid4(),
            organization_id=organization_id,
            total_seats=total_seats,
            used_seats=1,
            license_class=license_class or DEFAULT_LICENSE_CLASS,
            expires_at=expires_at or now + timedelta(days=LICENSE_TERM_DAYS),
            subscription_ref=subscription_ref,
            created_at=now,
            updated_at=now,
            last_renewed_at=now,
        )

    @property
    def available_seats(self) -> int:
        return self.total_seats - self.used_seats

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now

    def is_past_grace(self, now: datetime) -> bool:
        """Expired for longer than the grace period."""
        return self.expires_at < now - timedelta(days=GRACE_PERIOD_DAYS)

    def has_scheduled_change_due(self, now: datetime) -> bool:
        return (
            self.scheduled_total_seats is not None
            and self.scheduled_change_at is not None
            and self.scheduled_change_at <= now
        )
