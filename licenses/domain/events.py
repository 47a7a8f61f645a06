"""
License domain events.

Domain events represent something that happened in the license domain.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.domain.events import DomainEvent


class LicensePurchased(DomainEvent):
    """Event raised when a first purchase creates a ledger entry."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.total_seats = total_seats
        self.expires_at = expires_at

    def payload(self):
        return {"total_seats": self.total_seats, "expires_at": self.expires_at.isoformat()}


class LicenseRenewed(DomainEvent):
    """Event raised when a renewal or seat addition is applied."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        renewal_type: str,
        new_expiry: datetime,
        total_seats: int,
        amount: Decimal,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.renewal_type = renewal_type
        self.new_expiry = new_expiry
        self.total_seats = total_seats
        self.amount = amount

    def payload(self):
        return {
            "renewal_type": self.renewal_type,
            "new_expiry": self.new_expiry.isoformat(),
            "total_seats": self.total_seats,
            "amount": str(self.amount),
        }


class LicenseSeatsSynchronized(DomainEvent):
    """Event raised when the billing provider's seat count overwrote the ledger."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.total_seats = total_seats

    def payload(self):
        return {"total_seats": self.total_seats}


class LicenseExpiryWarning(DomainEvent):
    """Event raised when an expiry warning class is surfaced for an organization."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        notification_class: str,
        days_remaining: int,
        expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.notification_class = notification_class
        self.days_remaining = days_remaining
        self.expires_at = expires_at

    def payload(self):
        return {
            "notification_class": self.notification_class,
            "days_remaining": self.days_remaining,
            "expires_at": self.expires_at.isoformat(),
        }


class LicenseScheduledChangeApplied(DomainEvent):
    """Event raised when a scheduled seat change takes effect."""

    def __init__(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        note: str = "",
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(organization_id), occurred_at=occurred_at)
        self.organization_id = organization_id
        self.total_seats = total_seats
        self.note = note

    def payload(self):
        return {"total_seats": self.total_seats, "note": self.note}
