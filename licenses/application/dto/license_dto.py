"""
Data Transfer Objects for license operations.

DTOs are used to transfer data between layers without exposing
domain entities directly.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from licenses.domain.renewal import RenewalQuote
from licenses.domain.status import LicenseStatusReport


@dataclass
class LicenseStatusDTO:
    """DTO for an organization's license status."""

    organization_id: uuid.UUID
    status: str
    severity: str
    days_remaining: Optional[int]
    grace_days_left: int
    expires_at: Optional[datetime]
    total_seats: int
    used_seats: int
    available_seats: int
    can_add_member: bool

    @classmethod
    def from_report(
        cls, organization_id: uuid.UUID, report: LicenseStatusReport
    ) -> "LicenseStatusDTO":
        return cls(
            organization_id=organization_id,
            status=report.status.value,
            severity=report.severity.value,
            days_remaining=report.days_remaining,
            grace_days_left=report.grace_days_left,
            expires_at=report.expires_at,
            total_seats=report.total_seats,
            used_seats=report.used_seats,
            available_seats=report.available_seats,
            can_add_member=report.can_add_member,
        )


@dataclass
class ChargeRequestDTO:
    """
    DTO for a charge requested from the billing provider.

    The ledger is not changed yet; it is updated when the provider's
    purchase notification is reconciled.
    """

    organization_id: uuid.UUID
    renewal_type: str
    amount: Decimal
    new_total_seats: int
    expected_expiry: datetime
    subscription_ref: str
    next_billing_date: Optional[datetime]
    status: str = "pending_confirmation"

    @classmethod
    def from_quote(
        cls,
        organization_id: uuid.UUID,
        quote: RenewalQuote,
        subscription_ref: str,
        next_billing_date: Optional[datetime],
    ) -> "ChargeRequestDTO":
        return cls(
            organization_id=organization_id,
            renewal_type=quote.renewal_type.value,
            amount=quote.amount,
            new_total_seats=quote.new_total_seats,
            expected_expiry=quote.new_expiry,
            subscription_ref=subscription_ref,
            next_billing_date=next_billing_date,
        )
