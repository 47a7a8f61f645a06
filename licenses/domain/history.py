"""
Renewal history record.

Append-only audit of every change to a ledger's term or seat count.
The external transaction reference doubles as a duplicate detector.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.domain.value_objects import RenewalType


@dataclass(frozen=True)
class RenewalRecord:
    """Immutable renewal history entry."""

    id: uuid.UUID
    organization_id: uuid.UUID
    renewal_type: RenewalType
    previous_expiry: Optional[datetime]
    new_expiry: datetime
    seats_before: int
    seats_after: int
    amount: Decimal
    transaction_ref: Optional[str]
    actor: str
    created_at: datetime

    @classmethod
    def create(
        cls,
        organization_id: uuid.UUID,
        renewal_type: RenewalType,
        previous_expiry: Optional[datetime],
        new_expiry: datetime,
        seats_before: int,
        seats_after: int,
        amount: Decimal,
        transaction_ref: Optional[str],
        actor: str,
        now: datetime,
    ) -> "RenewalRecord":
        return cls(
            id=uuid.uuid4(),
            organization_id=organization_id,
            renewal_type=renewal_type,
            previous_expiry=previous_expiry,
            new_expiry=new_expiry,
            seats_before=seats_before,
            seats_after=seats_after,
            amount=Decimal(amount),
            transaction_ref=transaction_ref,
            actor=actor,
            created_at=now,
        )
