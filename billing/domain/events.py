"""
Billing notification variants.

Inbound provider payloads are mapped to one of these types at the edge of
the system; reconciliation never sees an untyped map.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

PURCHASE_CONFIRMED = "transaction.completed"
SUBSCRIPTION_SEATS_UPDATED = "subscription.updated"


@dataclass(frozen=True)
class BillingEvent:
    """Fields shared by every billing notification."""

    event_id: str
    event_type: str
    occurred_at: datetime
    organization_id: Optional[uuid.UUID]
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class PurchaseConfirmed(BillingEvent):
    """A charge for seats completed."""

    transaction_ref: str = ""
    subscription_ref: Optional[str] = None
    identity_id: Optional[int] = None
    quantity: int = 0
    license_class: str = "standard"
    prorated: bool = False
    scheduled_change: bool = False
    amount: Optional[Decimal] = None
    organization_name: str = ""


@dataclass(frozen=True)
class SubscriptionSeatsUpdated(BillingEvent):
    """The provider's view of a subscription's line items changed."""

    subscription_ref: str = ""
    line_item_quantities: Tuple[int, ...] = ()

    @property
    def total_seats(self) -> int:
        return sum(self.line_item_quantities)
