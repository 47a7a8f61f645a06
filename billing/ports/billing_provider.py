"""
Billing provider port (interface).

The provider is the source of truth for what is charged. Its synchronous
answers are advisory only: the ledger changes when the signed
notification for the charge arrives.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class ProrationMode(Enum):
    """How the provider bills a subscription change."""

    PRORATED_IMMEDIATELY = "prorated_immediately"
    FULL_IMMEDIATELY = "full_immediately"
    DO_NOT_BILL = "do_not_bill"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LineItem:
    """One priced line of a subscription."""

    quantity: int
    license_class: str = "standard"
    unit_price: Optional[Decimal] = None


@dataclass(frozen=True)
class SubscriptionResult:
    """Provider response to a subscription change request."""

    subscription_ref: str
    next_billing_date: Optional[datetime]
    raw: Dict[str, Any] = field(default_factory=dict)


class BillingProvider(ABC):
    """Abstract billing provider client."""

    @abstractmethod
    async def create_or_modify_subscription(
        self,
        subscription_ref: Optional[str],
        line_items: List[LineItem],
        proration_mode: ProrationMode,
        custom_data: Optional[Dict[str, Any]] = None,
    ) -> SubscriptionResult:
        """
        Create a subscription, or change an existing one.

        ``custom_data`` is echoed back in the provider's notifications and
        identifies the organization and the requested renewal.

        Raises:
            ProviderUnavailableError: On timeout, connection failure or non-2xx
        """
        pass

    @abstractmethod
    async def preview_price(self, line_items: List[LineItem]) -> Decimal:
        """
        Ask the provider for the price of ``line_items``.

        Raises:
            ProviderUnavailableError: On timeout, connection failure or non-2xx
        """
        pass
