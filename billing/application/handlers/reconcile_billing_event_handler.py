"""
Billing reconciliation handler.

Wraps ``ReconciliationEngine`` with bounded retries for transient failures,
metrics and domain event publication.
"""
import logging

from billing.domain.events import BillingEvent
from billing.domain.reconciliation import ReconciliationEngine, ReconciliationResult
from billing.ports.reconciliation_store import (
    LedgerCreation,
    LedgerRenewal,
    ReconciliationOutcome,
    SeatSync,
)
from core.domain.exceptions import LedgerAlreadyExistsError, TransientError
from core.infrastructure.events import event_bus
from core.infrastructure.retry import retry_async
from core.metrics import billing_events_total
from licenses.domain.events import LicensePurchased, LicenseRenewed, LicenseSeatsSynchronized

logger = logging.getLogger(__name__)


class ReconcileBillingEventHandler:
    """Handler for a verified, typed billing notification."""

    def __init__(
        self, engine: ReconciliationEngine, max_attempts: int = 3, base_delay: float = 0.05
    ):
        self.engine = engine
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    async def handle(self, event: BillingEvent) -> ReconciliationResult:
        """
        Reconcile ``event`` against the ledger.

        Raises:
            TransientError: If the event still cannot be applied after the
                in-process retries; the task queue retries it later
            LedgerAlreadyExistsError: If every attempt lost the ledger creation race
        """
        try:
            result = await retry_async(
                lambda: self.engine.reconcile(event),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                retry_on=(TransientError, LedgerAlreadyExistsError),
            )
        except (TransientError, LedgerAlreadyExistsError):
            billing_events_total.labels(event_type=event.event_type, outcome="retry").inc()
            raise

        billing_events_total.labels(
            event_type=event.event_type, outcome=result.outcome.value
        ).inc()
        logger.info(
            "Billing event %s reconciled: %s",
            event.event_id,
            result.outcome,
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "organization_id": str(event.organization_id),
                "outcome": result.outcome.value,
            },
        )
        if result.outcome == ReconciliationOutcome.APPLIED:
            await self._publish(event, result)
        return result

    async def _publish(self, event: BillingEvent, result: ReconciliationResult) -> None:
        mutation = result.mutation
        ledger = result.ledger
        if isinstance(mutation, LedgerCreation):
            domain_event = LicensePurchased(
                organization_id=ledger.organization_id,
                total_seats=ledger.total_seats,
                expires_at=ledger.expires_at,
                occurred_at=event.occurred_at,
            )
        elif isinstance(mutation, LedgerRenewal):
            domain_event = LicenseRenewed(
                organization_id=ledger.organization_id,
                renewal_type=mutation.history.renewal_type.value,
                new_expiry=ledger.expires_at,
                total_seats=ledger.total_seats,
                amount=mutation.history.amount,
                occurred_at=event.occurred_at,
            )
        elif isinstance(mutation, SeatSync):
            domain_event = LicenseSeatsSynchronized(
                organization_id=ledger.organization_id,
                total_seats=ledger.total_seats,
                occurred_at=event.occurred_at,
            )
        else:
            return
        await event_bus.publish(domain_event)
