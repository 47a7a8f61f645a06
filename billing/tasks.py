"""
Celery tasks for billing reconciliation.

The webhook view only verifies and parses; reconciliation runs here so the
provider gets its acknowledgement without waiting on the ledger.
"""
import logging

from asgiref.sync import async_to_sync
from django.conf import settings
from django.db import OperationalError

from billing.application.handlers.reconcile_billing_event_handler import (
    ReconcileBillingEventHandler,
)
from billing.domain.reconciliation import RETRIES_EXHAUSTED, ReconciliationEngine
from billing.infrastructure.payload_parser import parse_billing_event
from billing.infrastructure.repositories.django_reconciliation_store import (
    DjangoReconciliationStore,
)
from core.domain.exceptions import LedgerAlreadyExistsError, TransientError
from core.metrics import billing_events_total
from licenses.domain.renewal import RenewalCalculator
from SeatLicensingService.celery import app

logger = logging.getLogger(__name__)

_store = DjangoReconciliationStore()


def build_reconciliation_handler() -> ReconcileBillingEventHandler:
    engine = ReconciliationEngine(
        store=_store, calculator=RenewalCalculator(settings.LICENSE_ANNUAL_SEAT_PRICE)
    )
    return ReconcileBillingEventHandler(
        engine,
        max_attempts=settings.BILLING_RECONCILIATION_ATTEMPTS,
        base_delay=settings.BILLING_RECONCILIATION_BASE_DELAY,
    )


@app.task(bind=True, max_retries=3)
def reconcile_billing_event(self, payload: dict):
    """
    Reconcile one verified billing notification.

    Transient failures are retried with exponential backoff; once retries
    are exhausted the event is dead-lettered for an operator.

    Args:
        payload: Decoded notification body

    Returns:
        Dict with the event id and reconciliation outcome
    """
    event = parse_billing_event(payload)
    try:
        result = async_to_sync(build_reconciliation_handler().handle)(event)
    except (TransientError, LedgerAlreadyExistsError, OperationalError) as exc:
        if self.request.retries >= self.max_retries:
            async_to_sync(_store.dead_letter)(
                event, RETRIES_EXHAUSTED, str(exc), mark_processed=False
            )
            billing_events_total.labels(
                event_type=event.event_type, outcome="dead_lettered"
            ).inc()
            return {"event_id": event.event_id, "outcome": "dead_lettered"}
        logger.warning(
            "Billing event %s not reconciled yet, retrying: %s",
            event.event_id,
            exc,
            extra={"event_id": event.event_id, "retries": self.request.retries},
        )
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return {"event_id": event.event_id, "outcome": result.outcome.value}
