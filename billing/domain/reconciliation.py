"""
Billing reconciliation engine.

Turns a typed billing notification into at most one ledger mutation and
hands it to the store, which applies it together with the dedupe marker.
Events that can never be applied are dead-lettered instead of retried.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from billing.domain.events import BillingEvent, PurchaseConfirmed, SubscriptionSeatsUpdated
from billing.ports.reconciliation_store import (
    LedgerCreation,
    LedgerMutation,
    LedgerRenewal,
    ReconciliationOutcome,
    ReconciliationStore,
    SeatSync,
)
from core.domain.exceptions import (
    LedgerNotReadyError,
    SeatInvariantViolationError,
    UnsupportedBillingEventError,
    ValidationError,
)
from core.domain.value_objects import Actor, RenewalType
from licenses.domain.history import RenewalRecord
from licenses.domain.ledger import LedgerEntry
from licenses.domain.renewal import RenewalCalculator, calculate_prorated_amount
from licenses.domain.status import days_remaining
from organizations.domain.organization import Organization

RECONCILIATION_ACTOR = str(Actor.service("billing-reconciliation"))

UNKNOWN_ORGANIZATION = "unknown_organization"
SEAT_INVARIANT_VIOLATION = "seat_invariant_violation"
RETRIES_EXHAUSTED = "retries_exhausted"


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of processing one billing notification."""

    outcome: ReconciliationOutcome
    ledger: Optional[LedgerEntry] = None
    mutation: Optional[LedgerMutation] = None
    reason: str = ""


class ReconciliationEngine:
    """
    Applies billing notifications to the license ledger.

    ``reconcile`` is safe to call again for the same event: the store's
    dedupe marker turns a replay into a DUPLICATE outcome without touching
    the ledger.
    """

    def __init__(self, store: ReconciliationStore, calculator: RenewalCalculator = None):
        self.store = store
        self.calculator = calculator or RenewalCalculator()

    async def reconcile(self, event: BillingEvent) -> ReconciliationResult:
        """
        Process one billing notification.

        Raises:
            TransientError: If the ledger is not ready yet or a write raced;
                the caller decides whether to retry
            LedgerAlreadyExistsError: If a concurrent purchase created the
                ledger first; replanning against the new row resolves it
        """
        if await self.store.is_processed(event.event_id):
            return ReconciliationResult(ReconciliationOutcome.DUPLICATE)

        organization = await self._resolve_organization(event)
        if organization is None:
            return await self._dead_letter(
                event, UNKNOWN_ORGANIZATION, f"Organization {event.organization_id} does not exist"
            )

        ledger = await self.store.find_ledger(organization.id)
        try:
            mutation = self.plan(event, ledger, organization.id)
        except ValidationError as exc:
            return await self._dead_letter(event, SEAT_INVARIANT_VIOLATION, exc.message)

        try:
            committed = await self.store.commit(event, mutation)
        except SeatInvariantViolationError as exc:
            return await self._dead_letter(event, SEAT_INVARIANT_VIOLATION, exc.message)

        return ReconciliationResult(committed.outcome, committed.ledger, mutation)

    async def _resolve_organization(self, event: BillingEvent) -> Optional[Organization]:
        if event.organization_id is not None:
            return await self.store.find_organization(event.organization_id)
        identity_id = getattr(event, "identity_id", None)
        if identity_id is None:
            return None
        # no organization in the metadata: fall back to the buyer's own organization
        return await self.store.find_organization_for_identity(identity_id)

    def plan(
        self,
        event: BillingEvent,
        ledger: Optional[LedgerEntry],
        organization_id: Optional[uuid.UUID] = None,
    ) -> LedgerMutation:
        """
        Decide the ledger mutation for ``event`` against the current ``ledger``.

        Raises:
            ValidationError: If the event can never be applied to this ledger
            LedgerNotReadyError: If a seat sync arrives before the first purchase
        """
        if isinstance(event, PurchaseConfirmed):
            if ledger is None:
                return self._plan_creation(event, organization_id or event.organization_id)
            if event.scheduled_change:
                return self._plan_scheduled_change_charge(event, ledger)
            if event.prorated:
                return self._plan_seat_addition(event, ledger)
            return self._plan_renewal(event, ledger)
        if isinstance(event, SubscriptionSeatsUpdated):
            if ledger is None:
                raise LedgerNotReadyError(
                    f"No license yet for organization {event.organization_id}; "
                    "waiting for the purchase to be reconciled"
                )
            return SeatSync(
                organization_id=ledger.organization_id,
                total_seats=event.total_seats,
                observed_at=event.occurred_at,
                subscription_ref=event.subscription_ref or None,
            )
        raise UnsupportedBillingEventError(f"Unsupported billing event type: {event.event_type}")

    def _plan_creation(
        self, event: PurchaseConfirmed, organization_id: uuid.UUID
    ) -> LedgerCreation:
        quote = self.calculator.quote_new_purchase(event.quantity, event.occurred_at)
        entry = LedgerEntry.create(
            organization_id=organization_id,
            total_seats=quote.new_total_seats,
            now=event.occurred_at,
            license_class=event.license_class,
            subscription_ref=event.subscription_ref,
            expires_at=quote.new_expiry,
        )
        history = self._history(
            event,
            organization_id,
            quote.renewal_type,
            None,
            quote.new_expiry,
            0,
            quote.new_total_seats,
            quote.amount,
        )
        return LedgerCreation(entry=entry, history=history)

    def _plan_seat_addition(self, event: PurchaseConfirmed, ledger: LedgerEntry) -> LedgerRenewal:
        if event.quantity < 1:
            raise ValidationError("At least one seat must be added")
        total_seats = ledger.total_seats + event.quantity
        if ledger.seats_synced_at is not None and ledger.seats_synced_at >= event.occurred_at:
            # a later seat sync already counted these seats
            total_seats = ledger.total_seats
        amount = calculate_prorated_amount(
            self.calculator.annual_seat_price,
            days_remaining(ledger.expires_at, event.occurred_at),
            event.quantity,
        )
        history = self._history(
            event,
            ledger.organization_id,
            RenewalType.PRORATED,
            ledger.expires_at,
            ledger.expires_at,
            ledger.total_seats,
            total_seats,
            amount,
        )
        return LedgerRenewal(
            organization_id=ledger.organization_id,
            expected_version=ledger.version,
            total_seats=total_seats,
            expires_at=ledger.expires_at,
            subscription_ref=event.subscription_ref,
            history=history,
        )

    def _plan_scheduled_change_charge(
        self, event: PurchaseConfirmed, ledger: LedgerEntry
    ) -> LedgerRenewal:
        # the seat count was set when the change was applied; only the charge is recorded
        history = self._history(
            event,
            ledger.organization_id,
            RenewalType.PRORATED,
            ledger.expires_at,
            ledger.expires_at,
            ledger.total_seats,
            ledger.total_seats,
            Decimal("0.00"),
        )
        return LedgerRenewal(
            organization_id=ledger.organization_id,
            expected_version=ledger.version,
            total_seats=ledger.total_seats,
            expires_at=ledger.expires_at,
            subscription_ref=event.subscription_ref,
            history=history,
        )

    def _plan_renewal(self, event: PurchaseConfirmed, ledger: LedgerEntry) -> LedgerRenewal:
        quote = self.calculator.quote_renewal(ledger, event.occurred_at, event.quantity)
        history = self._history(
            event,
            ledger.organization_id,
            quote.renewal_type,
            ledger.expires_at,
            quote.new_expiry,
            ledger.total_seats,
            quote.new_total_seats,
            quote.amount,
        )
        return LedgerRenewal(
            organization_id=ledger.organization_id,
            expected_version=ledger.version,
            total_seats=quote.new_total_seats,
            expires_at=quote.new_expiry,
            subscription_ref=event.subscription_ref,
            history=history,
        )

    @staticmethod
    def _history(
        event: PurchaseConfirmed,
        organization_id: uuid.UUID,
        renewal_type: RenewalType,
        previous_expiry,
        new_expiry,
        seats_before: int,
        seats_after: int,
        quoted_amount: Decimal,
    ) -> RenewalRecord:
        # the charged amount wins over the quote when the provider reports it
        amount = event.amount if event.amount is not None else quoted_amount
        return RenewalRecord.create(
            organization_id=organization_id,
            renewal_type=renewal_type,
            previous_expiry=previous_expiry,
            new_expiry=new_expiry,
            seats_before=seats_before,
            seats_after=seats_after,
            amount=amount,
            transaction_ref=event.transaction_ref or None,
            actor=RECONCILIATION_ACTOR,
            now=event.occurred_at,
        )

    async def _dead_letter(
        self, event: BillingEvent, reason: str, message: str
    ) -> ReconciliationResult:
        await self.store.dead_letter(event, reason, message)
        return ReconciliationResult(ReconciliationOutcome.DEAD_LETTERED, reason=reason)
