"""
Django implementation of ReconciliationStore port.
"""
import logging
import uuid
from typing import Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.utils import timezone

from billing.domain.events import BillingEvent
from billing.infrastructure.models import DeadLetteredBillingEvent, ProcessedBillingEvent
from billing.ports.reconciliation_store import (
    CommitResult,
    LedgerCreation,
    LedgerMutation,
    LedgerRenewal,
    ReconciliationOutcome,
    ReconciliationStore,
    SeatSync,
)
from core.domain.value_objects import MembershipRole, MembershipStatus
from licenses.domain.ledger import LedgerEntry
from licenses.infrastructure import ledger_operations
from licenses.infrastructure.models import RenewalHistory as RenewalHistoryModel
from licenses.infrastructure.repositories.django_renewal_history_repository import append_record
from organizations.domain.organization import Organization
from organizations.infrastructure.models import Organization as OrganizationModel
from organizations.infrastructure.repositories.django_organization_repository import (
    DjangoOrganizationRepository,
)

logger = logging.getLogger(__name__)


class DjangoReconciliationStore(ReconciliationStore):
    """Django ORM implementation of ReconciliationStore."""

    @sync_to_async
    def is_processed(self, event_id: str) -> bool:
        return ProcessedBillingEvent.objects.filter(event_id=event_id).exists()

    @sync_to_async
    def find_organization(self, organization_id: uuid.UUID) -> Optional[Organization]:
        if organization_id is None:
            return None
        model = OrganizationModel.objects.filter(id=organization_id).first()
        return DjangoOrganizationRepository._to_domain(model) if model else None

    @sync_to_async
    def find_organization_for_identity(self, identity_id: int) -> Optional[Organization]:
        model = (
            OrganizationModel.objects.filter(
                memberships__identity_id=identity_id,
                memberships__status=MembershipStatus.ACTIVE.value,
                memberships__role=MembershipRole.ADMIN.value,
            )
            .order_by("is_personal_trial", "-created_at")
            .first()
        )
        return DjangoOrganizationRepository._to_domain(model) if model else None

    @sync_to_async
    def find_ledger(self, organization_id: uuid.UUID) -> Optional[LedgerEntry]:
        return ledger_operations.find(organization_id)

    @sync_to_async
    def commit(self, event: BillingEvent, mutation: LedgerMutation) -> CommitResult:
        try:
            with transaction.atomic():
                marker = ProcessedBillingEvent.objects.create(
                    event_id=event.event_id,
                    event_type=event.event_type,
                    organization_id=event.organization_id,
                    outcome=ReconciliationOutcome.APPLIED.value,
                )
                if isinstance(mutation, LedgerCreation):
                    ledger = ledger_operations.create(mutation.entry)
                    append_record(mutation.history)
                    OrganizationModel.objects.filter(
                        id=mutation.entry.organization_id, is_trial=True
                    ).update(is_trial=False, trial_expires_at=None, updated_at=timezone.now())
                elif isinstance(mutation, LedgerRenewal):
                    ledger = ledger_operations.apply_renewal(
                        mutation.organization_id,
                        total_seats=mutation.total_seats,
                        expires_at=mutation.expires_at,
                        subscription_ref=mutation.subscription_ref,
                        renewed_at=mutation.history.created_at,
                        expected_version=mutation.expected_version,
                    )
                    append_record(mutation.history)
                elif isinstance(mutation, SeatSync):
                    ledger = ledger_operations.sync_total(
                        mutation.organization_id,
                        mutation.total_seats,
                        mutation.observed_at,
                        mutation.subscription_ref,
                    )
                    if ledger is None:
                        marker.outcome = ReconciliationOutcome.STALE.value
                        marker.save(update_fields=["outcome"])
                        return CommitResult(
                            ReconciliationOutcome.STALE,
                            ledger_operations.find(mutation.organization_id),
                        )
                else:
                    raise TypeError(f"Unknown ledger mutation: {type(mutation).__name__}")
        except IntegrityError:
            if self._already_applied(event):
                logger.info(
                    "Billing event %s was applied concurrently",
                    event.event_id,
                    extra={"event_id": event.event_id},
                )
                return CommitResult(ReconciliationOutcome.DUPLICATE)
            raise
        return CommitResult(ReconciliationOutcome.APPLIED, ledger)

    @staticmethod
    def _already_applied(event: BillingEvent) -> bool:
        if ProcessedBillingEvent.objects.filter(event_id=event.event_id).exists():
            return True
        transaction_ref = getattr(event, "transaction_ref", None)
        return bool(transaction_ref) and RenewalHistoryModel.objects.filter(
            transaction_ref=transaction_ref
        ).exists()

    @sync_to_async
    def dead_letter(
        self, event: BillingEvent, reason: str, message: str, mark_processed: bool = True
    ) -> None:
        with transaction.atomic():
            DeadLetteredBillingEvent.objects.create(
                event_id=event.event_id,
                event_type=event.event_type,
                organization_id=event.organization_id,
                reason=reason,
                error_message=message,
                payload=event.payload,
            )
            if mark_processed:
                ProcessedBillingEvent.objects.get_or_create(
                    event_id=event.event_id,
                    defaults={
                        "event_type": event.event_type,
                        "organization_id": event.organization_id,
                        "outcome": ReconciliationOutcome.DEAD_LETTERED.value,
                    },
                )
        logger.error(
            "Billing event %s dead-lettered: %s",
            event.event_id,
            reason,
            extra={"event_id": event.event_id, "reason": reason, "error_message": message},
        )
