"""
Django implementation of RenewalHistoryRepository port.
"""
import uuid
from typing import List

from asgiref.sync import sync_to_async

from core.domain.value_objects import RenewalType
from licenses.domain.history import RenewalRecord
from licenses.infrastructure.models import RenewalHistory as RenewalHistoryModel
from licenses.ports.renewal_history_repository import RenewalHistoryRepository


def to_domain(model: RenewalHistoryModel) -> RenewalRecord:
    return RenewalRecord(
        id=model.id,
        organization_id=model.organization_id,
        renewal_type=RenewalType(model.renewal_type),
        previous_expiry=model.previous_expiry,
        new_expiry=model.new_expiry,
        seats_before=model.seats_before,
        seats_after=model.seats_after,
        amount=model.amount,
        transaction_ref=model.transaction_ref,
        actor=model.actor,
        created_at=model.created_at,
    )


def append_record(record: RenewalRecord) -> RenewalRecord:
    """Insert a renewal record; usable inside a caller's transaction."""
    model = RenewalHistoryModel.objects.create(
        id=record.id,
        organization_id=record.organization_id,
        renewal_type=record.renewal_type.value,
        previous_expiry=record.previous_expiry,
        new_expiry=record.new_expiry,
        seats_before=record.seats_before,
        seats_after=record.seats_after,
        amount=record.amount,
        transaction_ref=record.transaction_ref,
        actor=record.actor,
        created_at=record.created_at,
    )
    return to_domain(model)


class DjangoRenewalHistoryRepository(RenewalHistoryRepository):
    """Django ORM implementation of RenewalHistoryRepository."""

    @sync_to_async
    def append(self, record: RenewalRecord) -> RenewalRecord:
        return append_record(record)

    @sync_to_async
    def exists_for_transaction(self, transaction_ref: str) -> bool:
        return RenewalHistoryModel.objects.filter(transaction_ref=transaction_ref).exists()

    @sync_to_async
    def list_for_organization(self, organization_id: uuid.UUID) -> List[RenewalRecord]:
        models = RenewalHistoryModel.objects.filter(organization_id=organization_id)
        return [to_domain(model) for model in models]
