"""
Django implementation of LedgerRepository port.

Thin async wrappers around ``licenses.infrastructure.ledger_operations``.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async

from licenses.domain.ledger import LedgerEntry
from licenses.infrastructure import ledger_operations
from licenses.ports.ledger_repository import LedgerRepository


class DjangoLedgerRepository(LedgerRepository):
    """Django ORM implementation of LedgerRepository."""

    @sync_to_async
    def create(self, entry: LedgerEntry) -> LedgerEntry:
        return ledger_operations.create(entry)

    @sync_to_async
    def find_by_organization(self, organization_id: uuid.UUID) -> Optional[LedgerEntry]:
        return ledger_operations.find(organization_id)

    @sync_to_async
    def find_all(self) -> List[LedgerEntry]:
        return ledger_operations.find_all()

    @sync_to_async
    def increment_used(self, organization_id: uuid.UUID) -> LedgerEntry:
        return ledger_operations.increment_used(organization_id)

    @sync_to_async
    def decrement_used(self, organization_id: uuid.UUID) -> LedgerEntry:
        return ledger_operations.decrement_used(organization_id)

    @sync_to_async
    def set_total(self, organization_id: uuid.UUID, total_seats: int) -> LedgerEntry:
        return ledger_operations.set_total(organization_id, total_seats)

    @sync_to_async
    def set_expiry(
        self,
        organization_id: uuid.UUID,
        expires_at: datetime,
        subscription_ref: Optional[str],
        expected_version: Optional[int] = None,
    ) -> LedgerEntry:
        return ledger_operations.set_expiry(
            organization_id, expires_at, subscription_ref, expected_version
        )

    @sync_to_async
    def apply_renewal(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        expires_at: datetime,
        subscription_ref: Optional[str],
        renewed_at: datetime,
        expected_version: int,
    ) -> LedgerEntry:
        return ledger_operations.apply_renewal(
            organization_id, total_seats, expires_at, subscription_ref, renewed_at, expected_version
        )

    @sync_to_async
    def sync_total(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        observed_at: datetime,
        subscription_ref: Optional[str] = None,
    ) -> Optional[LedgerEntry]:
        return ledger_operations.sync_total(
            organization_id, total_seats, observed_at, subscription_ref
        )

    @sync_to_async
    def open_grace_window(
        self, organization_id: uuid.UUID, start: datetime, end: datetime
    ) -> bool:
        return ledger_operations.open_grace_window(organization_id, start, end)

    @sync_to_async
    def schedule_change(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        effective_at: datetime,
        note: str = "",
    ) -> LedgerEntry:
        return ledger_operations.schedule_change(organization_id, total_seats, effective_at, note)

    @sync_to_async
    def find_due_scheduled_changes(self, now: datetime) -> List[LedgerEntry]:
        return ledger_operations.find_due_scheduled_changes(now)

    @sync_to_async
    def clear_scheduled_change(self, organization_id: uuid.UUID) -> None:
        ledger_operations.clear_scheduled_change(organization_id)
