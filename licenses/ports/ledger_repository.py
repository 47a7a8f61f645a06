"""
License ledger repository port (interface).

Every mutation is a single conditional update against the store. Callers
never read a counter, change it in memory and write it back.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from licenses.domain.ledger import LedgerEntry


class LedgerRepository(ABC):
    """Abstract repository for license ledger entries."""

    @abstractmethod
    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Insert the first ledger entry for an organization.

        Raises:
            LedgerAlreadyExistsError: If the organization already has one
        """
        pass

    @abstractmethod
    async def find_by_organization(self, organization_id: uuid.UUID) -> Optional[LedgerEntry]:
        pass

    @abstractmethod
    async def find_all(self) -> List[LedgerEntry]:
        pass

    @abstractmethod
    async def increment_used(self, organization_id: uuid.UUID) -> LedgerEntry:
        """
        Consume one seat with a compare-and-increment.

        Raises:
            SeatLimitExceededError: If every seat is already used
            LedgerNotFoundError: If the organization has no ledger
        """
        pass

    @abstractmethod
    async def decrement_used(self, organization_id: uuid.UUID) -> LedgerEntry:
        """
        Release one seat. The count never drops below 1 (the owner's seat).

        Raises:
            LedgerNotFoundError: If the organization has no ledger
        """
        pass

    @abstractmethod
    async def set_total(self, organization_id: uuid.UUID, total_seats: int) -> LedgerEntry:
        """
        Overwrite the total seat count.

        Raises:
            SeatInvariantViolationError: If ``total_seats`` is below used seats
            LedgerNotFoundError: If the organization has no ledger
        """
        pass

    @abstractmethod
    async def set_expiry(
        self,
        organization_id: uuid.UUID,
        expires_at: datetime,
        subscription_ref: Optional[str],
        expected_version: Optional[int] = None,
    ) -> LedgerEntry:
        """
        Overwrite the expiry and subscription reference.

        Raises:
            WriteConflictError: If ``expected_version`` no longer matches
        """
        pass

    @abstractmethod
    async def apply_renewal(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        expires_at: datetime,
        subscription_ref: Optional[str],
        renewed_at: datetime,
        expected_version: int,
    ) -> LedgerEntry:
        """
        Write a renewal result and close any open grace window.

        Raises:
            SeatInvariantViolationError: If ``total_seats`` is below used seats
            WriteConflictError: If ``expected_version`` no longer matches
        """
        pass

    @abstractmethod
    async def sync_total(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        observed_at: datetime,
        subscription_ref: Optional[str] = None,
    ) -> Optional[LedgerEntry]:
        """
        Overwrite the total with the billing provider's authoritative count.

        Events observed before the last applied sync are ignored, so any
        delivery order converges on the newest count.

        Returns:
            Updated entry, or None if the event was stale

        Raises:
            SeatInvariantViolationError: If ``total_seats`` is below used seats
        """
        pass

    @abstractmethod
    async def open_grace_window(
        self, organization_id: uuid.UUID, start: datetime, end: datetime
    ) -> bool:
        """Record the grace window once; returns False if already open."""
        pass

    @abstractmethod
    async def schedule_change(
        self,
        organization_id: uuid.UUID,
        total_seats: int,
        effective_at: datetime,
        note: str = "",
    ) -> LedgerEntry:
        pass

    @abstractmethod
    async def find_due_scheduled_changes(self, now: datetime) -> List[LedgerEntry]:
        pass

    @abstractmethod
    async def clear_scheduled_change(self, organization_id: uuid.UUID) -> None:
        pass
