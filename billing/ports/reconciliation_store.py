"""
Reconciliation store port (interface).

``commit`` writes the dedupe marker and the ledger mutation in a single
transaction: either the event is recorded as processed and its effect is
visible, or neither is.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from billing.domain.events import BillingEvent
from licenses.domain.history import RenewalRecord
from licenses.domain.ledger import LedgerEntry
from organizations.domain.organization import Organization


class ReconciliationOutcome(Enum):
    """What happened to a billing notification."""

    APPLIED = "applied"
    DUPLICATE = "duplicate"
    STALE = "stale"
    DEAD_LETTERED = "dead_lettered"
    IGNORED = "ignored"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LedgerCreation:
    """First purchase: create the ledger and promote the trial organization."""

    entry: LedgerEntry
    history: RenewalRecord


@dataclass(frozen=True)
class LedgerRenewal:
    """Renewal or seat addition against an existing ledger."""

    organization_id: uuid.UUID
    expected_version: int
    total_seats: int
    expires_at: datetime
    subscription_ref: Optional[str]
    history: RenewalRecord


@dataclass(frozen=True)
class SeatSync:
    """Authoritative total seat overwrite from the provider."""

    organization_id: uuid.UUID
    total_seats: int
    observed_at: datetime
    subscription_ref: Optional[str]


LedgerMutation = Union[LedgerCreation, LedgerRenewal, SeatSync]


@dataclass(frozen=True)
class CommitResult:
    outcome: ReconciliationOutcome
    ledger: Optional[LedgerEntry] = None


class ReconciliationStore(ABC):
    """Abstract persistence for the reconciliation engine."""

    @abstractmethod
    async def is_processed(self, event_id: str) -> bool:
        pass

    @abstractmethod
    async def find_organization(self, organization_id: uuid.UUID) -> Optional[Organization]:
        pass

    @abstractmethod
    async def find_organization_for_identity(self, identity_id: int) -> Optional[Organization]:
        """Most recent organization the identity administers, if any."""
        pass

    @abstractmethod
    async def find_ledger(self, organization_id: uuid.UUID) -> Optional[LedgerEntry]:
        pass

    @abstractmethod
    async def commit(self, event: BillingEvent, mutation: LedgerMutation) -> CommitResult:
        """
        Record ``event`` as processed and apply ``mutation`` atomically.

        Returns:
            CommitResult with APPLIED, STALE (seat sync older than the last
            applied one) or DUPLICATE (marker already present)

        Raises:
            SeatInvariantViolationError: If the mutation would break the seat invariant
            WriteConflictError: If the ledger changed since it was read
            LedgerAlreadyExistsError: If another event created the ledger first
        """
        pass

    @abstractmethod
    async def dead_letter(
        self, event: BillingEvent, reason: str, message: str, mark_processed: bool = True
    ) -> None:
        """
        Set the event aside for an operator.

        With ``mark_processed`` the event is also recorded as processed, so a
        redelivery is treated as a duplicate.
        """
        pass
