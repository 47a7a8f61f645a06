"""
Membership repository port (interface).

The store's uniqueness constraints are the only mutex for concurrent
operations on the same (identity, organization) or (email, organization)
pair, so implementations must surface constraint violations as
``AlreadyMemberError`` / ``AlreadyInvitedError`` instead of overwriting.
"""
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain.value_objects import MembershipStatus
from memberships.domain.membership import Membership


class MembershipRepository(ABC):
    """Abstract repository for Membership entities."""

    @abstractmethod
    async def create(self, membership: Membership) -> Membership:
        """
        Insert a new membership record.

        Raises:
            AlreadyMemberError: An active record exists for (identity, org)
            AlreadyInvitedError: A pending record exists for (email, org)
        """
        pass

    @abstractmethod
    async def transition(self, membership: Membership, expected_status: MembershipStatus) -> bool:
        """
        Persist ``membership`` only if the stored status is still ``expected_status``.

        Returns:
            True if the row was updated, False if another writer got there first

        Raises:
            AlreadyMemberError: The transition would create a second active record
        """
        pass

    @abstractmethod
    async def find_by_id(self, membership_id: uuid.UUID) -> Optional[Membership]:
        pass

    @abstractmethod
    async def find_active(
        self, organization_id: uuid.UUID, identity_id: int
    ) -> Optional[Membership]:
        """Find the active membership of an identity in an organization."""
        pass

    @abstractmethod
    async def find_inactive(
        self, organization_id: uuid.UUID, identity_id: int
    ) -> Optional[Membership]:
        """Find the most recently removed membership of an identity."""
        pass

    @abstractmethod
    async def find_pending(self, organization_id: uuid.UUID, email: str) -> Optional[Membership]:
        """Find the pending invitation for an email in an organization."""
        pass

    @abstractmethod
    async def find_pending_by_email(self, email: str) -> List[Membership]:
        """Find pending invitations for an email across organizations."""
        pass

    @abstractmethod
    async def list_for_organization(self, organization_id: uuid.UUID) -> List[Membership]:
        pass

    @abstractmethod
    async def has_active_membership_elsewhere(
        self, identity_id: int, exclude_organization_id: uuid.UUID
    ) -> bool:
        """Check whether an identity is active in any other organization."""
        pass
