"""
Organization repository port (interface).
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from memberships.domain.membership import Membership
from organizations.domain.organization import Organization


class OrganizationRepository(ABC):
    """Abstract repository for Organization entities."""

    @abstractmethod
    async def create_with_owner(
        self, organization: Organization, owner_membership: Membership
    ) -> Tuple[Organization, bool]:
        """
        Create an organization and its first admin membership in one transaction.

        Either both rows exist afterwards or neither does. When a personal
        trial already exists for the owner, nothing is written and the
        existing organization is returned with ``created=False``.
        """
        pass

    @abstractmethod
    async def find_by_id(self, organization_id: uuid.UUID) -> Optional[Organization]:
        pass

    @abstractmethod
    async def find_personal_trial_for_owner(self, identity_id: int) -> Optional[Organization]:
        """Find the personal trial organization owned by an identity, if any."""
        pass

    @abstractmethod
    async def find_cleanup_candidates(self, cutoff: datetime) -> List[Organization]:
        """
        Find abandoned personal trial organizations.

        Candidates are still trials, have no license ledger, expired
        before ``cutoff`` and are owned by an identity that is active in
        another organization.
        """
        pass

    @abstractmethod
    async def delete_trial(self, organization_id: uuid.UUID) -> bool:
        """
        Delete a personal trial organization that still has no ledger.

        Returns:
            True if the organization was deleted
        """
        pass
