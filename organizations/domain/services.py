"""
Trial organization domain service.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Tuple

from core.domain.value_objects import MembershipRole
from memberships.domain.membership import Membership
from memberships.ports.identity_provider import Identity
from organizations.domain.organization import Organization
from organizations.ports.organization_repository import OrganizationRepository

logger = logging.getLogger(__name__)


class TrialOrganizationManager:
    """Creates personal trial organizations and removes abandoned ones."""

    @staticmethod
    async def provision(
        identity: Identity,
        now: datetime,
        organization_repository: OrganizationRepository,
    ) -> Tuple[Organization, bool]:
        """
        Provision the personal trial organization for an identity.

        The organization and the owner's admin membership are written
        together. Calling this again for the same identity returns the
        existing organization.

        Args:
            identity: Newly registered identity
            now: Current time
            organization_repository: Organization repository

        Returns:
            Tuple of (organization, created)
        """
        existing = await organization_repository.find_personal_trial_for_owner(identity.id)
        if existing:
            return existing, False

        organization = Organization.create_personal_trial(identity.id, identity.email, now)
        owner = Membership.create_active(
            organization_id=organization.id,
            identity_id=identity.id,
            email=identity.email,
            role=MembershipRole.ADMIN,
            now=now,
        )
        saved, created = await organization_repository.create_with_owner(organization, owner)
        if created:
            logger.info(
                "Provisioned trial organization %s for identity %s",
                saved.id,
                identity.id,
                extra={"organization_id": str(saved.id), "identity_id": identity.id},
            )
        return saved, created

    @staticmethod
    async def cleanup(
        now: datetime,
        margin_days: int,
        organization_repository: OrganizationRepository,
        dry_run: bool = False,
    ) -> List[Organization]:
        """
        Delete personal trial organizations abandoned by their owners.

        An organization qualifies once its trial window plus ``margin_days``
        has passed, it never got a ledger and its owner is active in
        another organization.

        Returns:
            Organizations deleted (or that would be deleted in dry-run mode)
        """
        cutoff = now - timedelta(days=margin_days)
        candidates = await organization_repository.find_cleanup_candidates(cutoff)
        if dry_run:
            return candidates

        removed = []
        for organization in candidates:
            if await organization_repository.delete_trial(organization.id):
                removed.append(organization)
                logger.info(
                    "Removed abandoned trial organization %s",
                    organization.id,
                    extra={"organization_id": str(organization.id)},
                )
        return removed
