"""
Trial organization handlers.

Both handlers run under a named service actor; they are never reachable
with an end user's authorization.
"""
import logging
from datetime import datetime
from typing import List

from django.utils import timezone

from core.domain.exceptions import NotAuthorizedError, ValidationError
from core.domain.value_objects import Actor
from core.infrastructure.events import event_bus
from core.metrics import trial_organizations_removed_total
from memberships.ports.identity_provider import IdentityProvider
from organizations.application.commands.provision_trial_organization import (
    ProvisionTrialOrganizationCommand,
)
from organizations.application.dto.organization_dto import OrganizationDTO
from organizations.domain.events import TrialOrganizationProvisioned, TrialOrganizationRemoved
from organizations.domain.services import TrialOrganizationManager
from organizations.ports.organization_repository import OrganizationRepository

logger = logging.getLogger(__name__)


def _require_service(actor: Actor) -> None:
    if not actor.is_service:
        raise NotAuthorizedError(f"{actor} cannot manage trial organizations")


class ProvisionTrialOrganizationHandler:
    """Handler for ProvisionTrialOrganizationCommand."""

    def __init__(
        self,
        organization_repository: OrganizationRepository,
        identity_provider: IdentityProvider,
    ):
        """Initialize handler with repositories."""
        self.organization_repository = organization_repository
        self.identity_provider = identity_provider

    async def handle(self, command: ProvisionTrialOrganizationCommand) -> OrganizationDTO:
        """
        Handle provision trial organization command.

        Raises:
            NotAuthorizedError: If not called by a service actor
            ValidationError: If the identity does not exist
        """
        _require_service(command.actor)
        identity = await self.identity_provider.get(command.identity_id)
        if identity is None:
            raise ValidationError(
                f"Unknown identity {command.identity_id}", code="UNKNOWN_IDENTITY"
            )

        organization, created = await TrialOrganizationManager.provision(
            identity, timezone.now(), self.organization_repository
        )
        if created:
            await event_bus.publish(
                TrialOrganizationProvisioned(
                    organization_id=organization.id,
                    owner_identity_id=identity.id,
                    trial_expires_at=organization.trial_expires_at,
                )
            )
        return OrganizationDTO.from_entity(organization, created=created)


class CleanupTrialOrganizationsHandler:
    """Removes personal trial organizations abandoned by their owners."""

    def __init__(self, organization_repository: OrganizationRepository):
        self.organization_repository = organization_repository

    async def handle(
        self, actor: Actor, now: datetime, margin_days: int, dry_run: bool = False
    ) -> List[OrganizationDTO]:
        _require_service(actor)
        removed = await TrialOrganizationManager.cleanup(
            now, margin_days, self.organization_repository, dry_run=dry_run
        )
        if not dry_run:
            for organization in removed:
                trial_organizations_removed_total.inc()
                await event_bus.publish(
                    TrialOrganizationRemoved(
                        organization_id=organization.id,
                        owner_identity_id=organization.owner_identity_id,
                    )
                )
        logger.info(
            "Trial cleanup %s %d organization(s)",
            "found" if dry_run else "removed",
            len(removed),
            extra={"actor": str(actor), "dry_run": dry_run},
        )
        return [OrganizationDTO.from_entity(organization) for organization in removed]
