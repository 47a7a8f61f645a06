"""
Membership command handlers.

Handlers for invite, accept and remove. Each resolves the actor's rights,
delegates the transition to ``MembershipLifecycleManager`` and publishes
the resulting domain event.
"""
import uuid
from typing import List

from django.utils import timezone

from core.domain.exceptions import (
    NotAuthorizedError,
    OrganizationNotFoundError,
    OwnerRemovalForbiddenError,
)
from core.domain.value_objects import Actor, MembershipStatus
from core.infrastructure.events import event_bus
from core.metrics import membership_transitions_total
from memberships.application.commands.accept_invitation import AcceptInvitationCommand
from memberships.application.commands.invite_member import InviteMemberCommand
from memberships.application.commands.remove_member import RemoveMemberCommand
from memberships.application.dto.membership_dto import MembershipDTO
from memberships.domain.events import MemberActivated, MemberInvited, MemberRemoved
from memberships.domain.services import MembershipAuthorization, MembershipLifecycleManager
from memberships.ports.membership_repository import MembershipRepository
from organizations.ports.organization_repository import OrganizationRepository


class InviteMemberHandler:
    """Handler for InviteMemberCommand."""

    def __init__(self, lifecycle_manager: MembershipLifecycleManager):
        """Initialize handler with the lifecycle manager."""
        self.lifecycle_manager = lifecycle_manager

    async def handle(self, command: InviteMemberCommand) -> MembershipDTO:
        """
        Handle invite member command.

        Raises:
            NotAuthorizedError: If the actor is not an admin
        """
        await MembershipAuthorization.require_admin(
            command.actor, command.organization_id, self.lifecycle_manager.membership_repository
        )
        membership = await self.lifecycle_manager.invite(
            command.organization_id, command.email, command.role, timezone.now()
        )

        if membership.status == MembershipStatus.PENDING:
            membership_transitions_total.labels(transition="invited").inc()
            await event_bus.publish(
                MemberInvited(
                    membership_id=membership.id,
                    organization_id=membership.organization_id,
                    email=membership.email,
                    role=membership.role.value,
                )
            )
        else:
            membership_transitions_total.labels(transition="activated").inc()
            await event_bus.publish(
                MemberActivated(
                    membership_id=membership.id,
                    organization_id=membership.organization_id,
                    identity_id=membership.identity_id,
                )
            )
        return MembershipDTO.from_entity(membership)


class AcceptInvitationHandler:
    """Handler for AcceptInvitationCommand."""

    def __init__(self, lifecycle_manager: MembershipLifecycleManager):
        """Initialize handler with the lifecycle manager."""
        self.lifecycle_manager = lifecycle_manager

    async def handle(self, command: AcceptInvitationCommand) -> MembershipDTO:
        """
        Handle accept invitation command.

        Runs under the accepting user's own authorization: the email must
        belong to the acting identity.

        Raises:
            NotAuthorizedError: If the actor is a service or the email is not theirs
        """
        actor = command.actor
        if actor.is_service:
            raise NotAuthorizedError("Invitations are accepted by the invited user")
        identity = await self.lifecycle_manager.identity_provider.get(actor.identity_id)
        if identity is None or identity.email.lower() != command.email.strip().lower():
            raise NotAuthorizedError("Invitation email does not match the signed-in identity")

        membership = await self.lifecycle_manager.accept(
            actor.identity_id, command.email, timezone.now(), command.organization_id
        )
        membership_transitions_total.labels(transition="accepted").inc()
        await event_bus.publish(
            MemberActivated(
                membership_id=membership.id,
                organization_id=membership.organization_id,
                identity_id=membership.identity_id,
            )
        )
        return MembershipDTO.from_entity(membership)


class RemoveMemberHandler:
    """Handler for RemoveMemberCommand."""

    def __init__(
        self,
        lifecycle_manager: MembershipLifecycleManager,
        organization_repository: OrganizationRepository,
    ):
        """Initialize handler with the lifecycle manager and organizations."""
        self.lifecycle_manager = lifecycle_manager
        self.organization_repository = organization_repository

    async def handle(self, command: RemoveMemberCommand) -> MembershipDTO:
        """
        Handle remove member command.

        Raises:
            NotAuthorizedError: If the actor is not an admin
            OwnerRemovalForbiddenError: If the target owns the organization
            NotAnActiveMemberError: If the target is not active
        """
        await MembershipAuthorization.require_admin(
            command.actor, command.organization_id, self.lifecycle_manager.membership_repository
        )
        organization = await self.organization_repository.find_by_id(command.organization_id)
        if organization is None:
            raise OrganizationNotFoundError()
        if organization.owner_identity_id == command.identity_id:
            raise OwnerRemovalForbiddenError()

        membership = await self.lifecycle_manager.remove(
            command.identity_id, command.organization_id, timezone.now()
        )
        membership_transitions_total.labels(transition="removed").inc()
        await event_bus.publish(
            MemberRemoved(
                membership_id=membership.id,
                organization_id=membership.organization_id,
                identity_id=membership.identity_id,
            )
        )
        return MembershipDTO.from_entity(membership)


class ListMembersHandler:
    """Lists every membership record of an organization."""

    def __init__(self, membership_repository: MembershipRepository):
        self.membership_repository = membership_repository

    async def handle(self, actor: Actor, organization_id: uuid.UUID) -> List[MembershipDTO]:
        await MembershipAuthorization.require_member(
            actor, organization_id, self.membership_repository
        )
        memberships = await self.membership_repository.list_for_organization(organization_id)
        return [MembershipDTO.from_entity(membership) for membership in memberships]
