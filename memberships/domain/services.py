"""
Membership domain services.

``MembershipLifecycleManager`` drives the pending -> active -> inactive
state machine and keeps the ledger's used-seat count in step with it.
Seats are consumed first through the ledger's compare-and-increment; if
the membership write then loses a race the seat is handed back.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from core.domain.exceptions import (
    AlreadyInvitedError,
    AlreadyMemberError,
    LedgerNotFoundError,
    LicenseExpiredError,
    NoPendingInvitationError,
    NotAnActiveMemberError,
    NotAuthorizedError,
    SeatLimitExceededError,
    ValidationError,
)
from core.domain.value_objects import Actor, Email, LicenseStatus, MembershipRole, MembershipStatus
from licenses.domain.status import evaluate_status
from licenses.ports.ledger_repository import LedgerRepository
from memberships.domain.membership import Membership
from memberships.ports.identity_provider import IdentityProvider
from memberships.ports.membership_repository import MembershipRepository

logger = logging.getLogger(__name__)


class MembershipAuthorization:
    """Checks an actor's rights inside one organization."""

    @staticmethod
    async def require_admin(
        actor: Actor, organization_id: uuid.UUID, repository: MembershipRepository
    ) -> Membership:
        """
        Ensure ``actor`` is an active admin of the organization.

        Service actors are rejected; admin commands always run under the
        calling user's own authorization.
        """
        if actor.is_service:
            raise NotAuthorizedError(f"{actor} cannot run admin commands")
        membership = await repository.find_active(organization_id, actor.identity_id)
        if membership is None or not membership.is_admin:
            raise NotAuthorizedError("Admin role required for this organization")
        return membership

    @staticmethod
    async def require_member(
        actor: Actor, organization_id: uuid.UUID, repository: MembershipRepository
    ) -> Optional[Membership]:
        """Ensure ``actor`` is an active member (service actors pass explicitly)."""
        if actor.is_service:
            return None
        membership = await repository.find_active(organization_id, actor.identity_id)
        if membership is None:
            raise NotAuthorizedError("Not a member of this organization")
        return membership


class MembershipLifecycleManager:
    """Domain service for membership transitions and their seat accounting."""

    def __init__(
        self,
        membership_repository: MembershipRepository,
        ledger_repository: LedgerRepository,
        identity_provider: IdentityProvider,
    ):
        self.membership_repository = membership_repository
        self.ledger_repository = ledger_repository
        self.identity_provider = identity_provider

    async def can_add_member(self, organization_id: uuid.UUID, now: datetime) -> bool:
        """Check whether the ledger has a free seat and is not past grace."""
        ledger = await self.ledger_repository.find_by_organization(organization_id)
        return evaluate_status(ledger, now).can_add_member

    async def _ensure_capacity(self, organization_id: uuid.UUID, now: datetime) -> None:
        ledger = await self.ledger_repository.find_by_organization(organization_id)
        if ledger is None:
            raise LedgerNotFoundError("Purchase a license before inviting members")
        report = evaluate_status(ledger, now)
        if report.status == LicenseStatus.EXPIRED:
            raise LicenseExpiredError("License has expired; renew to invite members")
        if not report.can_add_member:
            raise SeatLimitExceededError(
                f"All {ledger.total_seats} seat(s) are in use; purchase more seats to add members"
            )

    async def _release_seat(self, organization_id: uuid.UUID) -> None:
        await self.ledger_repository.decrement_used(organization_id)

    async def invite(
        self,
        organization_id: uuid.UUID,
        email: str,
        role: MembershipRole,
        now: datetime,
    ) -> Membership:
        """
        Invite an email into an organization.

        A known identity becomes active immediately and consumes a seat.
        An unknown email gets a pending invitation that consumes nothing
        until it is accepted.

        Args:
            organization_id: Organization UUID
            email: Invitee email
            role: Role granted on activation
            now: Current time

        Returns:
            The created or reactivated membership

        Raises:
            ValidationError: If the email is malformed
            SeatLimitExceededError: If no seat is free
            LicenseExpiredError: If the license is past its grace period
            AlreadyMemberError: If the identity is already active
            AlreadyInvitedError: If the email already has a pending invitation
        """
        try:
            normalized = Email(email).value
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        await self._ensure_capacity(organization_id, now)

        if await self.membership_repository.find_pending(organization_id, normalized):
            raise AlreadyInvitedError(f"{normalized} already has a pending invitation")

        identity = await self.identity_provider.lookup_by_email(normalized)
        if identity is None:
            membership = await self.membership_repository.create(
                Membership.create_pending(organization_id, normalized, role, now)
            )
            logger.info(
                "Created pending invitation %s",
                membership.id,
                extra={
                    "organization_id": str(organization_id),
                    "membership_id": str(membership.id),
                },
            )
            return membership

        if await self.membership_repository.find_active(organization_id, identity.id):
            raise AlreadyMemberError(f"{normalized} is already a member")

        await self.ledger_repository.increment_used(organization_id)
        try:
            membership = await self._activate_identity(
                organization_id, identity.id, normalized, role, now
            )
        except Exception:
            await self._release_seat(organization_id)
            raise
        logger.info(
            "Activated member %s",
            membership.id,
            extra={
                "organization_id": str(organization_id),
                "membership_id": str(membership.id),
                "identity_id": identity.id,
            },
        )
        return membership

    async def _activate_identity(
        self,
        organization_id: uuid.UUID,
        identity_id: int,
        email: str,
        role: MembershipRole,
        now: datetime,
    ) -> Membership:
        # a removed member is reactivated on their historical record
        previous = await self.membership_repository.find_inactive(organization_id, identity_id)
        if previous is None:
            return await self.membership_repository.create(
                Membership.create_active(organization_id, identity_id, email, role, now)
            )
        reactivated = previous.reactivate(role, now)
        if not await self.membership_repository.transition(reactivated, MembershipStatus.INACTIVE):
            raise AlreadyMemberError("Membership changed concurrently")
        return reactivated

    async def accept(
        self,
        identity_id: int,
        email: str,
        now: datetime,
        organization_id: Optional[uuid.UUID] = None,
    ) -> Membership:
        """
        Accept the pending invitation addressed to ``email``.

        Args:
            identity_id: Identity accepting the invitation
            email: Email the invitation was sent to
            now: Current time
            organization_id: Organization to join when several invitations exist

        Returns:
            The now-active membership

        Raises:
            NoPendingInvitationError: If no matching invitation exists
            ValidationError: If several invitations match and no organization is given
            SeatLimitExceededError: If the organization has no free seat
            AlreadyMemberError: If the identity is already active there
        """
        try:
            normalized = Email(email).value
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        pending = await self.membership_repository.find_pending_by_email(normalized)
        if organization_id is not None:
            pending = [m for m in pending if m.organization_id == organization_id]
        if not pending:
            raise NoPendingInvitationError(f"No pending invitation for {normalized}")
        if len(pending) > 1:
            raise ValidationError(
                "Several invitations are pending; specify the organization",
                code="AMBIGUOUS_INVITATION",
            )
        invitation = pending[0]
        target_org = invitation.organization_id

        if await self.membership_repository.find_active(target_org, identity_id):
            raise AlreadyMemberError("Identity is already a member of this organization")

        await self.ledger_repository.increment_used(target_org)
        try:
            accepted = invitation.accept(identity_id, now)
            if not await self.membership_repository.transition(accepted, MembershipStatus.PENDING):
                raise NoPendingInvitationError("Invitation is no longer pending")
        except Exception:
            await self._release_seat(target_org)
            raise

        logger.info(
            "Invitation %s accepted",
            accepted.id,
            extra={
                "organization_id": str(target_org),
                "membership_id": str(accepted.id),
                "identity_id": identity_id,
            },
        )
        return accepted

    async def remove(
        self, identity_id: int, organization_id: uuid.UUID, now: datetime
    ) -> Membership:
        """
        Deactivate the active membership of an identity and free its seat.

        Raises:
            NotAnActiveMemberError: If the identity is not currently active
        """
        membership = await self.membership_repository.find_active(organization_id, identity_id)
        if membership is None:
            raise NotAnActiveMemberError()

        removed = membership.deactivate(now)
        if not await self.membership_repository.transition(removed, MembershipStatus.ACTIVE):
            raise NotAnActiveMemberError()
        await self._release_seat(organization_id)

        logger.info(
            "Removed member %s",
            removed.id,
            extra={"organization_id": str(organization_id), "identity_id": identity_id},
        )
        return removed
