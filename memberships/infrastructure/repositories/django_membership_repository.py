"""
Django implementation of MembershipRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.domain.exceptions import AlreadyInvitedError, AlreadyMemberError
from core.domain.value_objects import MembershipRole, MembershipStatus
from memberships.domain.membership import Membership
from memberships.infrastructure.models import Membership as MembershipModel
from memberships.ports.membership_repository import MembershipRepository


class DjangoMembershipRepository(MembershipRepository):
    """
    Django ORM implementation of MembershipRepository.

    State changes are conditional updates on the current status; the
    partial unique constraints on the table turn concurrent duplicates
    into domain conflicts.
    """

    @staticmethod
    def _to_domain(model: MembershipModel) -> Membership:
        return Membership(
            id=model.id,
            organization_id=model.organization_id,
            identity_id=model.identity_id,
            email=model.email,
            role=MembershipRole(model.role),
            status=MembershipStatus(model.status),
            invited_at=model.invited_at,
            accepted_at=model.accepted_at,
            removed_at=model.removed_at,
        )

    @staticmethod
    def _fields(membership: Membership) -> dict:
        return {
            "organization_id": membership.organization_id,
            "identity_id": membership.identity_id,
            "email": membership.email,
            "role": membership.role.value,
            "status": membership.status.value,
            "invited_at": membership.invited_at,
            "accepted_at": membership.accepted_at,
            "removed_at": membership.removed_at,
        }

    @staticmethod
    def _conflict_for(status: MembershipStatus):
        if status == MembershipStatus.PENDING:
            return AlreadyInvitedError()
        return AlreadyMemberError()

    @sync_to_async
    def create(self, membership: Membership) -> Membership:
        """
        Insert a new membership record.

        Args:
            membership: Membership entity to insert

        Returns:
            Saved membership entity
        """
        try:
            with transaction.atomic():
                model = MembershipModel.objects.create(id=membership.id, **self._fields(membership))
        except IntegrityError as exc:
            raise self._conflict_for(membership.status) from exc
        return self._to_domain(model)

    @sync_to_async
    def transition(self, membership: Membership, expected_status: MembershipStatus) -> bool:
        fields = self._fields(membership)
        fields.pop("organization_id")
        try:
            with transaction.atomic():
                updated = MembershipModel.objects.filter(
                    id=membership.id, status=expected_status.value
                ).update(updated_at=timezone.now(), **fields)
        except IntegrityError as exc:
            raise AlreadyMemberError() from exc
        return updated == 1

    @sync_to_async
    def find_by_id(self, membership_id: uuid.UUID) -> Optional[Membership]:
        try:
            return self._to_domain(MembershipModel.objects.get(id=membership_id))
        except MembershipModel.DoesNotExist:
            return None

    @sync_to_async
    def find_active(self, organization_id: uuid.UUID, identity_id: int) -> Optional[Membership]:
        model = MembershipModel.objects.filter(
            organization_id=organization_id, identity_id=identity_id, status="active"
        ).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_inactive(
        self, organization_id: uuid.UUID, identity_id: int
    ) -> Optional[Membership]:
        model = (
            MembershipModel.objects.filter(
                organization_id=organization_id, identity_id=identity_id, status="inactive"
            )
            .order_by("-removed_at")
            .first()
        )
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_pending(self, organization_id: uuid.UUID, email: str) -> Optional[Membership]:
        model = MembershipModel.objects.filter(
            organization_id=organization_id, email=email, status="pending"
        ).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_pending_by_email(self, email: str) -> List[Membership]:
        models = MembershipModel.objects.filter(email=email, status="pending")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def list_for_organization(self, organization_id: uuid.UUID) -> List[Membership]:
        models = MembershipModel.objects.filter(organization_id=organization_id)
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def has_active_membership_elsewhere(
        self, identity_id: int, exclude_organization_id: uuid.UUID
    ) -> bool:
        return (
            MembershipModel.objects.filter(identity_id=identity_id, status="active")
            .exclude(organization_id=exclude_organization_id)
            .exists()
        )
