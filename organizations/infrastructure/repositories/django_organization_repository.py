"""
Django implementation of OrganizationRepository port.
"""
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import Exists, OuterRef

from memberships.domain.membership import Membership
from memberships.infrastructure.models import Membership as MembershipModel
from organizations.domain.organization import Organization
from organizations.infrastructure.models import Organization as OrganizationModel
from organizations.ports.organization_repository import OrganizationRepository


class DjangoOrganizationRepository(OrganizationRepository):
    """Django ORM implementation of OrganizationRepository."""

    @staticmethod
    def _to_domain(model: OrganizationModel) -> Organization:
        return Organization(
            id=model.id,
            name=model.name,
            owner_identity_id=model.owner_id,
            is_trial=model.is_trial,
            trial_expires_at=model.trial_expires_at,
            is_personal_trial=model.is_personal_trial,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @sync_to_async
    def create_with_owner(
        self, organization: Organization, owner_membership: Membership
    ) -> Tuple[Organization, bool]:
        """
        Create an organization and its owner membership atomically.

        A concurrent first session for the same identity loses on
        ``unique_personal_trial_per_owner`` and gets the winner's organization.

        Args:
            organization: Organization entity
            owner_membership: Active admin membership for the owner

        Returns:
            Tuple of (organization, created)
        """
        try:
            model = self._insert_with_owner(organization, owner_membership)
        except IntegrityError:
            if not organization.is_personal_trial:
                raise
            existing = OrganizationModel.objects.filter(
                owner_id=organization.owner_identity_id, is_personal_trial=True
            ).first()
            if existing is None:
                raise
            return self._to_domain(existing), False
        return self._to_domain(model), True

    @staticmethod
    def _insert_with_owner(
        organization: Organization, owner_membership: Membership
    ) -> OrganizationModel:
        with transaction.atomic():
            model = OrganizationModel.objects.create(
                id=organization.id,
                name=organization.name,
                owner_id=organization.owner_identity_id,
                is_trial=organization.is_trial,
                trial_expires_at=organization.trial_expires_at,
                is_personal_trial=organization.is_personal_trial,
            )
            MembershipModel.objects.create(
                id=owner_membership.id,
                organization=model,
                identity_id=owner_membership.identity_id,
                email=owner_membership.email,
                role=owner_membership.role.value,
                status=owner_membership.status.value,
                invited_at=owner_membership.invited_at,
                accepted_at=owner_membership.accepted_at,
            )
        return model

    @sync_to_async
    def find_by_id(self, organization_id: uuid.UUID) -> Optional[Organization]:
        try:
            return self._to_domain(OrganizationModel.objects.get(id=organization_id))
        except OrganizationModel.DoesNotExist:
            return None

    @sync_to_async
    def find_personal_trial_for_owner(self, identity_id: int) -> Optional[Organization]:
        model = OrganizationModel.objects.filter(
            owner_id=identity_id, is_personal_trial=True
        ).first()
        return self._to_domain(model) if model else None

    @staticmethod
    def _abandoned_trials():
        owner_active_elsewhere = MembershipModel.objects.filter(
            identity_id=OuterRef("owner_id"), status="active"
        ).exclude(organization_id=OuterRef("pk"))
        return OrganizationModel.objects.filter(
            is_personal_trial=True,
            is_trial=True,
            owner__isnull=False,
            ledger__isnull=True,
        ).filter(Exists(owner_active_elsewhere))

    @sync_to_async
    def find_cleanup_candidates(self, cutoff: datetime) -> List[Organization]:
        models = self._abandoned_trials().filter(trial_expires_at__lt=cutoff)
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def delete_trial(self, organization_id: uuid.UUID) -> bool:
        with transaction.atomic():
            deleted, _ = self._abandoned_trials().filter(id=organization_id).delete()
        return deleted > 0
