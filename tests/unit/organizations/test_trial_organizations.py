"""
Tests for personal trial organization provisioning and cleanup.
"""

from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync
from django.utils import timezone

from core.domain.exceptions import NotAuthorizedError, ValidationError
from core.domain.value_objects import Actor
from licenses.infrastructure.models import LicenseLedgerEntry
from memberships.infrastructure.models import Membership as MembershipModel
from organizations.application.commands.provision_trial_organization import (
    ProvisionTrialOrganizationCommand,
)
from organizations.application.handlers.trial_organization_handlers import (
    CleanupTrialOrganizationsHandler,
    ProvisionTrialOrganizationHandler,
)
from organizations.domain.organization import TRIAL_PERIOD_DAYS, Organization
from organizations.infrastructure.models import Organization as OrganizationModel

SERVICE = Actor.service("identity-provider")


class TestOrganizationEntity:
    """Tests for the Organization entity."""

    def test_personal_trial(self):
        now = timezone.now()

        organization = Organization.create_personal_trial(7, "ann@example.com", now)

        assert organization.is_trial is True
        assert organization.is_personal_trial is True
        assert organization.name == "Personal Trial - ann@example.com"
        assert organization.trial_expires_at == now + timedelta(days=TRIAL_PERIOD_DAYS)
        assert organization.is_trial_expired(now) is False
        assert organization.is_trial_expired(now + timedelta(days=15)) is True

    def test_promote_keeps_identity(self):
        organization = Organization.create_personal_trial(7, "ann@example.com", timezone.now())

        promoted = organization.promote(timezone.now())

        assert promoted.id == organization.id
        assert promoted.is_trial is False

    def test_name_required(self):
        with pytest.raises(ValueError):
            Organization.create("  ", owner_identity_id=1)


@pytest.mark.django_db
class TestProvisionTrialOrganization:
    """Tests for ProvisionTrialOrganizationHandler."""

    def _handle(self, organization_repository, identity_provider, identity_id, actor=SERVICE):
        handler = ProvisionTrialOrganizationHandler(organization_repository, identity_provider)
        return async_to_sync(handler.handle)(
            ProvisionTrialOrganizationCommand(actor=actor, identity_id=identity_id)
        )

    def test_creates_trial_with_owner_admin(
        self, organization_repository, identity_provider, make_user
    ):
        user = make_user("first@example.com")

        dto = self._handle(organization_repository, identity_provider, user.pk)

        assert dto.created is True
        assert dto.is_trial is True
        membership = MembershipModel.objects.get(organization_id=dto.id)
        assert membership.identity_id == user.pk
        assert membership.role == "admin"
        assert membership.status == "active"

    def test_second_call_returns_existing(
        self, organization_repository, identity_provider, make_user
    ):
        user = make_user()

        first = self._handle(organization_repository, identity_provider, user.pk)
        second = self._handle(organization_repository, identity_provider, user.pk)

        assert second.created is False
        assert second.id == first.id
        assert OrganizationModel.objects.filter(owner=user).count() == 1

    def test_concurrent_first_sessions_share_one_trial(
        self, monkeypatch, organization_repository, identity_provider, make_user
    ):
        user = make_user()

        async def not_found_yet(identity_id):
            return None

        # both callbacks read before either one has written
        monkeypatch.setattr(
            organization_repository, "find_personal_trial_for_owner", not_found_yet
        )

        first = self._handle(organization_repository, identity_provider, user.pk)
        second = self._handle(organization_repository, identity_provider, user.pk)

        assert first.created is True
        assert second.created is False
        assert second.id == first.id
        assert OrganizationModel.objects.filter(owner=user, is_personal_trial=True).count() == 1
        assert MembershipModel.objects.filter(identity=user).count() == 1

    def test_unknown_identity(self, organization_repository, identity_provider):
        with pytest.raises(ValidationError):
            self._handle(organization_repository, identity_provider, 987654)

    def test_user_actor_rejected(self, organization_repository, identity_provider, make_user):
        user = make_user()

        with pytest.raises(NotAuthorizedError):
            self._handle(organization_repository, identity_provider, user.pk, Actor.user(user.pk))


@pytest.mark.django_db
class TestCleanupTrialOrganizations:
    """Tests for CleanupTrialOrganizationsHandler."""

    def _abandoned_trial(self, make_organization, make_user, expired_days_ago=10):
        owner = make_user()
        trial = make_organization(
            owner=owner,
            is_trial=True,
            is_personal_trial=True,
            trial_expires_at=timezone.now() - timedelta(days=expired_days_ago),
        )
        # the owner has since joined a paid organization
        paid = make_organization(total_seats=5)
        MembershipModel.objects.create(
            organization=paid,
            identity=owner,
            email=owner.email,
            role="member",
            status="active",
            invited_at=timezone.now(),
            accepted_at=timezone.now(),
        )
        return trial

    def _cleanup(self, organization_repository, dry_run=False, margin_days=7):
        handler = CleanupTrialOrganizationsHandler(organization_repository)
        return async_to_sync(handler.handle)(
            Actor.service("trial-cleanup"), timezone.now(), margin_days, dry_run=dry_run
        )

    def test_removes_abandoned_trial(self, organization_repository, make_organization, make_user):
        trial = self._abandoned_trial(make_organization, make_user)

        removed = self._cleanup(organization_repository)

        assert [organization.id for organization in removed] == [trial.id]
        assert not OrganizationModel.objects.filter(id=trial.id).exists()

    def test_dry_run_keeps_everything(self, organization_repository, make_organization, make_user):
        trial = self._abandoned_trial(make_organization, make_user)

        removed = self._cleanup(organization_repository, dry_run=True)

        assert [organization.id for organization in removed] == [trial.id]
        assert OrganizationModel.objects.filter(id=trial.id).exists()

    def test_margin_protects_recent_trials(
        self, organization_repository, make_organization, make_user
    ):
        self._abandoned_trial(make_organization, make_user, expired_days_ago=3)

        assert self._cleanup(organization_repository) == []

    def test_trial_owner_without_other_organization_is_kept(
        self, organization_repository, make_organization
    ):
        make_organization(
            is_trial=True,
            is_personal_trial=True,
            trial_expires_at=timezone.now() - timedelta(days=30),
        )

        assert self._cleanup(organization_repository) == []

    def test_trial_with_ledger_is_kept(self, organization_repository, make_organization, make_user):
        trial = self._abandoned_trial(make_organization, make_user)
        LicenseLedgerEntry.objects.create(
            organization=trial,
            total_seats=1,
            used_seats=1,
            expires_at=timezone.now() + timedelta(days=365),
        )

        assert self._cleanup(organization_repository) == []

    def test_user_actor_rejected(self, organization_repository, make_user):
        handler = CleanupTrialOrganizationsHandler(organization_repository)

        with pytest.raises(NotAuthorizedError):
            async_to_sync(handler.handle)(Actor.user(make_user().pk), timezone.now(), 7)
