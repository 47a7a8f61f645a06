"""
Tests for MembershipLifecycleManager seat accounting.
"""

import pytest
from asgiref.sync import async_to_sync
from django.utils import timezone

from core.domain.exceptions import (
    AlreadyInvitedError,
    AlreadyMemberError,
    LedgerNotFoundError,
    LicenseExpiredError,
    NoPendingInvitationError,
    NotAnActiveMemberError,
    SeatLimitExceededError,
    ValidationError,
)
from core.domain.value_objects import MembershipRole, MembershipStatus
from licenses.infrastructure import ledger_operations
from memberships.infrastructure.models import Membership as MembershipModel


def _invite(manager, organization, email, role=MembershipRole.MEMBER):
    return async_to_sync(manager.invite)(organization.id, email, role, timezone.now())


def _used(organization):
    return ledger_operations.find(organization.id).used_seats


@pytest.mark.django_db
class TestInvite:
    """Tests for MembershipLifecycleManager.invite."""

    def test_unknown_email_gets_pending_invitation(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=3)

        membership = _invite(lifecycle_manager, organization, "New.Person@Example.com")

        assert membership.status == MembershipStatus.PENDING
        assert membership.email == "new.person@example.com"
        assert membership.identity_id is None
        assert _used(organization) == 1

    def test_known_identity_is_activated_and_consumes_seat(
        self, lifecycle_manager, make_organization, make_user
    ):
        organization = make_organization(total_seats=3)
        user = make_user("known@example.com")

        membership = _invite(lifecycle_manager, organization, "known@example.com")

        assert membership.status == MembershipStatus.ACTIVE
        assert membership.identity_id == user.pk
        assert _used(organization) == 2

    def test_no_free_seat(self, lifecycle_manager, make_organization, make_user):
        organization = make_organization(total_seats=1)
        make_user("full@example.com")

        with pytest.raises(SeatLimitExceededError):
            _invite(lifecycle_manager, organization, "full@example.com")
        assert _used(organization) == 1

    def test_pending_invitations_also_need_a_free_seat(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=1)

        with pytest.raises(SeatLimitExceededError):
            _invite(lifecycle_manager, organization, "nobody@example.com")

    def test_requires_a_license(self, lifecycle_manager, make_organization):
        organization = make_organization()

        with pytest.raises(LedgerNotFoundError):
            _invite(lifecycle_manager, organization, "someone@example.com")

    def test_rejected_after_grace_period(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=5, expires_in_days=-45)

        with pytest.raises(LicenseExpiredError):
            _invite(lifecycle_manager, organization, "late@example.com")

    def test_allowed_during_grace_period(self, lifecycle_manager, make_organization, make_user):
        organization = make_organization(total_seats=5, expires_in_days=-5)
        make_user("grace@example.com")

        membership = _invite(lifecycle_manager, organization, "grace@example.com")

        assert membership.status == MembershipStatus.ACTIVE

    def test_duplicate_pending_invitation(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=3)
        _invite(lifecycle_manager, organization, "twice@example.com")

        with pytest.raises(AlreadyInvitedError):
            _invite(lifecycle_manager, organization, "TWICE@example.com")

    def test_already_active_member(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=3)

        with pytest.raises(AlreadyMemberError):
            _invite(lifecycle_manager, organization, organization.owner.email)
        assert _used(organization) == 1

    def test_malformed_email(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=3)

        with pytest.raises(ValidationError):
            _invite(lifecycle_manager, organization, "no-at-sign")


@pytest.mark.django_db
class TestAcceptAndRemove:
    """Tests for accept and remove transitions."""

    def test_accept_consumes_seat(self, lifecycle_manager, make_organization, make_user):
        organization = make_organization(total_seats=3)
        _invite(lifecycle_manager, organization, "joiner@example.com")
        user = make_user("joiner@example.com")

        membership = async_to_sync(lifecycle_manager.accept)(
            user.pk, "joiner@example.com", timezone.now()
        )

        assert membership.status == MembershipStatus.ACTIVE
        assert membership.identity_id == user.pk
        assert _used(organization) == 2

    def test_accept_without_free_seat_leaves_invitation_pending(
        self, lifecycle_manager, make_organization, make_user, membership_repository
    ):
        organization = make_organization(total_seats=2)
        _invite(lifecycle_manager, organization, "first@example.com")
        make_user("walkin@example.com")
        _invite(lifecycle_manager, organization, "walkin@example.com")
        user = make_user("first@example.com")

        with pytest.raises(SeatLimitExceededError):
            async_to_sync(lifecycle_manager.accept)(user.pk, "first@example.com", timezone.now())

        pending = async_to_sync(membership_repository.find_pending)(
            organization.id, "first@example.com"
        )
        assert pending is not None
        assert _used(organization) == 2

    def test_accept_without_invitation(self, lifecycle_manager, make_user):
        user = make_user("uninvited@example.com")

        with pytest.raises(NoPendingInvitationError):
            async_to_sync(lifecycle_manager.accept)(
                user.pk, "uninvited@example.com", timezone.now()
            )

    def test_accept_with_several_invitations_needs_organization(
        self, lifecycle_manager, make_organization, make_user
    ):
        first = make_organization(total_seats=3)
        second = make_organization(total_seats=3)
        _invite(lifecycle_manager, first, "popular@example.com")
        _invite(lifecycle_manager, second, "popular@example.com")
        user = make_user("popular@example.com")

        with pytest.raises(ValidationError):
            async_to_sync(lifecycle_manager.accept)(user.pk, "popular@example.com", timezone.now())

        membership = async_to_sync(lifecycle_manager.accept)(
            user.pk, "popular@example.com", timezone.now(), second.id
        )
        assert membership.organization_id == second.id
        assert _used(first) == 1
        assert _used(second) == 2

    def test_remove_releases_seat(self, lifecycle_manager, make_organization, make_user):
        organization = make_organization(total_seats=3)
        user = make_user("leaver@example.com")
        _invite(lifecycle_manager, organization, "leaver@example.com")

        removed = async_to_sync(lifecycle_manager.remove)(user.pk, organization.id, timezone.now())

        assert removed.status == MembershipStatus.INACTIVE
        assert removed.removed_at is not None
        assert _used(organization) == 1

        with pytest.raises(NotAnActiveMemberError):
            async_to_sync(lifecycle_manager.remove)(user.pk, organization.id, timezone.now())
        assert _used(organization) == 1

    def test_reinvite_reactivates_historical_record(
        self, lifecycle_manager, make_organization, make_user
    ):
        organization = make_organization(total_seats=3)
        user = make_user("returning@example.com")
        original = _invite(lifecycle_manager, organization, "returning@example.com")
        async_to_sync(lifecycle_manager.remove)(user.pk, organization.id, timezone.now())

        returned = _invite(
            lifecycle_manager, organization, "returning@example.com", MembershipRole.ADMIN
        )

        assert returned.id == original.id
        assert returned.status == MembershipStatus.ACTIVE
        assert returned.role == MembershipRole.ADMIN
        assert returned.removed_at is None
        assert _used(organization) == 2


@pytest.mark.django_db
class TestConcurrentInvites:
    """Invites that pass the read checks on a snapshot taken before a competing write."""

    def test_last_seat_taken_after_capacity_check(
        self, monkeypatch, lifecycle_manager, make_organization, make_user
    ):
        organization = make_organization(total_seats=2)
        make_user("winner@example.com")
        make_user("loser@example.com")
        snapshot = ledger_operations.find(organization.id)
        _invite(lifecycle_manager, organization, "winner@example.com")

        async def stale_ledger(organization_id):
            return snapshot

        monkeypatch.setattr(
            lifecycle_manager.ledger_repository, "find_by_organization", stale_ledger
        )

        with pytest.raises(SeatLimitExceededError):
            _invite(lifecycle_manager, organization, "loser@example.com")

        assert _used(organization) == 2
        assert not MembershipModel.objects.filter(
            organization_id=organization.id, email="loser@example.com"
        ).exists()

    def test_second_pending_invitation_hits_uniqueness(
        self, monkeypatch, lifecycle_manager, make_organization
    ):
        organization = make_organization(total_seats=3)
        _invite(lifecycle_manager, organization, "racer@example.com")

        async def no_pending_yet(organization_id, email):
            return None

        monkeypatch.setattr(lifecycle_manager.membership_repository, "find_pending", no_pending_yet)

        with pytest.raises(AlreadyInvitedError):
            _invite(lifecycle_manager, organization, "racer@example.com")

        assert _used(organization) == 1
        assert (
            MembershipModel.objects.filter(
                organization_id=organization.id, email="racer@example.com", status="pending"
            ).count()
            == 1
        )

    def test_duplicate_activation_hands_the_seat_back(
        self, monkeypatch, lifecycle_manager, make_organization, make_user
    ):
        organization = make_organization(total_seats=3)
        user = make_user("double@example.com")
        _invite(lifecycle_manager, organization, "double@example.com")

        async def not_active_yet(organization_id, identity_id):
            return None

        monkeypatch.setattr(lifecycle_manager.membership_repository, "find_active", not_active_yet)

        with pytest.raises(AlreadyMemberError):
            _invite(lifecycle_manager, organization, "double@example.com")

        assert _used(organization) == 2
        memberships = MembershipModel.objects.filter(organization_id=organization.id, identity=user)
        assert memberships.count() == 1
