"""
Tests for membership command handlers and authorization.
"""

import pytest
from asgiref.sync import async_to_sync

from core.domain.exceptions import NotAuthorizedError, OwnerRemovalForbiddenError
from core.domain.value_objects import Actor, MembershipRole
from memberships.application.commands.accept_invitation import AcceptInvitationCommand
from memberships.application.commands.invite_member import InviteMemberCommand
from memberships.application.commands.remove_member import RemoveMemberCommand
from memberships.application.handlers.membership_handlers import (
    AcceptInvitationHandler,
    InviteMemberHandler,
    ListMembersHandler,
    RemoveMemberHandler,
)


@pytest.mark.django_db
class TestMembershipHandlers:
    """Tests for membership handlers."""

    def test_admin_invites(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=3)
        command = InviteMemberCommand(
            actor=Actor.user(organization.owner_id),
            organization_id=organization.id,
            email="invitee@example.com",
        )

        dto = async_to_sync(InviteMemberHandler(lifecycle_manager).handle)(command)

        assert dto.status == "pending"
        assert dto.role == "member"

    def test_member_cannot_invite(self, lifecycle_manager, make_organization, make_user):
        organization = make_organization(total_seats=3)
        member = make_user("plain@example.com")
        async_to_sync(InviteMemberHandler(lifecycle_manager).handle)(
            InviteMemberCommand(
                actor=Actor.user(organization.owner_id),
                organization_id=organization.id,
                email="plain@example.com",
            )
        )

        with pytest.raises(NotAuthorizedError):
            async_to_sync(InviteMemberHandler(lifecycle_manager).handle)(
                InviteMemberCommand(
                    actor=Actor.user(member.pk),
                    organization_id=organization.id,
                    email="other@example.com",
                )
            )

    def test_service_actor_cannot_run_admin_commands(self, lifecycle_manager, make_organization):
        organization = make_organization(total_seats=3)

        with pytest.raises(NotAuthorizedError):
            async_to_sync(InviteMemberHandler(lifecycle_manager).handle)(
                InviteMemberCommand(
                    actor=Actor.service("billing-reconciliation"),
                    organization_id=organization.id,
                    email="x@example.com",
                    role=MembershipRole.ADMIN,
                )
            )

    def test_accept_requires_matching_email(self, lifecycle_manager, make_organization, make_user):
        organization = make_organization(total_seats=3)
        async_to_sync(lifecycle_manager.invite)(
            organization.id, "target@example.com", MembershipRole.MEMBER, organization.created_at
        )
        impostor = make_user("impostor@example.com")

        with pytest.raises(NotAuthorizedError):
            async_to_sync(AcceptInvitationHandler(lifecycle_manager).handle)(
                AcceptInvitationCommand(actor=Actor.user(impostor.pk), email="target@example.com")
            )

    def test_owner_cannot_be_removed(
        self, lifecycle_manager, organization_repository, make_organization
    ):
        organization = make_organization(total_seats=3)
        handler = RemoveMemberHandler(lifecycle_manager, organization_repository)

        with pytest.raises(OwnerRemovalForbiddenError):
            async_to_sync(handler.handle)(
                RemoveMemberCommand(
                    actor=Actor.user(organization.owner_id),
                    organization_id=organization.id,
                    identity_id=organization.owner_id,
                )
            )

    def test_list_members_requires_membership(
        self, membership_repository, make_organization, make_user
    ):
        organization = make_organization(total_seats=3)
        outsider = make_user()
        handler = ListMembersHandler(membership_repository)

        members = async_to_sync(handler.handle)(Actor.user(organization.owner_id), organization.id)
        assert [member.identity_id for member in members] == [organization.owner_id]

        with pytest.raises(NotAuthorizedError):
            async_to_sync(handler.handle)(Actor.user(outsider.pk), organization.id)
