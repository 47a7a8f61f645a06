"""
Integration tests for the organization membership endpoints.
"""

import pytest
from django.utils import timezone

from licenses.infrastructure import ledger_operations
from memberships.infrastructure.models import Membership as MembershipModel


def _members_url(organization):
    return f"/api/v1/organizations/{organization.id}/members"


@pytest.mark.django_db
class TestInviteMember:
    def test_known_identity_is_activated(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=3)
        colleague = make_user()
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _members_url(organization), {"email": colleague.email}, format="json"
        )

        assert response.status_code == 201
        assert response.data["status"] == "active"
        assert response.data["identity_id"] == colleague.pk
        assert ledger_operations.find(organization.id).used_seats == 2

    def test_unknown_email_gets_pending_invitation(self, api_client, make_organization):
        organization = make_organization(total_seats=3)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _members_url(organization), {"email": "Newcomer@Example.com"}, format="json"
        )

        assert response.status_code == 201
        assert response.data["status"] == "pending"
        assert response.data["email"] == "newcomer@example.com"
        assert ledger_operations.find(organization.id).used_seats == 1

    def test_full_license_rejects_invite(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=1)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _members_url(organization), {"email": make_user().email}, format="json"
        )

        assert response.status_code == 422
        assert response.data["error"]["code"] == "SEAT_LIMIT_EXCEEDED"

    def test_expired_license_rejects_invite(self, api_client, make_organization):
        organization = make_organization(total_seats=5, expires_in_days=-45)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _members_url(organization), {"email": "late@example.com"}, format="json"
        )

        assert response.status_code == 422
        assert response.data["error"]["code"] == "LICENSE_EXPIRED"

    def test_duplicate_pending_invitation_conflicts(self, api_client, make_organization):
        organization = make_organization(total_seats=3)
        api_client.force_authenticate(organization.owner)
        api_client.post(_members_url(organization), {"email": "dup@example.com"}, format="json")

        response = api_client.post(
            _members_url(organization), {"email": "dup@example.com"}, format="json"
        )

        assert response.status_code == 409
        assert response.data["error"]["code"] == "ALREADY_INVITED"

    def test_non_admin_cannot_invite(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=3)
        member = make_user()
        MembershipModel.objects.create(
            organization=organization,
            identity=member,
            email=member.email,
            status="active",
            invited_at=timezone.now(),
        )
        api_client.force_authenticate(member)

        response = api_client.post(
            _members_url(organization), {"email": "friend@example.com"}, format="json"
        )

        assert response.status_code == 403
        assert response.data["error"]["code"] == "NOT_AUTHORIZED"

    def test_invalid_email_is_rejected(self, api_client, make_organization):
        organization = make_organization(total_seats=3)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(_members_url(organization), {"email": "nope"}, format="json")

        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"

    def test_requires_authentication(self, api_client, make_organization):
        organization = make_organization(total_seats=3)

        response = api_client.post(
            _members_url(organization), {"email": "x@example.com"}, format="json"
        )

        assert response.status_code in (401, 403)


@pytest.mark.django_db
class TestListAndRemoveMembers:
    def test_lists_members(self, api_client, make_organization):
        organization = make_organization(total_seats=3)
        api_client.force_authenticate(organization.owner)
        api_client.post(_members_url(organization), {"email": "p@example.com"}, format="json")

        response = api_client.get(_members_url(organization))

        assert response.status_code == 200
        assert {m["status"] for m in response.data} == {"active", "pending"}

    def test_remove_member_frees_seat(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=3)
        colleague = make_user()
        api_client.force_authenticate(organization.owner)
        api_client.post(_members_url(organization), {"email": colleague.email}, format="json")

        response = api_client.delete(f"{_members_url(organization)}/{colleague.pk}")

        assert response.status_code == 200
        assert response.data["status"] == "inactive"
        assert ledger_operations.find(organization.id).used_seats == 1

    def test_owner_cannot_be_removed(self, api_client, make_organization):
        organization = make_organization(total_seats=3)
        api_client.force_authenticate(organization.owner)

        response = api_client.delete(f"{_members_url(organization)}/{organization.owner.pk}")

        assert response.status_code == 409
        assert response.data["error"]["code"] == "OWNER_REMOVAL_FORBIDDEN"

    def test_removing_non_member_conflicts(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=3)
        stranger = make_user()
        api_client.force_authenticate(organization.owner)

        response = api_client.delete(f"{_members_url(organization)}/{stranger.pk}")

        assert response.status_code == 409
        assert response.data["error"]["code"] == "NOT_AN_ACTIVE_MEMBER"


@pytest.mark.django_db
class TestAcceptInvitation:
    url = "/api/v1/organizations/invitations/accept"

    def test_accepting_consumes_seat(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=3)
        api_client.force_authenticate(organization.owner)
        api_client.post(
            _members_url(organization), {"email": "joiner@example.com"}, format="json"
        )
        joiner = make_user(email="joiner@example.com")
        api_client.force_authenticate(joiner)

        response = api_client.post(self.url, {"email": "joiner@example.com"}, format="json")

        assert response.status_code == 200
        assert response.data["status"] == "active"
        assert response.data["identity_id"] == joiner.pk
        assert ledger_operations.find(organization.id).used_seats == 2

    def test_accept_without_invitation_conflicts(self, api_client, make_user):
        identity = make_user()
        api_client.force_authenticate(identity)

        response = api_client.post(self.url, {"email": identity.email}, format="json")

        assert response.status_code == 409
        assert response.data["error"]["code"] == "NO_PENDING_INVITATION"

    def test_accept_when_seats_ran_out(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=2)
        api_client.force_authenticate(organization.owner)
        api_client.post(_members_url(organization), {"email": "late@example.com"}, format="json")
        api_client.post(_members_url(organization), {"email": make_user().email}, format="json")
        late = make_user(email="late@example.com")
        api_client.force_authenticate(late)

        response = api_client.post(self.url, {"email": "late@example.com"}, format="json")

        assert response.status_code == 422
        assert response.data["error"]["code"] == "SEAT_LIMIT_EXCEEDED"
        assert ledger_operations.find(organization.id).used_seats == 2
