"""
Integration tests for the license status, purchase and renewal endpoints.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from billing.ports.billing_provider import ProrationMode
from licenses.infrastructure import ledger_operations
from licenses.infrastructure.models import RenewalHistory


def _license_url(organization, suffix=""):
    return f"/api/v1/organizations/{organization.id}/license{suffix}"


@pytest.mark.django_db
class TestLicenseStatus:
    def test_active_license(self, api_client, make_organization):
        organization = make_organization(total_seats=5, expires_in_days=200)
        api_client.force_authenticate(organization.owner)

        response = api_client.get(_license_url(organization))

        assert response.status_code == 200
        assert response.data["status"] == "active"
        assert response.data["severity"] == "info"
        assert response.data["available_seats"] == 4
        assert response.data["can_add_member"] is True

    def test_grace_period_opens_grace_window(self, api_client, make_organization):
        organization = make_organization(total_seats=5, expires_in_days=-3)
        api_client.force_authenticate(organization.owner)

        response = api_client.get(_license_url(organization))

        assert response.data["status"] == "grace_period"
        assert response.data["can_add_member"] is True
        assert ledger_operations.find(organization.id).grace_period_start is not None

    def test_no_license(self, api_client, make_organization):
        organization = make_organization()
        api_client.force_authenticate(organization.owner)

        response = api_client.get(_license_url(organization))

        assert response.data["status"] == "no_license"
        assert response.data["can_add_member"] is False

    def test_outsider_cannot_read_status(self, api_client, make_organization, make_user):
        organization = make_organization(total_seats=5)
        api_client.force_authenticate(make_user())

        response = api_client.get(_license_url(organization))

        assert response.status_code == 403


@pytest.mark.django_db
class TestChargeEndpoints:
    def test_first_purchase_requests_charge_only(
        self, api_client, make_organization, billing_provider
    ):
        organization = make_organization(is_trial=True, is_personal_trial=True)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _license_url(organization, "/purchase"), {"seats": 5}, format="json"
        )

        assert response.status_code == 202
        assert response.data["renewal_type"] == "new_purchase"
        assert Decimal(response.data["amount"]) == Decimal("1000.00")
        assert response.data["status"] == "pending_confirmation"
        request = billing_provider.requests[0]
        assert request["subscription_ref"] is None
        assert request["line_items"][0].quantity == 5
        assert request["custom_data"]["organization_id"] == str(organization.id)
        assert request["custom_data"]["user_id"] == organization.owner.pk
        assert ledger_operations.find(organization.id) is None

    def test_add_seats_is_prorated(self, api_client, make_organization, billing_provider):
        organization = make_organization(total_seats=5, expires_in_days=180)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _license_url(organization, "/seats"), {"seats": 3}, format="json"
        )

        assert response.status_code == 202
        assert response.data["renewal_type"] == "prorated"
        assert response.data["new_total_seats"] == 8
        assert Decimal(response.data["amount"]) == Decimal("295.89")
        request = billing_provider.requests[0]
        assert request["subscription_ref"] == "sub_test"
        assert request["proration_mode"] == ProrationMode.PRORATED_IMMEDIATELY
        assert request["custom_data"]["prorated"] is True
        assert request["custom_data"]["added_seats"] == 3
        assert ledger_operations.find(organization.id).total_seats == 5

    def test_add_seats_on_expired_license(self, api_client, make_organization, billing_provider):
        organization = make_organization(total_seats=5, expires_in_days=-2)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _license_url(organization, "/seats"), {"seats": 1}, format="json"
        )

        assert response.status_code == 422
        assert billing_provider.requests == []

    def test_renew_in_warning_window_is_early_renewal(
        self, api_client, make_organization, billing_provider
    ):
        organization = make_organization(total_seats=5, expires_in_days=20)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(_license_url(organization, "/renew"), {}, format="json")

        assert response.status_code == 202
        assert response.data["renewal_type"] == "early_renewal"
        assert response.data["new_total_seats"] == 5

    def test_renew_below_usage_is_rejected(
        self, api_client, make_organization, billing_provider
    ):
        organization = make_organization(total_seats=5, used_seats=4)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _license_url(organization, "/renew"), {"seats": 2}, format="json"
        )

        assert response.status_code == 400
        assert response.data["error"]["code"] == "SEATS_BELOW_USAGE"
        assert billing_provider.requests == []

    def test_renew_without_license(self, api_client, make_organization, billing_provider):
        organization = make_organization()
        api_client.force_authenticate(organization.owner)

        response = api_client.post(_license_url(organization, "/renew"), {}, format="json")

        assert response.status_code == 404
        assert response.data["error"]["code"] == "LEDGER_NOT_FOUND"


@pytest.mark.django_db
class TestScheduledChangeAndHistory:
    def test_schedule_change(self, api_client, make_organization):
        organization = make_organization(total_seats=5)
        api_client.force_authenticate(organization.owner)
        effective_at = timezone.now() + timedelta(days=10)

        response = api_client.post(
            _license_url(organization, "/scheduled-change"),
            {"total_seats": 3, "effective_at": effective_at.isoformat(), "note": "downsize"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["scheduled_total_seats"] == 3
        assert response.data["total_seats"] == 5
        assert ledger_operations.find(organization.id).scheduled_change_note == "downsize"

    def test_schedule_change_in_the_past_is_rejected(self, api_client, make_organization):
        organization = make_organization(total_seats=5)
        api_client.force_authenticate(organization.owner)

        response = api_client.post(
            _license_url(organization, "/scheduled-change"),
            {"total_seats": 3, "effective_at": (timezone.now() - timedelta(days=1)).isoformat()},
            format="json",
        )

        assert response.status_code == 400

    def test_history_lists_renewals(self, api_client, make_organization):
        organization = make_organization(total_seats=5)
        now = timezone.now()
        RenewalHistory.objects.create(
            organization=organization,
            renewal_type="new_purchase",
            new_expiry=now + timedelta(days=365),
            seats_before=0,
            seats_after=5,
            amount=Decimal("1000.00"),
            transaction_ref="txn_history",
            actor="service:billing-reconciliation",
            created_at=now,
        )
        api_client.force_authenticate(organization.owner)

        response = api_client.get(_license_url(organization, "/history"))

        assert response.status_code == 200
        assert len(response.data) == 1
        assert response.data[0]["transaction_ref"] == "txn_history"
        assert response.data[0]["seats_after"] == 5
