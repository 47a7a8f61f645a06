"""
Pytest configuration and shared fixtures.
"""

import uuid
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from billing.infrastructure.repositories.django_reconciliation_store import (
    DjangoReconciliationStore,
)
from billing.ports.billing_provider import BillingProvider, SubscriptionResult
from licenses.infrastructure.models import LicenseLedgerEntry
from licenses.infrastructure.repositories.django_ledger_repository import DjangoLedgerRepository
from licenses.infrastructure.repositories.django_notification_repository import (
    DjangoNotificationRepository,
)
from licenses.infrastructure.repositories.django_renewal_history_repository import (
    DjangoRenewalHistoryRepository,
)
from memberships.domain.services import MembershipLifecycleManager
from memberships.infrastructure.identity.django_identity_provider import DjangoIdentityProvider
from memberships.infrastructure.models import Membership as MembershipModel
from memberships.infrastructure.repositories.django_membership_repository import (
    DjangoMembershipRepository,
)
from organizations.infrastructure.models import Organization as OrganizationModel
from organizations.infrastructure.repositories.django_organization_repository import (
    DjangoOrganizationRepository,
)


class FakeBillingProvider(BillingProvider):
    """In-memory billing provider that records every request."""

    def __init__(self, subscription_ref="sub_fake"):
        self.subscription_ref = subscription_ref
        self.requests = []
        self.error = None

    async def create_or_modify_subscription(
        self, subscription_ref, line_items, proration_mode, custom_data=None
    ):
        self.requests.append(
            {
                "subscription_ref": subscription_ref,
                "line_items": list(line_items),
                "proration_mode": proration_mode,
                "custom_data": dict(custom_data or {}),
            }
        )
        if self.error is not None:
            raise self.error
        return SubscriptionResult(
            subscription_ref=subscription_ref or self.subscription_ref,
            next_billing_date=timezone.now() + timedelta(days=365),
        )

    async def preview_price(self, line_items):
        raise NotImplementedError


@pytest.fixture
def fake_billing_provider():
    return FakeBillingProvider()


@pytest.fixture
def ledger_repository():
    """Fixture for LedgerRepository."""
    return DjangoLedgerRepository()


@pytest.fixture
def membership_repository():
    """Fixture for MembershipRepository."""
    return DjangoMembershipRepository()


@pytest.fixture
def organization_repository():
    """Fixture for OrganizationRepository."""
    return DjangoOrganizationRepository()


@pytest.fixture
def notification_repository():
    return DjangoNotificationRepository()


@pytest.fixture
def renewal_history_repository():
    return DjangoRenewalHistoryRepository()


@pytest.fixture
def identity_provider():
    return DjangoIdentityProvider()


@pytest.fixture
def reconciliation_store():
    return DjangoReconciliationStore()


@pytest.fixture
def lifecycle_manager(membership_repository, ledger_repository, identity_provider):
    """Fixture for MembershipLifecycleManager backed by the database."""
    return MembershipLifecycleManager(
        membership_repository=membership_repository,
        ledger_repository=ledger_repository,
        identity_provider=identity_provider,
    )


@pytest.fixture
def make_user(db):
    """Factory for identities; the username is the email."""

    def _make_user(email=None, password="s3cret-pass"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        return get_user_model().objects.create_user(
            username=email, email=email, password=password
        )

    return _make_user


@pytest.fixture
def make_organization(db, make_user):
    """
    Factory for an organization with an active admin owner.

    Pass ``total_seats`` to give it a ledger; the owner's seat is counted.
    """

    def _make_organization(
        owner=None,
        total_seats=None,
        used_seats=1,
        expires_in_days=365,
        is_trial=False,
        is_personal_trial=False,
        trial_expires_at=None,
        subscription_ref="sub_test",
    ):
        owner = owner or make_user()
        now = timezone.now()
        if is_trial and trial_expires_at is None:
            trial_expires_at = now + timedelta(days=14)
        organization = OrganizationModel.objects.create(
            name=f"Org {uuid.uuid4().hex[:6]}",
            owner=owner,
            is_trial=is_trial,
            trial_expires_at=trial_expires_at,
            is_personal_trial=is_personal_trial,
        )
        MembershipModel.objects.create(
            organization=organization,
            identity=owner,
            email=owner.email,
            role="admin",
            status="active",
            invited_at=now,
            accepted_at=now,
        )
        if total_seats is not None:
            LicenseLedgerEntry.objects.create(
                organization=organization,
                total_seats=total_seats,
                used_seats=used_seats,
                expires_at=now + timedelta(days=expires_in_days),
                subscription_ref=subscription_ref,
                last_renewed_at=now,
            )
        return organization

    return _make_organization


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()
