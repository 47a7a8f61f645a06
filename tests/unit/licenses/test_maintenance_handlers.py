"""
Tests for scheduled license maintenance.
"""

from datetime import timedelta
from io import StringIO

import pytest
from asgiref.sync import async_to_sync
from django.core.management import call_command
from django.utils import timezone

from billing.ports.billing_provider import ProrationMode
from core.domain.exceptions import ProviderUnavailableError
from core.domain.value_objects import NotificationClass
from licenses.application.handlers.license_maintenance_handlers import (
    ApplyScheduledLicenseChangesHandler,
    CheckLicenseExpirationsHandler,
)
from licenses.infrastructure import ledger_operations
from licenses.infrastructure.models import LicenseNotification


@pytest.mark.django_db
class TestCheckLicenseExpirations:
    """Tests for CheckLicenseExpirationsHandler."""

    def _check(self, ledger_repository, notification_repository, **kwargs):
        handler = CheckLicenseExpirationsHandler(ledger_repository, notification_repository)
        return async_to_sync(handler.handle)(timezone.now(), **kwargs)

    def test_warning_is_recorded_once_per_day(
        self, ledger_repository, notification_repository, make_organization
    ):
        organization = make_organization(total_seats=2, expires_in_days=30)
        make_organization(total_seats=2, expires_in_days=200)

        first = self._check(ledger_repository, notification_repository)
        second = self._check(ledger_repository, notification_repository)

        assert first.checked == 2
        assert [record.notification_class for record in first.notified] == [
            NotificationClass.THIRTY_DAY
        ]
        assert second.notified == []
        assert LicenseNotification.objects.filter(organization=organization).count() == 1

    def test_dry_run_records_nothing(
        self, ledger_repository, notification_repository, make_organization
    ):
        make_organization(total_seats=2, expires_in_days=7)

        result = self._check(ledger_repository, notification_repository, dry_run=True)

        assert len(result.notified) == 1
        assert LicenseNotification.objects.count() == 0

    def test_opens_grace_window_once(
        self, ledger_repository, notification_repository, make_organization
    ):
        organization = make_organization(total_seats=2, expires_in_days=-3)

        first = self._check(ledger_repository, notification_repository)
        second = self._check(ledger_repository, notification_repository)

        entry = ledger_operations.find(organization.id)
        assert first.grace_windows_opened == 1
        assert second.grace_windows_opened == 0
        assert entry.grace_period_start == entry.expires_at
        assert entry.grace_period_end == entry.expires_at + timedelta(days=30)


@pytest.mark.django_db
class TestApplyScheduledLicenseChanges:
    """Tests for ApplyScheduledLicenseChangesHandler."""

    def _apply(self, ledger_repository, billing_provider):
        handler = ApplyScheduledLicenseChangesHandler(ledger_repository, billing_provider)
        return async_to_sync(handler.handle)(timezone.now())

    def test_applies_due_change_through_provider(
        self, ledger_repository, fake_billing_provider, make_organization
    ):
        organization = make_organization(total_seats=2)
        ledger_operations.schedule_change(organization.id, 6, timezone.now() - timedelta(minutes=1))

        applied = self._apply(ledger_repository, fake_billing_provider)

        entry = ledger_operations.find(organization.id)
        assert applied == 1
        assert entry.total_seats == 6
        assert entry.scheduled_total_seats is None
        request = fake_billing_provider.requests[0]
        assert request["subscription_ref"] == "sub_test"
        assert [item.quantity for item in request["line_items"]] == [6]
        assert request["proration_mode"] == ProrationMode.PRORATED_IMMEDIATELY
        assert request["custom_data"] == {
            "organization_id": str(organization.id),
            "scheduled_change": True,
        }

    def test_provider_failure_keeps_schedule(
        self, ledger_repository, fake_billing_provider, make_organization
    ):
        organization = make_organization(total_seats=2)
        ledger_operations.schedule_change(
            organization.id, 50, timezone.now() - timedelta(minutes=1)
        )
        fake_billing_provider.error = ProviderUnavailableError()

        applied = self._apply(ledger_repository, fake_billing_provider)

        entry = ledger_operations.find(organization.id)
        assert applied == 0
        assert entry.total_seats == 2
        assert entry.scheduled_total_seats == 50

    def test_retried_after_provider_recovers(
        self, ledger_repository, fake_billing_provider, make_organization
    ):
        organization = make_organization(total_seats=2)
        ledger_operations.schedule_change(organization.id, 4, timezone.now() - timedelta(minutes=1))
        fake_billing_provider.error = ProviderUnavailableError()
        self._apply(ledger_repository, fake_billing_provider)
        fake_billing_provider.error = None

        applied = self._apply(ledger_repository, fake_billing_provider)

        assert applied == 1
        assert len(fake_billing_provider.requests) == 2
        assert ledger_operations.find(organization.id).total_seats == 4

    def test_change_below_used_seats_is_kept(
        self, ledger_repository, fake_billing_provider, make_organization
    ):
        organization = make_organization(total_seats=5, used_seats=4)
        ledger_operations.schedule_change(organization.id, 2, timezone.now() - timedelta(minutes=1))

        applied = self._apply(ledger_repository, fake_billing_provider)

        entry = ledger_operations.find(organization.id)
        assert applied == 0
        assert entry.total_seats == 5
        assert entry.scheduled_total_seats == 2
        assert fake_billing_provider.requests == []


@pytest.mark.django_db
class TestMaintenanceCommands:
    """Tests for the maintenance management commands."""

    def test_check_license_expirations_command(self, make_organization):
        make_organization(total_seats=2, expires_in_days=14)
        out = StringIO()

        call_command("check_license_expirations", stdout=out)

        assert "14_day" in out.getvalue()
        assert LicenseNotification.objects.count() == 1

    def test_apply_scheduled_license_changes_command(
        self, monkeypatch, fake_billing_provider, make_organization
    ):
        monkeypatch.setattr(
            "core.management.commands.apply_scheduled_license_changes.get_billing_provider",
            lambda: fake_billing_provider,
        )
        organization = make_organization(total_seats=2)
        ledger_operations.schedule_change(organization.id, 3, timezone.now() - timedelta(hours=1))

        call_command("apply_scheduled_license_changes", stdout=StringIO())

        assert ledger_operations.find(organization.id).total_seats == 3

    def test_cleanup_trial_organizations_dry_run(self):
        out = StringIO()

        call_command("cleanup_trial_organizations", "--dry-run", stdout=out)

        assert "Found 0 trial organization(s)" in out.getvalue()
