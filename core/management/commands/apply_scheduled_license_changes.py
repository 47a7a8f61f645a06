"""
Django management command to apply scheduled seat changes that are due.
"""
from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand
from django.utils import timezone

from billing.infrastructure.http_billing_provider import get_billing_provider
from licenses.application.handlers.license_maintenance_handlers import (
    ApplyScheduledLicenseChangesHandler,
)
from licenses.infrastructure.repositories.django_ledger_repository import DjangoLedgerRepository


class Command(BaseCommand):
    """Command to apply due scheduled license changes."""

    help = "Apply scheduled total-seat changes whose effective time has passed"

    def handle(self, *args, **options):
        handler = ApplyScheduledLicenseChangesHandler(
            ledger_repository=DjangoLedgerRepository(),
            billing_provider=get_billing_provider(),
        )
        applied = async_to_sync(handler.handle)(timezone.now())
        self.stdout.write(self.style.SUCCESS(f"Applied {applied} scheduled change(s)"))
