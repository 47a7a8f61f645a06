"""
Django management command to surface license expiry warnings.

Run daily (cron or celery beat). Each warning class is recorded at most
once per organization, ledger and day, so reruns are harmless.
"""
import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand
from django.utils import timezone

from licenses.application.handlers.license_maintenance_handlers import (
    CheckLicenseExpirationsHandler,
)
from licenses.infrastructure.repositories.django_ledger_repository import DjangoLedgerRepository
from licenses.infrastructure.repositories.django_notification_repository import (
    DjangoNotificationRepository,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to check ledgers for due expiry warnings."""

    help = "Send 30/14/7/1-day and expired license warnings"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - report warnings without recording them",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        handler = CheckLicenseExpirationsHandler(
            ledger_repository=DjangoLedgerRepository(),
            notification_repository=DjangoNotificationRepository(),
        )
        result = async_to_sync(handler.handle)(timezone.now(), dry_run=dry_run)

        self.stdout.write(f"Checked {result.checked} license(s)")
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - No warnings recorded"))
        for record in result.notified:
            self.stdout.write(
                f"  - {record.organization_id}: {record.notification_class.value} "
                f"({record.days_remaining} day(s) remaining)"
            )
        if result.grace_windows_opened:
            self.stdout.write(f"Opened {result.grace_windows_opened} grace window(s)")
        self.stdout.write(self.style.SUCCESS(f"{len(result.notified)} warning(s) due"))
