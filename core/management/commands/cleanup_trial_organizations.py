"""
Django management command to remove abandoned personal trial organizations.

A personal trial is removed only after its trial window plus a margin,
only if it never got a license, and only if its owner is an active
member of another organization.
"""
from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from core.domain.value_objects import Actor
from organizations.application.handlers.trial_organization_handlers import (
    CleanupTrialOrganizationsHandler,
)
from organizations.infrastructure.repositories.django_organization_repository import (
    DjangoOrganizationRepository,
)


class Command(BaseCommand):
    """Command to clean up abandoned personal trial organizations."""

    help = "Delete personal trial organizations whose owners joined another organization"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list candidates without deleting them",
        )
        parser.add_argument(
            "--margin-days",
            type=int,
            default=None,
            help="Days after trial expiry before removal (default: TRIAL_CLEANUP_MARGIN_DAYS)",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        margin_days = options["margin_days"]
        if margin_days is None:
            margin_days = settings.TRIAL_CLEANUP_MARGIN_DAYS

        handler = CleanupTrialOrganizationsHandler(DjangoOrganizationRepository())
        removed = async_to_sync(handler.handle)(
            Actor.service("trial-cleanup"), timezone.now(), margin_days, dry_run=dry_run
        )

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - No organizations deleted"))
        for organization in removed:
            self.stdout.write(f"  - {organization.id} {organization.name}")
        verb = "Found" if dry_run else "Removed"
        self.stdout.write(self.style.SUCCESS(f"{verb} {len(removed)} trial organization(s)"))
