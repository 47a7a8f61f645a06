"""
Celery tasks for periodic license maintenance.

Scheduled by celery beat (see ``SeatLicensingService.celery``); each task
mirrors the management command of the same name.
"""
import logging

from asgiref.sync import async_to_sync
from django.conf import settings
from django.db import OperationalError
from django.utils import timezone

from billing.infrastructure.http_billing_provider import get_billing_provider
from core.domain.value_objects import Actor
from licenses.application.handlers.license_maintenance_handlers import (
    ApplyScheduledLicenseChangesHandler,
    CheckLicenseExpirationsHandler,
)
from licenses.infrastructure.repositories.django_ledger_repository import DjangoLedgerRepository
from licenses.infrastructure.repositories.django_notification_repository import (
    DjangoNotificationRepository,
)
from organizations.application.handlers.trial_organization_handlers import (
    CleanupTrialOrganizationsHandler,
)
from organizations.infrastructure.repositories.django_organization_repository import (
    DjangoOrganizationRepository,
)
from SeatLicensingService.celery import app

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def check_license_expirations_task(self):
    """Surface due expiry warnings for every ledger."""
    handler = CheckLicenseExpirationsHandler(
        ledger_repository=DjangoLedgerRepository(),
        notification_repository=DjangoNotificationRepository(),
    )
    try:
        result = async_to_sync(handler.handle)(timezone.now())
    except OperationalError as exc:
        logger.error(f"License expiration check failed: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return {"checked": result.checked, "notified": len(result.notified)}


@app.task(bind=True, max_retries=3)
def apply_scheduled_license_changes_task(self):
    """Apply scheduled seat changes that have come due."""
    handler = ApplyScheduledLicenseChangesHandler(
        ledger_repository=DjangoLedgerRepository(),
        billing_provider=get_billing_provider(),
    )
    try:
        applied = async_to_sync(handler.handle)(timezone.now())
    except OperationalError as exc:
        logger.error(f"Applying scheduled license changes failed: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)
    return {"applied": applied}


@app.task
def cleanup_trial_organizations_task():
    """Remove personal trial organizations abandoned by their owners."""
    handler = CleanupTrialOrganizationsHandler(DjangoOrganizationRepository())
    removed = async_to_sync(handler.handle)(
        Actor.service("trial-cleanup"), timezone.now(), settings.TRIAL_CLEANUP_MARGIN_DAYS
    )
    return {"removed": [str(organization.id) for organization in removed]}
