"""
Django implementation of NotificationRepository port.
"""
import uuid
from datetime import date
from typing import Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction

from core.domain.value_objects import NotificationClass
from licenses.domain.notification import NotificationRecord
from licenses.infrastructure.models import LicenseNotification
from licenses.ports.notification_repository import NotificationRepository


class DjangoNotificationRepository(NotificationRepository):
    """Relies on the unique (org, ledger, class, date) key for idempotency."""

    @sync_to_async
    def record(self, record: NotificationRecord) -> bool:
        try:
            with transaction.atomic():
                LicenseNotification.objects.create(
                    organization_id=record.organization_id,
                    ledger_id=record.ledger_id,
                    notification_class=record.notification_class.value,
                    notified_on=record.notified_on,
                    days_remaining=record.days_remaining,
                )
        except IntegrityError:
            return False
        return True

    @sync_to_async
    def last_notified_on(
        self,
        organization_id: uuid.UUID,
        ledger_id: uuid.UUID,
        notification_class: NotificationClass,
    ) -> Optional[date]:
        latest = (
            LicenseNotification.objects.filter(
                organization_id=organization_id,
                ledger_id=ledger_id,
                notification_class=notification_class.value,
            )
            .order_by("-notified_on")
            .values_list("notified_on", flat=True)
            .first()
        )
        return latest
