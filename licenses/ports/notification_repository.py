"""
Notification record repository port (interface).
"""
import uuid
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from core.domain.value_objects import NotificationClass
from licenses.domain.notification import NotificationRecord


class NotificationRepository(ABC):
    """Stores which expiry warnings were already surfaced."""

    @abstractmethod
    async def record(self, record: NotificationRecord) -> bool:
        """
        Store a notification marker.

        Returns:
            True if newly recorded, False if (org, ledger, class, date) existed
        """
        pass

    @abstractmethod
    async def last_notified_on(
        self,
        organization_id: uuid.UUID,
        ledger_id: uuid.UUID,
        notification_class: NotificationClass,
    ) -> Optional[date]:
        pass
