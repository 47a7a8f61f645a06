"""
App configuration for Seat Licensing Service.
"""
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class SeatLicensingServiceConfig(AppConfig):
    """App configuration for SeatLicensingService."""

    name = "SeatLicensingService"
    verbose_name = "Seat Licensing Service"

    def ready(self):
        """Register domain event handlers once the app registry is loaded."""
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()
        logger.debug("Domain event handlers registered")
