"""
Event handlers for domain events.

These handlers process domain events for side effects: the structured
audit trail and the expiry warnings surfaced to administrators. Delivery
of e-mail is left to whatever consumes the log stream.
"""
import logging

from core.domain.events import DomainEvent, EventHandler
from licenses.domain.events import (
    LicenseExpiryWarning,
    LicensePurchased,
    LicenseRenewed,
    LicenseScheduledChangeApplied,
    LicenseSeatsSynchronized,
)
from memberships.domain.events import MemberActivated, MemberInvited, MemberRemoved
from organizations.domain.events import TrialOrganizationProvisioned, TrialOrganizationRemoved

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("core.audit")

AUDITED_EVENTS = (
    TrialOrganizationProvisioned,
    TrialOrganizationRemoved,
    MemberInvited,
    MemberActivated,
    MemberRemoved,
    LicensePurchased,
    LicenseRenewed,
    LicenseSeatsSynchronized,
    LicenseScheduledChangeApplied,
    LicenseExpiryWarning,
)


class AuditLogEventHandler(EventHandler):
    """Writes every domain event to the audit log stream."""

    async def handle(self, event: DomainEvent) -> None:
        audit_logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra=event.to_dict(),
        )


class ExpiryWarningEventHandler(EventHandler):
    """
    Surfaces license expiry warnings.

    Warnings for the expired class are logged at error level so alerting
    rules can page on them.
    """

    async def handle(self, event: DomainEvent) -> None:
        if not isinstance(event, LicenseExpiryWarning):
            return
        log = logger.error if event.notification_class == "expired" else logger.warning
        log(
            "License for organization %s: %s (%d day(s) remaining)",
            event.organization_id,
            event.notification_class,
            event.days_remaining,
            extra={
                "organization_id": str(event.organization_id),
                "notification_class": event.notification_class,
                "days_remaining": event.days_remaining,
                "expires_at": event.expires_at.isoformat(),
            },
        )


def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    audit_handler = AuditLogEventHandler()
    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, audit_handler)
    event_bus.subscribe(LicenseExpiryWarning, ExpiryWarningEventHandler())
    logger.info("Event handlers registered")
