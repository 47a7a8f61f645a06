"""
In-memory event bus implementation.

Handlers run in-process; events are side-channel notifications
(audit logging, expiry warnings) and never carry ledger state.
"""

import asyncio
import logging
from typing import Dict, List, Type

from core.domain.events import DomainEvent, EventBus, EventHandler

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-memory event bus implementation.

    Handlers for one event run concurrently. A failing handler is logged
    and does not prevent the others from running.
    """

    def __init__(self):
        """Initialize the event bus."""
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribe to a domain event type.

        Args:
            event_type: The type of event to subscribe to
            handler: The handler to call when event is published
        """
        handlers = self._handlers.setdefault(event_type, [])
        if any(type(existing) is type(handler) for existing in handlers):
            return
        handlers.append(handler)
        logger.debug("Subscribed %s to %s", handler.__class__.__name__, event_type.__name__)

    def clear(self) -> None:
        """Drop all subscriptions."""
        self._handlers.clear()

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event.

        Args:
            event: The domain event to publish
        """
        handlers = self._handlers.get(type(event), [])

        if not handlers:
            logger.debug("No handlers registered for %s", event.event_type)
            return

        logger.info("Publishing %s to %d handler(s)", event.event_type, len(handlers))
        await asyncio.gather(
            *(self._handle_event(handler, event) for handler in handlers),
            return_exceptions=True,
        )

    async def _handle_event(self, handler: EventHandler, event: DomainEvent) -> None:
        try:
            await handler.handle(event)
        except Exception:
            logger.error(
                "Error handling %s with %s",
                event.event_type,
                handler.__class__.__name__,
                exc_info=True,
            )
            raise


# Global event bus instance
event_bus = InMemoryEventBus()
