"""
Domain events base classes and infrastructure.

Domain events represent something that happened in the domain.
They are used for decoupling modules and enabling event-driven architecture.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4


class DomainEvent(ABC):
    """
    Base class for all domain events.

    Subclasses pass the aggregate id to ``__init__`` and then set their
    own payload attributes. ``event_type`` is the subclass name.
    """

    event_type: str = "DomainEvent"

    def __init_subclass__(cls, **kwargs):
        """Automatically set event_type for subclasses."""
        super().__init_subclass__(**kwargs)
        cls.event_type = cls.__name__

    def __init__(
        self,
        aggregate_id: str,
        occurred_at: Optional[datetime] = None,
        event_id: Optional[UUID] = None,
    ):
        self.event_id = event_id or uuid4()
        self.occurred_at = occurred_at or datetime.now(timezone.utc)
        self.aggregate_id = aggregate_id

    def payload(self) -> Dict[str, Any]:
        """Event specific fields, overridden by subclasses."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
            "data": self.payload(),
        }


class EventHandler(ABC):
    """
    Base class for event handlers.

    Event handlers process domain events asynchronously.
    """

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """
        Handle a domain event.

        Args:
            event: The domain event to handle
        """
        pass


class EventBus(ABC):
    """
    Abstract event bus for publishing and subscribing to domain events.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event.

        Args:
            event: The domain event to publish
        """
        pass

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Subscribe to a domain event type.

        Args:
            event_type: The type of event to subscribe to
            handler: The handler to call when event is published
        """
        pass
