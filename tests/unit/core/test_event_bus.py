"""
Unit tests for the in-memory event bus.
"""

import pytest

from core.domain.events import DomainEvent, EventHandler
from core.infrastructure.events import InMemoryEventBus


class SampleEvent(DomainEvent):
    def __init__(self, aggregate_id="agg-1"):
        super().__init__(aggregate_id=aggregate_id)


class RecordingHandler(EventHandler):
    def __init__(self):
        self.seen = []

    async def handle(self, event):
        self.seen.append(event)


class FailingHandler(EventHandler):
    async def handle(self, event):
        raise RuntimeError("boom")


class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers(self):
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(SampleEvent, handler)

        event = SampleEvent()
        await bus.publish(event)

        assert handler.seen == [event]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self):
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(SampleEvent, FailingHandler())
        bus.subscribe(SampleEvent, handler)

        await bus.publish(SampleEvent())

        assert len(handler.seen) == 1

    def test_subscribing_same_handler_type_twice_is_ignored(self):
        bus = InMemoryEventBus()
        bus.subscribe(SampleEvent, RecordingHandler())
        bus.subscribe(SampleEvent, RecordingHandler())

        assert len(bus._handlers[SampleEvent]) == 1

    def test_event_dict_carries_type_and_payload(self):
        data = SampleEvent("org-1").to_dict()

        assert data["event_type"] == "SampleEvent"
        assert data["aggregate_id"] == "org-1"
        assert data["data"] == {}
