"""
Event Bus Tests
===============

Unit tests for the Redis and in-memory event bus backends.
"""

import json
from unittest.mock import MagicMock

import pytest
import redis
from django.test import override_settings

from infrastructure.events import InMemoryEventBus, RedisEventBus, create_event_bus


@pytest.mark.unit
class TestInMemoryEventBus:
    def setup_method(self):
        self.bus = InMemoryEventBus()

    def test_publish_dispatches_envelope_to_subscribers(self):
        received = []
        self.bus.subscribe("order.placed", received.append)

        self.bus.publish("order.placed", {"order_id": "o1"})

        assert len(received) == 1
        assert received[0]["event_type"] == "order.placed"
        assert received[0]["payload"] == {"order_id": "o1"}
        assert "occurred_at" in received[0]

    def test_only_matching_subscribers_run(self):
        received = []
        self.bus.subscribe("order.status_changed", received.append)

        self.bus.publish("order.placed", {})

        assert received == []
        assert len(self.bus.events_of("order.placed")) == 1

    def test_failing_handler_does_not_stop_others(self):
        received = []

        def explode(event):
            raise RuntimeError("boom")

        self.bus.subscribe("order.placed", explode)
        self.bus.subscribe("order.placed", received.append)

        self.bus.publish("order.placed", {"order_id": "o1"})

        assert len(received) == 1

    def test_clear(self):
        self.bus.publish("order.placed", {})
        self.bus.clear()

        assert self.bus.published == []


@pytest.mark.unit
class TestRedisEventBus:
    def setup_method(self):
        self.client = MagicMock()
        self.bus = RedisEventBus(redis_url="redis://test:6379/0", client=self.client)

    def test_publish_sends_json_envelope_on_event_channel(self):
        self.bus.publish("order.placed", {"order_id": "o1", "total": "20.00"})

        channel, body = self.client.publish.call_args[0]
        assert channel == "events.order.placed"
        message = json.loads(body)
        assert message["event_type"] == "order.placed"
        assert message["payload"] == {"order_id": "o1", "total": "20.00"}

    def test_publish_failure_is_contained(self):
        self.client.publish.side_effect = redis.ConnectionError("down")

        self.bus.publish("order.placed", {"order_id": "o1"})

        self.client.publish.assert_called_once()

    def test_handle_message_dispatches_to_handlers(self):
        received = []
        self.bus.subscribe("order.placed", received.append)
        envelope = {"event_type": "order.placed", "occurred_at": "2024-01-01T00:00:00", "payload": {"order_id": "o1"}}

        self.bus._handle_message({"type": "message", "data": json.dumps(envelope)})

        assert received == [envelope]

    def test_handle_message_ignores_garbage(self):
        received = []
        self.bus.subscribe("order.placed", received.append)

        self.bus._handle_message({"type": "message", "data": "not json"})

        assert received == []


@pytest.mark.unit
class TestCreateEventBus:
    def test_memory_backend(self):
        assert isinstance(create_event_bus("memory"), InMemoryEventBus)

    @override_settings(INFRASTRUCTURE={"EVENT_BUS_BACKEND": "memory"})
    def test_backend_from_settings(self):
        assert isinstance(create_event_bus(), InMemoryEventBus)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_event_bus("kafka")
