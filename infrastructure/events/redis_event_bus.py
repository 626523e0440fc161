import json
import logging
import threading
from typing import Callable

import redis
from django.conf import settings
from django.utils import timezone

from .event_bus_interface import EventBus


logger = logging.getLogger(__name__)


class RedisEventBus(EventBus):
    """Redis pub/sub implementation of event bus."""

    def __init__(self, redis_url: str = None, client: redis.Redis = None):
        self.redis_url = redis_url or getattr(settings, "REDIS_URL", "redis://localhost:6379/0")
        self.redis_client = client or redis.from_url(self.redis_url)
        self._subscribers = {}
        self._listening = False

    def publish(self, event_type: str, payload: dict):
        """Publish event to Redis channel."""
        message = {"event_type": event_type, "occurred_at": timezone.now().isoformat(), "payload": payload}
        channel = f"events.{event_type}"
        try:
            self.redis_client.publish(channel, json.dumps(message, default=str))
            logger.info(f"Published event: {event_type}")
        except redis.RedisError as e:
            # Event publishing should not break business logic
            logger.error(f"Failed to publish event {event_type}: {str(e)}")

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to event channel."""
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.info(f"Registered handler for event: {event_type}")

    def start_listening(self):
        """Start listening to subscribed channels (background thread)."""
        if self._listening or not self._subscribers:
            return

        def listen():
            channels = [f"events.{et}" for et in self._subscribers.keys()]
            try:
                pubsub = self.redis_client.pubsub()
                pubsub.subscribe(*channels)
                self._listening = True
                logger.info(f"EventBus listening on: {channels}")

                for message in pubsub.listen():
                    if message["type"] == "message":
                        self._handle_message(message)
            except redis.RedisError as e:
                logger.error(f"EventBus listener crashed: {e}")
                self._listening = False

        thread = threading.Thread(target=listen, daemon=True)
        thread.start()

    def _handle_message(self, message):
        """Decode an envelope and hand it to every subscribed handler."""
        try:
            data = json.loads(message["data"])
            event_type = data["event_type"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to decode event message: {str(e)}")
            return

        for handler in self._subscribers.get(event_type, []):
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Handler error for {event_type}: {str(e)}", exc_info=True)
