from abc import ABC, abstractmethod
from typing import Callable


class EventBus(ABC):
    """Publish/subscribe contract for domain events."""

    @abstractmethod
    def publish(self, event_type: str, payload: dict):
        """Publish ``payload`` under ``event_type``. Must not raise on transport failure."""

    @abstractmethod
    def subscribe(self, event_type: str, handler: Callable):
        """Register ``handler`` to receive envelopes of ``event_type``."""
