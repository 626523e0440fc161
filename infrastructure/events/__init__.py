import logging

from django.conf import settings

from .event_bus_interface import EventBus
from .memory_event_bus import InMemoryEventBus
from .redis_event_bus import RedisEventBus


logger = logging.getLogger(__name__)

# Singleton instance
_event_bus_instance = None


def create_event_bus(backend: str = None) -> EventBus:
    """
    Build an event bus for the configured backend.

    Args:
        backend: 'redis' or 'memory'. Defaults to settings.INFRASTRUCTURE["EVENT_BUS_BACKEND"].

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = backend or getattr(settings, "INFRASTRUCTURE", {}).get("EVENT_BUS_BACKEND", "redis")
    if backend == "redis":
        return RedisEventBus()
    if backend == "memory":
        return InMemoryEventBus()
    raise ValueError(f"Unsupported event bus backend: {backend!r}. Supported: memory, redis")


def get_event_bus() -> EventBus:
    """Get singleton event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = create_event_bus()
        logger.debug(f"Created event bus: {type(_event_bus_instance).__name__}")
    return _event_bus_instance


def reset_event_bus():
    global _event_bus_instance
    _event_bus_instance = None


__all__ = ["EventBus", "InMemoryEventBus", "RedisEventBus", "create_event_bus", "get_event_bus", "reset_event_bus"]
