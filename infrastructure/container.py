"""
Dependency Injection Container
================================

Simple service locator for the order engine's collaborators. Services and
views ask the container instead of constructing adapters themselves, so tests
can swap in fakes through ``configure_for_testing``.

Usage:
    from infrastructure.container import container

    service = container.order_service()
    bus = container.event_bus()
"""

import logging
from typing import Optional

from .events import EventBus, get_event_bus

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for the marketplace order engine.

    Implements lazy initialization and caching of service instances.
    Singleton: every ``ServiceContainer()`` call returns the same object.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._event_bus: Optional[EventBus] = None

            # Domain collaborators
            self._catalog_lookup = None
            self._order_repository = None
            self._order_validator = None
            self._order_service = None

            self._initialized = True
            logger.info("Service container initialized")

    def event_bus(self) -> EventBus:
        """
        Get the event bus (backend from settings.INFRASTRUCTURE).

        Returns:
            EventBus implementation (cached)
        """
        if self._event_bus is None:
            self._event_bus = get_event_bus()
            logger.debug(f"Using event bus: {type(self._event_bus).__name__}")

        return self._event_bus

    def catalog_lookup(self):
        """Get CatalogLookup instance."""
        if self._catalog_lookup is None:
            from marketplace.catalog.domain.services import DjangoCatalogLookup

            self._catalog_lookup = DjangoCatalogLookup()
            logger.debug("Created DjangoCatalogLookup")
        return self._catalog_lookup

    def order_repository(self):
        """Get OrderStore instance."""
        if self._order_repository is None:
            from marketplace.ordering.infra import DjangoOrderRepository

            self._order_repository = DjangoOrderRepository()
            logger.debug("Created DjangoOrderRepository")
        return self._order_repository

    def order_validator(self):
        """Get OrderValidator instance."""
        if self._order_validator is None:
            from marketplace.ordering.domain.services import OrderValidator

            self._order_validator = OrderValidator(catalog_lookup=self.catalog_lookup())
            logger.debug("Created OrderValidator")
        return self._order_validator

    def order_service(self):
        """Get OrderService instance."""
        if self._order_service is None:
            from marketplace.ordering.domain.services import OrderService

            # OrderService depends on every collaborator above
            self._order_service = OrderService(
                catalog_lookup=self.catalog_lookup(),
                order_repository=self.order_repository(),
                validator=self.order_validator(),
                event_bus=self.event_bus(),
            )
            logger.debug("Created OrderService")
        return self._order_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._event_bus = None
        self._catalog_lookup = None
        self._order_repository = None
        self._order_validator = None
        self._order_service = None
        logger.info("Service container reset")

    def configure_for_testing(self, catalog_lookup=None, order_repository=None, event_bus=None):
        """
        Configure container with test doubles.

        Any collaborator left as None is built lazily as usual. Without an
        explicit bus an in-memory one is used, so nothing reaches Redis.
        """
        from .events import InMemoryEventBus

        self.reset()
        self._event_bus = event_bus or InMemoryEventBus()
        self._catalog_lookup = catalog_lookup
        self._order_repository = order_repository
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


def get_order_service():
    """Get OrderService from global container."""
    return container.order_service()
