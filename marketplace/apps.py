import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class MarketplaceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "marketplace"

    def ready(self):
        """
        Wire order event listeners and tracing.
        """
        # Register Event Bus Listeners
        try:
            from infrastructure.events import RedisEventBus, get_event_bus
            from marketplace.infra.events.listeners import register_marketplace_listeners

            event_bus = get_event_bus()
            register_marketplace_listeners(event_bus)

            # Only the Redis backend needs a listener thread; in-memory dispatch is synchronous
            if isinstance(event_bus, RedisEventBus):
                event_bus.start_listening()

        except Exception as e:
            logger.warning(f"Failed to initialize Event Bus listeners: {e}")

        # Initialize OpenTelemetry Tracing
        try:
            from django.conf import settings

            from infrastructure.observability.tracing import setup_tracing

            setup_tracing(
                service_name=getattr(settings, "TRACING_SERVICE_NAME", "bazaar-marketplace"),
                endpoint=getattr(settings, "OTLP_ENDPOINT", None),
                enable=getattr(settings, "TRACING_ENABLED", False),
            )
        except Exception as e:
            logger.warning(f"Failed to initialize OpenTelemetry tracing: {e}")
