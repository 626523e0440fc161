import logging

from infrastructure.events import get_event_bus


logger = logging.getLogger(__name__)


def handle_order_placed(event_data):
    """Handle order.placed event: tell the seller a new order is waiting."""
    payload = event_data.get("payload", {})
    order_id = payload.get("order_id")
    logger.info(
        f"[Marketplace Listener] Order placed: {order_id}. "
        f"Notify seller {payload.get('seller_id')}: {payload.get('item_count')} items, total {payload.get('total')}"
    )


def handle_order_status_changed(event_data):
    """Handle order.status_changed event: tell the counter-party of the actor."""
    payload = event_data.get("payload", {})
    order_id = payload.get("order_id")
    actor_id = payload.get("actor_id")
    recipient_id = payload.get("buyer_id") if actor_id == payload.get("seller_id") else payload.get("seller_id")

    logger.info(
        f"[Marketplace Listener] Order {order_id} moved "
        f"{payload.get('from_status')} -> {payload.get('to_status')}. Notify user {recipient_id}"
    )


def register_marketplace_listeners(event_bus=None):
    """Register all marketplace event listeners."""
    event_bus = event_bus or get_event_bus()
    event_bus.subscribe("order.placed", handle_order_placed)
    event_bus.subscribe("order.status_changed", handle_order_status_changed)
    logger.info("Marketplace event listeners registered")
