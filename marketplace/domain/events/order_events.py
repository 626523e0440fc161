from dataclasses import dataclass

from .base import DomainEvent


@dataclass
class OrderPlacedEvent(DomainEvent):
    """Event: Order placed."""

    def __init__(self, order):
        super().__init__(
            event_type="order.placed",
            payload={
                "order_id": order.id,
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
                "total": str(order.total),
                "item_count": len(order.items),
            },
        )


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """Event: Order moved from one status to another."""

    def __init__(self, order, from_status, actor_id: str):
        super().__init__(
            event_type="order.status_changed",
            payload={
                "order_id": order.id,
                "from_status": from_status.value,
                "to_status": order.status.value,
                "actor_id": str(actor_id),
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
            },
        )
