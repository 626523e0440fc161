from .order_serializers import (
    CreateOrderItemSerializer,
    CreateOrderRequestSerializer,
    OrderItemSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)


__all__ = [
    "CreateOrderItemSerializer",
    "CreateOrderRequestSerializer",
    "OrderItemSerializer",
    "OrderSerializer",
    "UpdateOrderStatusSerializer",
]
