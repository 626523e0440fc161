from .order import OrderItemRecord, OrderRecord


__all__ = [
    "OrderRecord",
    "OrderItemRecord",
]
