from .order_service import OrderService
from .order_validator import InvalidItem, InvalidReason, ItemRequest, OrderValidator, ValidationResult, ValidItem


__all__ = [
    "OrderService",
    "OrderValidator",
    "ItemRequest",
    "InvalidReason",
    "InvalidItem",
    "ValidItem",
    "ValidationResult",
]
