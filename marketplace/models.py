from marketplace.catalog.domain.models import Product, Store
from marketplace.ordering.domain.models import OrderItemRecord, OrderRecord


__all__ = [
    "Store",
    "Product",
    "OrderRecord",
    "OrderItemRecord",
]
