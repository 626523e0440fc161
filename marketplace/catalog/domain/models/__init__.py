from .catalog import Product, Store


__all__ = [
    "Product",
    "Store",
]
