from .order_repository import DjangoOrderRepository


__all__ = ["DjangoOrderRepository"]
