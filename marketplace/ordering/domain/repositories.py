"""
Order Store Interface
=====================

Abstract contract for persisting and retrieving orders. The order engine
depends only on this interface; DjangoOrderRepository is the relational
implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from .entities import Order, OrderStatus

SORT_FIELDS = ("created_at", "updated_at", "total")
SORT_ORDERS = ("asc", "desc")
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Pagination:
    """
    Page request for order listings.

    Attributes:
        page: 1-based page number
        page_size: Orders per page (1..MAX_PAGE_SIZE)
        sort_by: One of SORT_FIELDS
        sort_order: 'asc' or 'desc'
    """

    page: int = 1
    page_size: int = 20
    sort_by: str = "created_at"
    sort_order: str = "desc"

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        if self.sort_by not in SORT_FIELDS:
            raise ValueError(f"sort_by must be one of: {', '.join(SORT_FIELDS)}")
        if self.sort_order not in SORT_ORDERS:
            raise ValueError("sort_order must be 'asc' or 'desc'")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class OrderStore(ABC):
    """
    Abstract interface for order persistence.

    Concrete implementations:
        - DjangoOrderRepository: relational store with optimistic versioning
    """

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Persist a new order with its items and return the stored value."""

    @abstractmethod
    def read(self, order_id: str) -> Optional[Order]:
        """Return the order or None if it does not exist."""

    @abstractmethod
    def update(self, order: Order) -> Order:
        """
        Persist a status change.

        ``order.version`` must be the version that was read; the stored
        version is bumped on success.

        Raises:
            NotFoundError: the order does not exist
            ConflictError: the stored version differs from ``order.version``
        """

    @abstractmethod
    def list_by_buyer(
        self, buyer_id: str, pagination: Pagination, status: Optional[OrderStatus] = None
    ) -> List[Order]:
        """Orders placed by ``buyer_id``."""

    @abstractmethod
    def list_by_seller(
        self, seller_id: str, pagination: Pagination, status: Optional[OrderStatus] = None
    ) -> List[Order]:
        """Orders sold by ``seller_id``."""

    @abstractmethod
    def count(
        self,
        buyer_id: Optional[str] = None,
        seller_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
    ) -> int:
        """Number of orders matching every given filter."""
