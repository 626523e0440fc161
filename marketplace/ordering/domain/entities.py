"""
Order aggregate and line items.

Both are immutable values: a status change produces a new Order through
``dataclasses.replace`` and the previous value is left untouched. Items and
total are fixed at creation.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence, Tuple

from django.utils import timezone

from .errors import InvalidOrderError, SelfPurchaseError

MONEY_QUANTUM = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_QUANTUM)


class OrderStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @classmethod
    def choices(cls):
        return [(status.value, status.value.title()) for status in cls]


@dataclass(frozen=True)
class OrderItem:
    id: str
    product_id: str
    quantity: int
    unit_price: Decimal

    @classmethod
    def create(cls, product_id: str, quantity: int, unit_price: Decimal) -> "OrderItem":
        if quantity <= 0:
            raise InvalidOrderError("Quantity must be greater than 0")
        if unit_price <= 0:
            raise InvalidOrderError("Unit price must be greater than 0")

        return cls(id=str(uuid.uuid4()), product_id=str(product_id), quantity=quantity, unit_price=to_money(unit_price))

    @property
    def total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class Order:
    """
    Order aggregate root.

    Attributes:
        id: Opaque order identifier (UUID4 string)
        buyer_id: Identity of the purchasing user
        seller_id: Identity of the single seller every item belongs to
        total: Sum of item totals, fixed at creation
        status: Current lifecycle status
        created_at: Creation timestamp
        updated_at: Bumped on every transition
        items: Line items, fixed at creation
        version: Persistence version used for optimistic concurrency
    """

    id: str
    buyer_id: str
    seller_id: str
    total: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    items: Tuple[OrderItem, ...] = field(default_factory=tuple)
    version: int = 0

    @classmethod
    def create(
        cls, buyer_id: str, seller_id: str, items: Sequence[OrderItem], now: Optional[datetime] = None
    ) -> "Order":
        buyer_id, seller_id = str(buyer_id), str(seller_id)
        if buyer_id == seller_id:
            raise SelfPurchaseError(buyer_id)
        if not items:
            raise InvalidOrderError("Order must have at least one item")

        total = to_money(sum((item.total for item in items), Decimal("0")))
        if total <= 0:
            raise InvalidOrderError("Order total must be greater than 0")

        now = now or timezone.now()
        return cls(
            id=str(uuid.uuid4()),
            buyer_id=buyer_id,
            seller_id=seller_id,
            total=total,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
            items=tuple(items),
        )

    def transition(self, new_status: OrderStatus, actor, now: Optional[datetime] = None) -> "Order":
        """
        Move the order to ``new_status`` on behalf of ``actor``.

        Raises:
            InvalidTransitionError: (status, new_status) is not a legal edge
            UnauthorizedError: the actor may not take this edge
        """
        from .state_machine import check_transition

        check_transition(self, new_status, actor)
        return replace(self, status=new_status, updated_at=now or timezone.now())

    def involves(self, user_id: str) -> bool:
        return str(user_id) in (self.buyer_id, self.seller_id)
