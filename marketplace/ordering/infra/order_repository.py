"""
Relational Order Store.

Concurrency discipline: every order row carries a ``version``. A status update
is a single conditional UPDATE on (id, version) that bumps the version, so two
requests that read the same version cannot both write. The loser gets a
ConflictError and is expected to re-read and retry at the caller's discretion.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F

from marketplace.ordering.domain.entities import Order, OrderItem, OrderStatus
from marketplace.ordering.domain.errors import ConflictError, NotFoundError
from marketplace.ordering.domain.models import OrderItemRecord, OrderRecord
from marketplace.ordering.domain.repositories import OrderStore, Pagination

logger = logging.getLogger(__name__)


def _to_entity(record: OrderRecord) -> Order:
    items = tuple(
        OrderItem(
            id=str(item.id),
            product_id=str(item.product_id),
            quantity=item.quantity,
            unit_price=item.unit_price,
        )
        for item in record.items.all()
    )
    return Order(
        id=str(record.id),
        buyer_id=str(record.buyer_id),
        seller_id=str(record.seller_id),
        total=record.total,
        status=OrderStatus(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
        items=items,
        version=record.version,
    )


class DjangoOrderRepository(OrderStore):
    """Order Store backed by the OrderRecord / OrderItemRecord tables."""

    def create(self, order: Order) -> Order:
        with transaction.atomic():
            record = OrderRecord.objects.create(
                id=order.id,
                buyer_id=order.buyer_id,
                seller_id=order.seller_id,
                status=order.status.value,
                total=order.total,
                version=order.version,
                created_at=order.created_at,
                updated_at=order.updated_at,
            )
            OrderItemRecord.objects.bulk_create(
                [
                    OrderItemRecord(
                        id=item.id,
                        order=record,
                        product_id=item.product_id,
                        position=position,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                    )
                    for position, item in enumerate(order.items)
                ]
            )

        logger.info(f"Persisted order {order.id} with {len(order.items)} items")
        return self.read(order.id)

    def read(self, order_id: str) -> Optional[Order]:
        try:
            record = OrderRecord.objects.prefetch_related("items").get(id=order_id)
        except (OrderRecord.DoesNotExist, DjangoValidationError, ValueError):
            return None
        return _to_entity(record)

    def update(self, order: Order) -> Order:
        with transaction.atomic():
            updated = OrderRecord.objects.filter(id=order.id, version=order.version).update(
                status=order.status.value,
                updated_at=order.updated_at,
                version=F("version") + 1,
            )
            if updated == 0:
                if not OrderRecord.objects.filter(id=order.id).exists():
                    raise NotFoundError(order.id)
                logger.warning(f"Version conflict updating order {order.id} at version {order.version}")
                raise ConflictError(order.id, order.version)

        return replace(order, version=order.version + 1)

    def list_by_buyer(
        self, buyer_id: str, pagination: Pagination, status: Optional[OrderStatus] = None
    ) -> List[Order]:
        return self._page(OrderRecord.objects.filter(buyer_id=buyer_id), pagination, status)

    def list_by_seller(
        self, seller_id: str, pagination: Pagination, status: Optional[OrderStatus] = None
    ) -> List[Order]:
        return self._page(OrderRecord.objects.filter(seller_id=seller_id), pagination, status)

    def count(
        self,
        buyer_id: Optional[str] = None,
        seller_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
    ) -> int:
        queryset = OrderRecord.objects.all()
        if buyer_id is not None:
            queryset = queryset.filter(buyer_id=buyer_id)
        if seller_id is not None:
            queryset = queryset.filter(seller_id=seller_id)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return queryset.count()

    def _page(self, queryset, pagination: Pagination, status: Optional[OrderStatus]) -> List[Order]:
        if status is not None:
            queryset = queryset.filter(status=status.value)

        prefix = "-" if pagination.sort_order == "desc" else ""
        queryset = queryset.order_by(f"{prefix}{pagination.sort_by}", f"{prefix}id").prefetch_related("items")

        records = queryset[pagination.offset : pagination.offset + pagination.page_size]
        return [_to_entity(record) for record in records]
