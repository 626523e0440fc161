from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest
from django.test import TestCase
from django.utils import timezone

from marketplace.models import OrderItemRecord, OrderRecord
from marketplace.ordering.domain.entities import Order, OrderItem, OrderStatus
from marketplace.ordering.domain.errors import ConflictError, NotFoundError
from marketplace.ordering.domain.repositories import Pagination
from marketplace.ordering.infra import DjangoOrderRepository
from marketplace.tests.factories import ProductFactory, UserFactory


@pytest.mark.integration
class DjangoOrderRepositoryTest(TestCase):
    def setUp(self):
        self.repository = DjangoOrderRepository()
        self.buyer = UserFactory()
        self.product_a = ProductFactory(price=Decimal("10.00"))
        self.product_b = ProductFactory(price=Decimal("2.50"), store=self.product_a.store)
        self.seller = self.product_a.store.owner

    def build_order(self, quantity=1, now=None) -> Order:
        items = [
            OrderItem.create(str(self.product_a.id), quantity, self.product_a.price),
            OrderItem.create(str(self.product_b.id), 2, self.product_b.price),
        ]
        return Order.create(str(self.buyer.pk), str(self.seller.pk), items, now=now)

    def test_create_persists_order_and_items_in_order(self):
        order = self.build_order()

        stored = self.repository.create(order)

        self.assertEqual(stored, order)
        self.assertEqual(OrderRecord.objects.count(), 1)
        positions = list(OrderItemRecord.objects.values_list("product_id", "position"))
        self.assertEqual(positions, [(self.product_a.id, 0), (self.product_b.id, 1)])

    def test_read_round_trips_domain_values(self):
        order = self.repository.create(self.build_order(quantity=3))

        loaded = self.repository.read(order.id)

        self.assertEqual(loaded.status, OrderStatus.PENDING)
        self.assertEqual(loaded.total, Decimal("35.00"))
        self.assertEqual(loaded.buyer_id, str(self.buyer.pk))
        self.assertEqual([item.unit_price for item in loaded.items], [Decimal("10.00"), Decimal("2.50")])
        self.assertEqual(loaded.version, 0)

    def test_read_unknown_or_malformed_id(self):
        self.assertIsNone(self.repository.read("00000000-0000-0000-0000-000000000000"))
        self.assertIsNone(self.repository.read("not-a-uuid"))

    def test_update_writes_status_and_bumps_version(self):
        order = self.repository.create(self.build_order())
        paid = replace(order, status=OrderStatus.PAID, updated_at=timezone.now())

        updated = self.repository.update(paid)

        self.assertEqual(updated.version, 1)
        record = OrderRecord.objects.get(id=order.id)
        self.assertEqual(record.status, "PAID")
        self.assertEqual(record.version, 1)
        self.assertEqual(record.total, order.total)

    def test_stale_update_raises_conflict(self):
        order = self.repository.create(self.build_order())
        self.repository.update(replace(order, status=OrderStatus.PAID))

        with self.assertRaises(ConflictError):
            self.repository.update(replace(order, status=OrderStatus.PAID))

        self.assertEqual(OrderRecord.objects.get(id=order.id).version, 1)

    def test_update_missing_order(self):
        with self.assertRaises(NotFoundError):
            self.repository.update(self.build_order())

    def test_list_and_count(self):
        start = timezone.now() - timedelta(days=1)
        for offset in range(3):
            self.repository.create(self.build_order(quantity=offset + 1, now=start + timedelta(minutes=offset)))

        newest_first = self.repository.list_by_buyer(str(self.buyer.pk), Pagination(page=1, page_size=2))
        self.assertEqual([o.total for o in newest_first], [Decimal("35.00"), Decimal("25.00")])

        cheapest = self.repository.list_by_seller(
            str(self.seller.pk), Pagination(page=1, page_size=10, sort_by="total", sort_order="asc")
        )
        self.assertEqual([o.total for o in cheapest], [Decimal("15.00"), Decimal("25.00"), Decimal("35.00")])

        self.assertEqual(self.repository.count(buyer_id=str(self.buyer.pk)), 3)
        self.assertEqual(self.repository.count(seller_id=str(self.buyer.pk)), 0)
        self.assertEqual(self.repository.count(status=OrderStatus.PAID), 0)

    def test_list_filters_by_status(self):
        order = self.repository.create(self.build_order())
        self.repository.create(self.build_order())
        self.repository.update(replace(order, status=OrderStatus.PAID))

        paid = self.repository.list_by_buyer(str(self.buyer.pk), Pagination(), status=OrderStatus.PAID)

        self.assertEqual([o.id for o in paid], [order.id])
