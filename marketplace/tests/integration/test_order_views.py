from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.models import OrderRecord
from marketplace.tests.factories import ProductFactory, StoreFactory, UserFactory


User = get_user_model()


@pytest.mark.integration
class OrderViewIntegrationTest(TestCase):
    def setUp(self):
        container.configure_for_testing()
        self.client = APIClient()

        self.buyer = UserFactory(username="buyer")
        self.store1 = StoreFactory()
        self.store2 = StoreFactory()
        self.seller1 = self.store1.owner
        self.seller2 = self.store2.owner

        self.product1 = ProductFactory(store=self.store1, stock_quantity=5, price=Decimal("10.00"))
        self.product2 = ProductFactory(store=self.store2, stock_quantity=5, price=Decimal("20.00"))

        self.order_list_url = reverse("marketplace:order-list")

    def tearDown(self):
        container.reset()

    def place_order(self, items=None):
        self.client.force_authenticate(user=self.buyer)
        items = items or [{"product_id": str(self.product1.id), "quantity": 2}]
        return self.client.post(self.order_list_url, {"items": items}, format="json")

    def action_url(self, order_id, name):
        return reverse(f"marketplace:order-{name}", kwargs={"pk": order_id})

    def test_create_order_success(self):
        response = self.place_order()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "PENDING")
        self.assertEqual(response.data["total"], "20.00")
        self.assertEqual(response.data["buyer_id"], str(self.buyer.pk))
        self.assertEqual(response.data["seller_id"], str(self.seller1.pk))
        self.assertEqual(len(response.data["items"]), 1)
        self.assertEqual(response.data["items"][0]["unit_price"], "10.00")
        self.assertEqual(response.data["available_transitions"], [])
        self.assertTrue(OrderRecord.objects.filter(id=response.data["id"]).exists())

        # Stock is checked, never decremented
        self.product1.refresh_from_db()
        self.assertEqual(self.product1.stock_quantity, 5)

        placed = container.event_bus().events_of("order.placed")
        self.assertEqual(len(placed), 1)
        self.assertEqual(placed[0]["payload"]["order_id"], response.data["id"])

    def test_create_order_multi_seller(self):
        response = self.place_order(
            [
                {"product_id": str(self.product1.id), "quantity": 2},
                {"product_id": str(self.product2.id), "quantity": 1},
            ]
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "multi_seller")
        self.assertFalse(OrderRecord.objects.exists())

    def test_create_order_insufficient_stock(self):
        response = self.place_order([{"product_id": str(self.product1.id), "quantity": 6}])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "validation_error")
        self.assertIn(str(self.product1.id), response.data["detail"])
        self.assertIn("Available: 5, requested: 6", response.data["detail"])

    def test_create_order_own_product(self):
        own = ProductFactory(store=StoreFactory(owner=self.buyer))

        response = self.place_order([{"product_id": str(own.id), "quantity": 1}])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "self_purchase")

    def test_create_order_request_validation(self):
        for body in ({"items": []}, {"items": [{"product_id": str(self.product1.id), "quantity": 0}]}, {}):
            self.client.force_authenticate(user=self.buyer)
            response = self.client.post(self.order_list_url, body, format="json")

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data["error"], "validation_error")

    def test_unauthenticated_requests_rejected(self):
        response = self.client.get(self.order_list_url)

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_retrieve_for_buyer_seller_and_stranger(self):
        order_id = self.place_order().data["id"]
        detail_url = reverse("marketplace:order-detail", kwargs={"pk": order_id})

        self.client.force_authenticate(user=self.seller1)
        response = self.client.get(detail_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["available_transitions"], ["PAID"])

        self.client.force_authenticate(user=self.seller2)
        response = self.client.get(detail_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "unauthorized")

    def test_retrieve_unknown_order(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.get(
            reverse("marketplace:order-detail", kwargs={"pk": "00000000-0000-0000-0000-000000000000"})
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_full_lifecycle(self):
        order_id = self.place_order().data["id"]

        self.client.force_authenticate(user=self.seller1)
        self.assertEqual(self.client.post(self.action_url(order_id, "pay")).data["status"], "PAID")
        self.assertEqual(self.client.post(self.action_url(order_id, "ship")).data["status"], "SHIPPED")

        self.client.force_authenticate(user=self.buyer)
        response = self.client.post(self.action_url(order_id, "deliver"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "DELIVERED")

        response = self.client.post(self.action_url(order_id, "cancel"))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "invalid_transition")

        record = OrderRecord.objects.get(id=order_id)
        self.assertEqual(record.status, "DELIVERED")
        self.assertEqual(record.version, 3)
        self.assertEqual(len(container.event_bus().events_of("order.status_changed")), 3)

    def test_buyer_cannot_mark_paid(self):
        order_id = self.place_order().data["id"]

        response = self.client.post(self.action_url(order_id, "pay"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "unauthorized")

    def test_patch_status(self):
        order_id = self.place_order().data["id"]
        self.client.force_authenticate(user=self.seller1)

        response = self.client.patch(self.action_url(order_id, "update-status"), {"status": "PAID"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "PAID")

        response = self.client.patch(self.action_url(order_id, "update-status"), {"status": "LOST"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_status_is_case_insensitive(self):
        order_id = self.place_order().data["id"]
        self.client.force_authenticate(user=self.seller1)

        response = self.client.patch(self.action_url(order_id, "update-status"), {"status": "paid"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "PAID")

    def test_list_buyer_and_seller_orders(self):
        self.place_order()
        self.place_order()

        response = self.client.get(self.order_list_url, {"page_size": 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual(response.data["num_pages"], 2)
        self.assertEqual(len(response.data["results"]), 1)

        self.client.force_authenticate(user=self.seller1)
        response = self.client.get(reverse("marketplace:order-seller-orders"), {"status": "PENDING"})
        self.assertEqual(response.data["count"], 2)

        self.client.force_authenticate(user=self.seller2)
        response = self.client.get(reverse("marketplace:order-seller-orders"))
        self.assertEqual(response.data["count"], 0)

    def test_list_rejects_bad_page(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.get(self.order_list_url, {"page": "0"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@pytest.mark.integration
class MetricsEndpointTest(TestCase):
    def test_metrics_exposed_without_auth(self):
        response = APIClient().get(reverse("marketplace:marketplace-metrics"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(b"marketplace_order_status_transitions_total", response.content)
