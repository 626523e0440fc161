import uuid

from django.conf import settings
from django.db import models

from marketplace.catalog.domain.models.catalog import Product
from marketplace.ordering.domain.entities import OrderStatus


class OrderRecord(models.Model):
    """
    Persistent row for the Order aggregate.

    Only status, updated_at and version change after creation; every other
    column is written once by the Order Store.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    buyer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")
    seller = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="sales")

    status = models.CharField(max_length=20, choices=OrderStatus.choices(), default=OrderStatus.PENDING.value)
    total = models.DecimalField(max_digits=12, decimal_places=2)

    # Optimistic concurrency token, bumped on every status update
    version = models.PositiveIntegerField(default=0)

    # Timestamps are owned by the domain, not auto_now
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        db_table = "marketplace_order"
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["buyer", "-created_at"], name="order_buyer_created_idx"),
            models.Index(fields=["seller", "-created_at"], name="order_seller_created_idx"),
            models.Index(fields=["status"], name="order_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=~models.Q(buyer=models.F("seller")), name="order_buyer_not_seller"),
            models.CheckConstraint(condition=models.Q(total__gt=0), name="order_total_positive"),
        ]

    def __str__(self):
        return f"Order {str(self.id)[:8]} ({self.status})"


class OrderItemRecord(models.Model):
    id = models.UUIDField(primary_key=True, editable=False)
    order = models.ForeignKey(OrderRecord, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="order_items")

    # Position of the item in the original request
    position = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField()
    # Price snapshot at time of purchase
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "marketplace_orderitem"
        ordering = ["order", "position"]
        app_label = "marketplace"
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="orderitem_quantity_positive"),
            models.CheckConstraint(condition=models.Q(unit_price__gt=0), name="orderitem_unit_price_positive"),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.product_id} in order {str(self.order_id)[:8]}"
