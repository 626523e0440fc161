from django.conf import settings
from rest_framework import serializers

from marketplace.ordering.domain.actors import resolve_actor
from marketplace.ordering.domain.entities import OrderStatus
from marketplace.ordering.domain.state_machine import allowed_transitions


class OrderItemSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    product_id = serializers.UUIDField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class OrderSerializer(serializers.Serializer):
    """
    Read-only view of an Order aggregate.

    Pass ``caller_id`` in the context to include the statuses the caller may
    move the order to next.
    """

    id = serializers.UUIDField(read_only=True)
    buyer_id = serializers.CharField(read_only=True)
    seller_id = serializers.CharField(read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    status = serializers.CharField(source="status.value", read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    available_transitions = serializers.SerializerMethodField()

    def get_available_transitions(self, obj) -> list:
        caller_id = self.context.get("caller_id")
        if caller_id is None:
            return []
        return [status.value for status in allowed_transitions(obj, resolve_actor(obj, caller_id))]


class CreateOrderItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(help_text="Product UUID")
    quantity = serializers.IntegerField(min_value=1, help_text="Units to buy (>= 1)")


class CreateOrderRequestSerializer(serializers.Serializer):
    """Request body for creating an order"""

    items = CreateOrderItemSerializer(many=True, help_text="Items to buy; all must belong to one seller")

    def validate_items(self, value):
        max_items = settings.ORDERS.get("MAX_ITEMS_PER_ORDER", 50)
        if not value:
            raise serializers.ValidationError("Order must contain at least one item")
        if len(value) > max_items:
            raise serializers.ValidationError(f"Order may contain at most {max_items} items")
        return value


class StatusChoiceField(serializers.ChoiceField):
    """Order status choice matched case-insensitively ('paid' == 'PAID')."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.strip().upper()
        return super().to_internal_value(data)


class UpdateOrderStatusSerializer(serializers.Serializer):
    """Request body for a status change"""

    status = StatusChoiceField(choices=[status.value for status in OrderStatus], help_text="Target status")
