"""
Response serializers for API documentation.

These describe response bodies for drf-spectacular only; views build the
payloads themselves.
"""

from rest_framework import serializers

from marketplace.ordering.api.serializers import OrderSerializer


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    error = serializers.CharField(help_text="Error code identifier (e.g. invalid_transition)")
    detail = serializers.CharField(help_text="Human-readable error message")


# ===== Order Response Serializers =====


class OrderListResponseSerializer(serializers.Serializer):
    """Paginated order list response"""

    count = serializers.IntegerField(help_text="Total number of orders")
    page = serializers.IntegerField(help_text="Current page")
    page_size = serializers.IntegerField(help_text="Items per page")
    num_pages = serializers.IntegerField(help_text="Total pages")
    results = OrderSerializer(many=True, help_text="Order list")
