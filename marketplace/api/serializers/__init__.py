# Marketplace API Serializers

# Import response serializers for API documentation
from .response_serializers import ErrorResponseSerializer, OrderListResponseSerializer


__all__ = ["ErrorResponseSerializer", "OrderListResponseSerializer"]
