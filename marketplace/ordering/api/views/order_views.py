from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, OrderListResponseSerializer
from marketplace.ordering.api.serializers import (
    CreateOrderRequestSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from marketplace.ordering.domain.entities import OrderStatus
from marketplace.ordering.domain.services import OrderService
from marketplace.services.base import ErrorCodes, ServiceResult

ERROR_STATUS = {
    ErrorCodes.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_ORDER: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.MULTI_SELLER: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.NO_VALID_SELLER: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.SELF_PURCHASE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCodes.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.CONFLICT: status.HTTP_409_CONFLICT,
}

LIST_PARAMETERS = [
    OpenApiParameter(name="status", type=str, description="Filter by order status (e.g. PAID)"),
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max: 100)"),
    OpenApiParameter(name="sort_by", type=str, description="created_at, updated_at or total"),
    OpenApiParameter(name="sort_order", type=str, description="asc or desc (default: desc)"),
]

TRANSITION_RESPONSES = {
    200: OpenApiResponse(response=OrderSerializer, description="Status updated"),
    400: OpenApiResponse(response=ErrorResponseSerializer, description="Transition not allowed from current status"),
    403: OpenApiResponse(response=ErrorResponseSerializer, description="Caller may not take this transition"),
    404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
    409: OpenApiResponse(response=ErrorResponseSerializer, description="Order modified concurrently; retry"),
}


def error_response(result: ServiceResult) -> Response:
    return Response(
        {"error": result.error, "detail": result.error_detail},
        status=ERROR_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    def _caller_id(self, request) -> str:
        return str(request.user.pk)

    def _order_response(self, request, order, http_status=status.HTTP_200_OK) -> Response:
        serializer = OrderSerializer(order, context={"caller_id": self._caller_id(request)})
        return Response(serializer.data, status=http_status)

    def _page_response(self, request, result: ServiceResult) -> Response:
        if not result.ok:
            return error_response(result)

        response_data = dict(result.value)
        response_data["results"] = OrderSerializer(
            result.value["results"], many=True, context={"caller_id": self._caller_id(request)}
        ).data
        return Response(response_data, status=status.HTTP_200_OK)

    def _list_kwargs(self, request) -> dict:
        params = request.query_params
        return {
            "status": params.get("status"),
            "page": params.get("page", 1),
            "page_size": params.get("page_size"),
            "sort_by": params.get("sort_by", "created_at"),
            "sort_order": params.get("sort_order", "desc"),
        }

    @extend_schema(
        operation_id="orders_list",
        summary="List user's orders (as buyer)",
        description="""
        **What it receives:**
        - Authentication token
        - Optional status filter, pagination and sorting (query params)

        **What it returns:**
        - Paginated list of orders where user is the buyer
        - Total count and page information
        """,
        parameters=LIST_PARAMETERS,
        responses={
            200: OpenApiResponse(response=OrderListResponseSerializer, description="Orders retrieved successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filter or pagination"),
        },
        tags=["Marketplace - Orders"],
    )
    def list(self, request):
        result = self.get_service().list_buyer_orders(self._caller_id(request), **self._list_kwargs(request))
        return self._page_response(request, result)

    @extend_schema(
        operation_id="orders_seller_orders",
        summary="List orders where user is the seller",
        parameters=LIST_PARAMETERS,
        responses={
            200: OpenApiResponse(response=OrderListResponseSerializer, description="Orders retrieved successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filter or pagination"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=False, methods=["get"])
    def seller_orders(self, request):
        result = self.get_service().list_seller_orders(self._caller_id(request), **self._list_kwargs(request))
        return self._page_response(request, result)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        description="""
        **What it receives:**
        - `order_id` (UUID in URL): Order to retrieve
        - Authentication token (must be the order's buyer or seller)

        **What it returns:**
        - Order with items and the statuses the caller may move it to next
        """,
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Order retrieved successfully"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not buyer or seller of this order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(pk, self._caller_id(request))
        if not result.ok:
            return error_response(result)
        return self._order_response(request, result.value)

    @extend_schema(
        operation_id="orders_create",
        summary="Place an order",
        description="""
        **What it receives:**
        - `items` (list): 1 to 50 `{product_id, quantity}` entries, all sold by one seller
        - Authentication token

        **What it returns:**
        - Created order in PENDING status with prices snapshotted at creation
        - Stock is checked but not reserved
        """,
        request=CreateOrderRequestSerializer,
        responses={
            201: OpenApiResponse(response=OrderSerializer, description="Order created successfully"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Invalid items, items from several sellers, or buying own products",
            ),
        },
        tags=["Marketplace - Orders"],
    )
    def create(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": ErrorCodes.VALIDATION_ERROR, "detail": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        items = [
            {"product_id": str(item["product_id"]), "quantity": item["quantity"]}
            for item in serializer.validated_data["items"]
        ]
        result = self.get_service().create_order(self._caller_id(request), items)
        if not result.ok:
            return error_response(result)
        return self._order_response(request, result.value, status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="orders_update_status",
        summary="Change order status",
        description="""
        **Allowed transitions:**
        - PENDING -> PAID (seller)
        - PAID -> SHIPPED (seller)
        - SHIPPED -> DELIVERED (buyer)
        - SHIPPED -> CANCELLED (buyer or seller)
        """,
        request=UpdateOrderStatusSerializer,
        responses=TRANSITION_RESPONSES,
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = UpdateOrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": ErrorCodes.VALIDATION_ERROR, "detail": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return self._transition(request, pk, serializer.validated_data["status"])

    @extend_schema(
        operation_id="orders_pay",
        summary="Mark order as paid (seller)",
        request=None,
        responses=TRANSITION_RESPONSES,
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        return self._transition(request, pk, OrderStatus.PAID)

    @extend_schema(
        operation_id="orders_ship",
        summary="Mark order as shipped (seller)",
        request=None,
        responses=TRANSITION_RESPONSES,
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def ship(self, request, pk=None):
        return self._transition(request, pk, OrderStatus.SHIPPED)

    @extend_schema(
        operation_id="orders_deliver",
        summary="Confirm delivery (buyer)",
        request=None,
        responses=TRANSITION_RESPONSES,
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def deliver(self, request, pk=None):
        return self._transition(request, pk, OrderStatus.DELIVERED)

    @extend_schema(
        operation_id="orders_cancel",
        summary="Cancel a shipped order (buyer or seller)",
        request=None,
        responses=TRANSITION_RESPONSES,
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        return self._transition(request, pk, OrderStatus.CANCELLED)

    def _transition(self, request, pk, new_status) -> Response:
        result = self.get_service().update_status(pk, new_status, self._caller_id(request))
        if not result.ok:
            return error_response(result)
        return self._order_response(request, result.value)
