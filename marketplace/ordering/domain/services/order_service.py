"""
OrderService - Order Lifecycle Management

Single entry point for creating orders and changing their status. Creation runs
OrderValidator -> Order.create -> OrderStore.create; a status change runs
OrderStore.read -> actor resolution -> Order.transition -> OrderStore.update.

Expected failures are raised inside as OrderError subclasses and returned to
callers as failed ServiceResults carrying the error's code.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from django.conf import settings

from infrastructure.events import get_event_bus
from infrastructure.observability.tracing import add_span_attributes, get_tracer
from marketplace.catalog.domain.services.catalog_lookup import CatalogLookup, DjangoCatalogLookup
from marketplace.domain.events.order_events import OrderPlacedEvent, OrderStatusChangedEvent
from marketplace.infra.observability.metrics import (
    order_status_transitions_total,
    order_update_conflicts_total,
    order_value,
    orders_placed_total,
)
from marketplace.ordering.domain.actors import Neither, resolve_actor
from marketplace.ordering.domain.entities import Order, OrderItem, OrderStatus
from marketplace.ordering.domain.errors import (
    ConflictError,
    InvalidOrderError,
    MultiSellerError,
    NoValidSellerError,
    NotFoundError,
    OrderError,
    SelfPurchaseError,
    UnauthorizedError,
    ValidationError,
)
from marketplace.ordering.domain.repositories import OrderStore, Pagination
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .order_validator import ItemRequest, OrderValidator, ValidationResult

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def _orders_setting(key: str, default):
    return getattr(settings, "ORDERS", {}).get(key, default)


class OrderService(BaseService):
    """
    Service for managing order lifecycle.
    """

    def __init__(
        self,
        catalog_lookup: CatalogLookup = None,
        order_repository: OrderStore = None,
        validator: OrderValidator = None,
        event_bus=None,
    ):
        """
        Initialize OrderService.

        Args:
            catalog_lookup: Read-only product oracle (injected)
            order_repository: Order Store implementation (injected)
            validator: Item validator; built from catalog_lookup when omitted
            event_bus: Event bus for publishing domain events (injected)
        """
        super().__init__()
        if order_repository is None:
            from marketplace.ordering.infra.order_repository import DjangoOrderRepository

            order_repository = DjangoOrderRepository()

        self.catalog_lookup = catalog_lookup or DjangoCatalogLookup()
        self.order_repository = order_repository
        self.validator = validator or OrderValidator(self.catalog_lookup)
        self.event_bus = event_bus or get_event_bus()

    # ==================== Creation ====================

    @BaseService.log_performance
    def create_order(self, buyer_id: str, items: Iterable) -> ServiceResult[Order]:
        """
        Create a PENDING order for a single seller.

        Args:
            buyer_id: Purchasing user id
            items: ItemRequest values or {"product_id", "quantity"} mappings

        Returns:
            ServiceResult with the persisted Order. Failure codes:
            validation_error, multi_seller, no_valid_seller, self_purchase,
            invalid_order, internal_error.

        Example:
            >>> result = order_service.create_order(buyer_id, [{"product_id": pid, "quantity": 2}])
            >>> if result.ok:
            ...     order = result.value
        """
        buyer_id = str(buyer_id)

        with tracer.start_as_current_span("order_create") as span:
            span.set_attribute("buyer.id", buyer_id)

            try:
                requests = self._to_requests(items)
                span.set_attribute("order.requested_items", len(requests))

                with tracer.start_as_current_span("validate_items"):
                    validation = self.validator.validate(requests)

                order = self._build_order(buyer_id, validation)

                with tracer.start_as_current_span("save_order"):
                    order = self.order_repository.create(order)

            except OrderError as e:
                orders_placed_total.labels(status="rejected").inc()
                span.set_attribute("order.error", e.code)
                self.logger.info(f"Rejected order for buyer {buyer_id}: {e.message}")
                return service_err(e.code, e.message)
            except Exception as e:
                self.logger.error(f"Error creating order for buyer {buyer_id}: {e}", exc_info=True)
                span.record_exception(e)
                orders_placed_total.labels(status="failure").inc()
                return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

            with tracer.start_as_current_span("publish_event"):
                self._publish(OrderPlacedEvent(order))

            orders_placed_total.labels(status="success").inc()
            order_value.observe(float(order.total))

            add_span_attributes(span, **{"order.id": order.id, "order.total": order.total})
            self.logger.info(
                f"Created order {order.id} for buyer {buyer_id} from seller {order.seller_id}: "
                f"{len(order.items)} items, total {order.total}"
            )
            return service_ok(order)

    def _to_requests(self, items: Iterable) -> List[ItemRequest]:
        requests = []
        for item in items or []:
            if isinstance(item, ItemRequest):
                requests.append(item)
                continue
            try:
                quantity = self._parse_quantity(item["quantity"])
                requests.append(ItemRequest(product_id=str(item["product_id"]), quantity=quantity))
            except (KeyError, TypeError, ValueError):
                raise InvalidOrderError("Each item requires a product_id and an integer quantity")

        max_items = _orders_setting("MAX_ITEMS_PER_ORDER", 50)
        if len(requests) > max_items:
            raise InvalidOrderError(f"An order may contain at most {max_items} items")
        return requests

    def _build_order(self, buyer_id: str, validation: ValidationResult) -> Order:
        if not validation.is_valid:
            raise ValidationError(validation.invalid_items)

        seller_ids = validation.seller_ids
        if not seller_ids:
            raise NoValidSellerError()
        if len(seller_ids) > 1:
            raise MultiSellerError(seller_ids)

        seller_id = seller_ids[0]
        if seller_id == buyer_id:
            raise SelfPurchaseError(buyer_id)

        order_items = [
            OrderItem.create(product_id=item.product_id, quantity=item.quantity, unit_price=item.unit_price)
            for item in validation.valid_items
        ]
        return Order.create(buyer_id=buyer_id, seller_id=seller_id, items=order_items)

    # ==================== Queries ====================

    @BaseService.log_performance
    def get_order(self, order_id: str, caller_id: str) -> ServiceResult[Order]:
        """
        Get an order visible to its buyer or seller.

        Returns:
            ServiceResult with the Order, or not_found / unauthorized.
        """
        try:
            order = self.order_repository.read(order_id)
            if order is None:
                raise NotFoundError(order_id)
            if not order.involves(caller_id):
                raise UnauthorizedError(f"User {caller_id} is neither buyer nor seller of order {order_id}")

            return service_ok(order)

        except OrderError as e:
            return service_err(e.code, e.message)
        except Exception as e:
            self.logger.error(f"Error getting order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_buyer_orders(
        self,
        buyer_id: str,
        status: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> ServiceResult[Dict]:
        """
        List orders placed by ``buyer_id``.

        Example:
            >>> result = order_service.list_buyer_orders(buyer_id, status="PAID")
            >>> if result.ok:
            ...     orders = result.value["results"]
        """
        return self._list_orders("buyer", str(buyer_id), status, page, page_size, sort_by, sort_order)

    @BaseService.log_performance
    def list_seller_orders(
        self,
        seller_id: str,
        status: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> ServiceResult[Dict]:
        """List orders sold by ``seller_id``."""
        return self._list_orders("seller", str(seller_id), status, page, page_size, sort_by, sort_order)

    def _list_orders(self, party, party_id, status, page, page_size, sort_by, sort_order) -> ServiceResult[Dict]:
        try:
            status_filter = self._parse_status(status) if status else None
            page_size = int(_orders_setting("DEFAULT_PAGE_SIZE", 20) if page_size is None else page_size)
            max_page_size = _orders_setting("MAX_PAGE_SIZE", 100)
            if page_size > max_page_size:
                raise ValueError(f"page_size must be between 1 and {max_page_size}")
            pagination = Pagination(page=int(page), page_size=page_size, sort_by=sort_by, sort_order=sort_order)
        except (TypeError, ValueError) as e:
            return service_err(ErrorCodes.VALIDATION_ERROR, str(e))

        try:
            if party == "buyer":
                orders = self.order_repository.list_by_buyer(party_id, pagination, status_filter)
                total_count = self.order_repository.count(buyer_id=party_id, status=status_filter)
            else:
                orders = self.order_repository.list_by_seller(party_id, pagination, status_filter)
                total_count = self.order_repository.count(seller_id=party_id, status=status_filter)
        except Exception as e:
            self.logger.error(f"Error listing orders for {party} {party_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Listed orders for {party} {party_id}: {total_count} total, page {pagination.page}")

        return service_ok(
            {
                "results": orders,
                "count": total_count,
                "page": pagination.page,
                "page_size": pagination.page_size,
                "num_pages": (total_count + pagination.page_size - 1) // pagination.page_size,
            }
        )

    # ==================== Status changes ====================

    @BaseService.log_performance
    def update_status(
        self, order_id: str, new_status: Union[OrderStatus, str], actor_id: str
    ) -> ServiceResult[Order]:
        """
        Move an order to ``new_status`` on behalf of ``actor_id``.

        The actor must be the order's buyer or seller, and the (from, to) edge
        must allow that role. A concurrent update surfaces as ``conflict``;
        nothing is retried here.

        Returns:
            ServiceResult with the updated Order. Failure codes:
            validation_error, not_found, unauthorized, invalid_transition,
            conflict, internal_error.
        """
        actor_id = str(actor_id)
        try:
            target = self._parse_status(new_status)
        except ValueError as e:
            return service_err(ErrorCodes.VALIDATION_ERROR, str(e))

        with tracer.start_as_current_span("order_update_status") as span:
            add_span_attributes(span, **{"order.id": order_id, "order.to_status": target.value, "actor.id": actor_id})

            order = None
            try:
                order = self.order_repository.read(order_id)
                if order is None:
                    raise NotFoundError(order_id)

                actor = resolve_actor(order, actor_id)
                if isinstance(actor, Neither):
                    raise UnauthorizedError(f"User {actor_id} is neither buyer nor seller of order {order_id}")
                span.set_attribute("actor.role", actor.role)

                updated = order.transition(target, actor)

                with tracer.start_as_current_span("save_order"):
                    updated = self.order_repository.update(updated)

            except ConflictError as e:
                order_update_conflicts_total.inc()
                self._record_transition(order, target, e.code)
                self.logger.warning(e.message)
                return service_err(e.code, e.message)
            except OrderError as e:
                self._record_transition(order, target, e.code)
                span.set_attribute("order.error", e.code)
                return service_err(e.code, e.message)
            except Exception as e:
                self.logger.error(f"Error updating order {order_id} to {target.value}: {e}", exc_info=True)
                span.record_exception(e)
                self._record_transition(order, target, ErrorCodes.INTERNAL_ERROR)
                return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

            with tracer.start_as_current_span("publish_event"):
                self._publish(OrderStatusChangedEvent(updated, order.status, actor_id))

            self._record_transition(order, target, "success")
            self.logger.info(
                f"Order {updated.id} moved {order.status.value} -> {updated.status.value} by {actor.role} {actor_id}"
            )
            return service_ok(updated)

    @BaseService.log_performance
    def mark_paid(self, order_id: str, actor_id: str) -> ServiceResult[Order]:
        return self.update_status(order_id, OrderStatus.PAID, actor_id)

    @BaseService.log_performance
    def mark_shipped(self, order_id: str, actor_id: str) -> ServiceResult[Order]:
        return self.update_status(order_id, OrderStatus.SHIPPED, actor_id)

    @BaseService.log_performance
    def mark_delivered(self, order_id: str, actor_id: str) -> ServiceResult[Order]:
        return self.update_status(order_id, OrderStatus.DELIVERED, actor_id)

    @BaseService.log_performance
    def cancel_order(self, order_id: str, actor_id: str) -> ServiceResult[Order]:
        return self.update_status(order_id, OrderStatus.CANCELLED, actor_id)

    # ==================== Helpers ====================

    @staticmethod
    def _parse_quantity(value) -> int:
        # bool is an int subclass; floats and Decimals would truncate
        if isinstance(value, bool):
            raise TypeError("quantity must be an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            return int(value.strip())
        raise TypeError("quantity must be an integer")

    @staticmethod
    def _parse_status(value: Union[OrderStatus, str]) -> OrderStatus:
        if isinstance(value, OrderStatus):
            return value
        try:
            return OrderStatus(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(status.value for status in OrderStatus)
            raise ValueError(f"Unknown order status '{value}'. Expected one of: {valid}")

    @staticmethod
    def _record_transition(order: Optional[Order], target: OrderStatus, outcome: str) -> None:
        if order is None:
            return
        order_status_transitions_total.labels(
            from_status=order.status.value, to_status=target.value, outcome=outcome
        ).inc()

    def _publish(self, event) -> None:
        # Event delivery must never undo a committed order change
        try:
            event.publish(self.event_bus)
            self.logger.info(f"Published event: {event.to_dict()}")
        except Exception as e:
            self.logger.error(f"Failed to publish {event.event_type}: {e}", exc_info=True)
