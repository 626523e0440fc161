"""
OrderValidator - point-in-time checks for a proposed purchase.

Partitions the requested items into valid and invalid ones against live catalog
state and groups the valid ones by seller. Nothing is reserved or decremented:
two concurrent requests can both pass validation for the last unit in stock.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from marketplace.catalog.domain.services.catalog_lookup import CatalogLookup, ProductSnapshot
from marketplace.infra.observability.metrics import order_item_validation_failures_total, order_validation_duration

logger = logging.getLogger(__name__)


class InvalidReason(Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    INSUFFICIENT_STOCK = "insufficient_stock"
    NO_ASSOCIATED_SELLER = "no_associated_seller"
    LOOKUP_ERROR = "lookup_error"
    INVALID_QUANTITY = "invalid_quantity"


@dataclass(frozen=True)
class ItemRequest:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class ValidItem:
    product_id: str
    quantity: int
    unit_price: Decimal
    seller_id: str


@dataclass(frozen=True)
class InvalidItem:
    product_id: str
    reason: InvalidReason
    message: str


@dataclass
class ValidationResult:
    """
    Outcome of validating one creation request. Never persisted.

    Attributes:
        valid_items: Items that passed every check, in request order
        invalid_items: Items that failed, with the first failing reason
        grouped_by_seller: seller_id -> valid items, in first-seen order
    """

    valid_items: List[ValidItem] = field(default_factory=list)
    invalid_items: List[InvalidItem] = field(default_factory=list)
    grouped_by_seller: Dict[str, List[ValidItem]] = field(default_factory=OrderedDict)

    @property
    def is_valid(self) -> bool:
        return not self.invalid_items

    @property
    def seller_ids(self) -> List[str]:
        return list(self.grouped_by_seller.keys())


class OrderValidator:
    """Validates (product_id, quantity) requests against a CatalogLookup."""

    def __init__(self, catalog_lookup: CatalogLookup):
        self.catalog_lookup = catalog_lookup

    def validate(self, items: Iterable[ItemRequest]) -> ValidationResult:
        """
        Validate every item independently, in input order.

        Duplicate product ids are checked one occurrence at a time and are not
        merged. A failing lookup marks only that item invalid.
        """
        result = ValidationResult()

        with order_validation_duration.time():
            for request in items:
                outcome = self._validate_item(request)
                if isinstance(outcome, InvalidItem):
                    self._record_invalid(result, outcome)
                else:
                    result.valid_items.append(outcome)
                    result.grouped_by_seller.setdefault(outcome.seller_id, []).append(outcome)

        logger.debug(
            f"Validated {len(result.valid_items) + len(result.invalid_items)} items: "
            f"{len(result.valid_items)} valid, {len(result.invalid_items)} invalid, "
            f"{len(result.grouped_by_seller)} sellers"
        )
        return result

    def _validate_item(self, request: ItemRequest):
        product_id = str(request.product_id)

        if request.quantity is None or request.quantity <= 0:
            return InvalidItem(product_id, InvalidReason.INVALID_QUANTITY, "Quantity must be greater than 0")

        try:
            product: Optional[ProductSnapshot] = self.catalog_lookup.get_product(product_id)
        except Exception as e:
            logger.error(f"Catalog lookup failed for product {product_id}: {e}", exc_info=True)
            return InvalidItem(product_id, InvalidReason.LOOKUP_ERROR, "Lookup error")

        if product is None:
            return InvalidItem(product_id, InvalidReason.NOT_FOUND, "Product not found")

        if not product.is_active:
            return InvalidItem(product_id, InvalidReason.INACTIVE, "Product is not active")

        if product.stock < request.quantity:
            return InvalidItem(
                product_id,
                InvalidReason.INSUFFICIENT_STOCK,
                f"Insufficient stock. Available: {product.stock}, requested: {request.quantity}",
            )

        if not product.seller_id:
            return InvalidItem(product_id, InvalidReason.NO_ASSOCIATED_SELLER, "Product has no associated store")

        # Price snapshot; never re-read after this point
        return ValidItem(
            product_id=product_id,
            quantity=request.quantity,
            unit_price=product.price,
            seller_id=str(product.seller_id),
        )

    @staticmethod
    def _record_invalid(result: ValidationResult, item: InvalidItem) -> None:
        result.invalid_items.append(item)
        order_item_validation_failures_total.labels(reason=item.reason.value).inc()
        logger.warning(f"Invalid order item {item.product_id}: {item.message} ({item.reason.value})")
