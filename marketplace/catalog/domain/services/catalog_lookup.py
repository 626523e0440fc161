"""
Catalog Lookup
==============

Read-only view of live product state used by the order engine: price, stock,
active flag and owning seller. The engine never writes product data.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from marketplace.catalog.domain.models.catalog import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductSnapshot:
    """
    Point-in-time product state.

    Attributes:
        product_id: Product identifier
        price: Current unit price
        stock: Units currently in stock
        is_active: Whether the product can be purchased
        seller_id: Owner of the product's store, None if the product has no store
    """

    product_id: str
    price: Decimal
    stock: int
    is_active: bool
    seller_id: Optional[str]


class CatalogLookup(ABC):
    """Abstract product lookup consumed by the Order Validator."""

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[ProductSnapshot]:
        """
        Fetch the current state of a product.

        Args:
            product_id: Product identifier

        Returns:
            ProductSnapshot, or None if no such product exists
        """


class DjangoCatalogLookup(CatalogLookup):
    """Catalog lookup backed by the marketplace Product and Store tables."""

    def get_product(self, product_id: str) -> Optional[ProductSnapshot]:
        try:
            product = Product.objects.select_related("store").get(id=product_id)
        except (Product.DoesNotExist, DjangoValidationError, ValueError):
            # Malformed UUIDs cannot match any product
            logger.debug(f"Catalog lookup miss for product {product_id}")
            return None

        seller_id = product.store.owner_id if product.store is not None else None

        return ProductSnapshot(
            product_id=str(product.id),
            price=product.price,
            stock=product.stock_quantity,
            is_active=product.is_active,
            seller_id=str(seller_id) if seller_id is not None else None,
        )
