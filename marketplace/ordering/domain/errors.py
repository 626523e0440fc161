"""
Order lifecycle error taxonomy.

Each error carries a stable ``code`` shared with ``ErrorCodes`` so the service
layer can turn any of them into a failed ServiceResult without a lookup table.
"""

from typing import Iterable, List

from marketplace.services.base import ErrorCodes


class OrderError(Exception):
    """Base class for every expected order engine failure."""

    code = ErrorCodes.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderError):
    """One or more requested items failed product or stock checks."""

    code = ErrorCodes.VALIDATION_ERROR

    def __init__(self, invalid_items: Iterable):
        self.invalid_items = list(invalid_items)
        details = ", ".join(f"{item.product_id}: {item.message}" for item in self.invalid_items)
        super().__init__(f"Invalid order items: {details}")


class MultiSellerError(OrderError):
    code = ErrorCodes.MULTI_SELLER

    def __init__(self, seller_ids: List[str], message: str = ""):
        self.seller_ids = list(seller_ids)
        super().__init__(
            message
            or "All order items must belong to the same seller. "
            f"Found {len(self.seller_ids)} sellers: {', '.join(sorted(self.seller_ids))}"
        )


class NoValidSellerError(MultiSellerError):
    """No valid item remained to resolve a seller from."""

    code = ErrorCodes.NO_VALID_SELLER

    def __init__(self):
        super().__init__([], "Order has no valid items to resolve a seller from")


class SelfPurchaseError(OrderError):
    code = ErrorCodes.SELF_PURCHASE

    def __init__(self, buyer_id: str):
        self.buyer_id = buyer_id
        super().__init__(f"User {buyer_id} cannot purchase their own products")


class InvalidOrderError(OrderError):
    """An Order or OrderItem invariant was violated at construction."""

    code = ErrorCodes.INVALID_ORDER


class NotFoundError(OrderError):
    code = ErrorCodes.NOT_FOUND

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class UnauthorizedError(OrderError):
    code = ErrorCodes.UNAUTHORIZED


class InvalidTransitionError(OrderError):
    code = ErrorCodes.INVALID_TRANSITION

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid status transition from {from_status.value} to {to_status.value}")


class ConflictError(OrderError):
    """The order was modified concurrently; the caller may retry."""

    code = ErrorCodes.CONFLICT

    def __init__(self, order_id: str, expected_version: int):
        self.order_id = order_id
        self.expected_version = expected_version
        super().__init__(
            f"Order {order_id} was modified concurrently (expected version {expected_version}); retry the request"
        )
