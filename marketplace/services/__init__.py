"""
Marketplace Service Layer

Shared service primitives. Domain services live in their bounded context
(e.g. marketplace.ordering.domain.services) and build on these.

Usage:
    from marketplace.services import BaseService, ErrorCodes, service_ok, service_err

    result = order_service.get_order(order_id, caller_id)

    if result.ok:
        order = result.value
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    # Error codes
    "ErrorCodes",
]
