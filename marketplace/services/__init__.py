"""
Marketplace Service Layer

Shared building blocks for the domain services that live in each bounded
context (cart, catalog, ordering, reporting).

Usage:
    from marketplace.services import BaseService, ErrorCodes, service_ok, service_err

    result = cart_service.add_to_cart(context, product_id, attributes, quantity=2)

    if result.ok:
        summary = result.value.summary
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, check_cancelled, service_err, service_ok

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    "check_cancelled",
    # Error codes
    "ErrorCodes",
]
