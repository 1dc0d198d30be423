"""
ORM-backed adapters for the cart collaborators and report row sources.
"""

from .cart_store import DjangoCartStore
from .catalog_gateway import DjangoCatalogGateway
from .row_sources import (
    AuditLogRowSource,
    OrderReportRowSource,
    PayoutRowSource,
    ProductModerationRowSource,
    ProductSearchRowSource,
    ReturnCaseRowSource,
    ReviewModerationRowSource,
)

__all__ = [
    "AuditLogRowSource",
    "DjangoCartStore",
    "DjangoCatalogGateway",
    "OrderReportRowSource",
    "PayoutRowSource",
    "ProductModerationRowSource",
    "ProductSearchRowSource",
    "ReturnCaseRowSource",
    "ReviewModerationRowSource",
]
