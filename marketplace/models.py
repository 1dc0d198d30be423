from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import Category, Product, ProductReview, ProductVariant, SellerRating
from marketplace.ordering.domain.models import Order, Payout, ReturnCase, SubOrder
from marketplace.reporting.domain.models import AuditLogEntry, ReportExportJob


__all__ = [
    "Category",
    "Product",
    "ProductVariant",
    "ProductReview",
    "SellerRating",
    "Cart",
    "CartItem",
    "Order",
    "SubOrder",
    "Payout",
    "ReturnCase",
    "AuditLogEntry",
    "ReportExportJob",
]
