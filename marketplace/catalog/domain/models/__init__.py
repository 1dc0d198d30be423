from .catalog import Product, ProductVariant
from .category import Category
from .interaction import ProductReview, SellerRating


__all__ = [
    "Product",
    "ProductVariant",
    "Category",
    "ProductReview",
    "SellerRating",
]
