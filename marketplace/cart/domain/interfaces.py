"""
Cart Collaborator Interfaces
============================

Abstract contracts the cart services depend on. Concrete implementations:
    - DjangoCatalogGateway / DjangoCartStore (marketplace.infra.persistence)
    - RuleBasedShippingCalculator (marketplace.cart.domain.services.pricing_service)
    - In-memory fakes in the test suite
"""

from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from .lines import CartContext, CartLine
from .summary import PricedLine


@dataclass(frozen=True)
class CatalogVariant:
    attributes: Dict[str, str]
    stock: int
    price: Optional[Decimal] = None


@dataclass(frozen=True)
class CatalogProduct:
    """Live catalog state of a product, fetched fresh for every cart operation."""

    id: str
    seller_id: str
    title: str
    price: Decimal
    stock: int
    variants: Tuple[CatalogVariant, ...] = ()
    seller_name: str = "Seller"

    @property
    def has_variants(self) -> bool:
        return len(self.variants) > 0


class CatalogGateway(ABC):
    @abstractmethod
    def get_product(self, product_id) -> Optional[CatalogProduct]:
        """
        Look up a purchasable product.

        Returns:
            CatalogProduct, or None when the product does not exist or is not
            currently listed
        """
        pass

    def get_products(self, product_ids: Sequence) -> Dict[str, CatalogProduct]:
        """Batch lookup keyed by product id; missing products are left out."""
        products = {}
        for product_id in product_ids:
            product = self.get_product(product_id)
            if product is not None:
                products[str(product_id)] = product
        return products


class CartStore(ABC):
    def atomic(self):
        """Context manager grouping one read-modify-write of a cart."""
        return nullcontext()

    @abstractmethod
    def get_items(self, context: CartContext) -> List[CartLine]:
        pass

    @abstractmethod
    def replace_cart(self, context: CartContext, lines: Sequence[CartLine]) -> None:
        """Persist ``lines`` as the complete content of the cart."""
        pass

    @abstractmethod
    def get_promo_code(self, context: CartContext) -> Optional[str]:
        pass

    @abstractmethod
    def set_promo_code(self, context: CartContext, code: Optional[str]) -> None:
        """Store the active promo code; None clears it."""
        pass


class ShippingCalculator(ABC):
    @abstractmethod
    def compute_shipping(self, seller_id: str, lines: Sequence[PricedLine]) -> Decimal:
        """Shipping charged by one seller for its priced lines."""
        pass
