"""In-memory collaborators for cart service tests."""

from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from marketplace.cart.domain.interfaces import CartStore, CatalogGateway, CatalogProduct, CatalogVariant
from marketplace.cart.domain.lines import CartContext, CartLine, merge_lines


def catalog_product(product_id, seller_id="seller-1", price="10.00", stock=10, variants=(), title=None):
    return CatalogProduct(
        id=str(product_id),
        seller_id=seller_id,
        title=title or f"Product {product_id}",
        price=Decimal(price),
        stock=stock,
        variants=tuple(
            CatalogVariant(
                attributes=variant["attributes"],
                stock=variant.get("stock", 0),
                price=Decimal(variant["price"]) if variant.get("price") is not None else None,
            )
            for variant in variants
        ),
        seller_name=f"Shop {seller_id}",
    )


class InMemoryCatalog(CatalogGateway):
    def __init__(self, *products: CatalogProduct):
        self.products: Dict[str, CatalogProduct] = {product.id: product for product in products}

    def add(self, product: CatalogProduct):
        self.products[product.id] = product

    def remove(self, product_id):
        self.products.pop(str(product_id), None)

    def get_product(self, product_id) -> Optional[CatalogProduct]:
        return self.products.get(str(product_id))


class InMemoryCartStore(CartStore):
    def __init__(self, max_items: int = 50):
        self.max_items = max_items
        self.carts: Dict[str, List[CartLine]] = {}
        self.promo_codes: Dict[str, str] = {}

    def get_items(self, context: CartContext) -> List[CartLine]:
        return list(self.carts.get(context.cart_key, []))

    def replace_cart(self, context: CartContext, lines: Sequence[CartLine]) -> None:
        self.carts[context.cart_key] = merge_lines(lines, self.max_items)

    def get_promo_code(self, context: CartContext) -> Optional[str]:
        return self.promo_codes.get(context.cart_key)

    def set_promo_code(self, context: CartContext, code: Optional[str]) -> None:
        if code:
            self.promo_codes[context.cart_key] = code
        else:
            self.promo_codes.pop(context.cart_key, None)
