"""
AvailabilityService - Stock and price resolution

Resolves how many units of a product (or one of its variants) can be put in
a cart right now and at what unit price. Always computed from the live
catalog record handed in; nothing is cached between requests.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from marketplace.cart.domain.interfaces import CatalogProduct, CatalogVariant
from marketplace.cart.domain.lines import normalize_attributes
from marketplace.services.base import BaseService


@dataclass(frozen=True)
class ProductAvailability:
    available_stock: int
    unit_price: Decimal
    variant_missing: bool = False
    variant: Optional[CatalogVariant] = None

    @property
    def in_stock(self) -> bool:
        return not self.variant_missing and self.available_stock > 0


def variant_matches(variant_attributes: Optional[Mapping[str, str]], requested: Mapping[str, str]) -> bool:
    """
    Compare a variant's stored attributes, as-is, with a normalized selection.

    Every stored pair counts, blank values included, so a variant carrying an
    extra ``engraving: ""`` does not match a selection without it.
    """
    stored = dict(variant_attributes or {})
    if len(stored) != len(requested):
        return False

    wanted = {key.casefold(): value.casefold() for key, value in requested.items()}
    for key, value in stored.items():
        expected = wanted.get(str(key).strip().casefold())
        actual = str(value).strip().casefold() if value is not None else ""
        if expected is None or expected != actual:
            return False
    return True


class AvailabilityService(BaseService):
    """
    Service for resolving per-line stock and price.

    Rules:
    - Variant-bearing products need a non-empty attribute selection that
      exactly matches one variant (same number of keys, values equal ignoring
      case). Otherwise the variant is missing and nothing is available.
    - Products without variants use their own stock and price.
    - Stock is floored at zero.
    """

    def find_variant(self, product: CatalogProduct, attributes: Optional[Mapping[str, str]]) -> Optional[CatalogVariant]:
        requested = normalize_attributes(attributes)
        if not product.variants or not requested:
            return None

        for variant in product.variants:
            if variant_matches(variant.attributes, requested):
                return variant
        return None

    def resolve_availability(
        self, product: CatalogProduct, requested_attributes: Optional[Mapping[str, str]] = None
    ) -> ProductAvailability:
        """
        Resolve stock and unit price for a product/variant selection.

        Args:
            product: Live catalog product
            requested_attributes: Selected variant attributes (may be empty)

        Returns:
            ProductAvailability; ``variant_missing`` is True when a variant is
            required but none matches.

        Example:
            >>> availability = service.resolve_availability(product, {"Size": "m", "Color": "red"})
            >>> if availability.in_stock:
            ...     print(availability.available_stock)
        """
        if not product.has_variants:
            return ProductAvailability(available_stock=max(product.stock, 0), unit_price=product.price)

        variant = self.find_variant(product, requested_attributes)
        if variant is None:
            self.logger.debug(f"No variant of product {product.id} matches {requested_attributes!r}")
            return ProductAvailability(available_stock=0, unit_price=product.price, variant_missing=True)

        unit_price = variant.price if variant.price is not None else product.price
        return ProductAvailability(available_stock=max(variant.stock, 0), unit_price=unit_price, variant=variant)
