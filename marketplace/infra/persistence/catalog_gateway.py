import logging
import uuid
from typing import Dict, Optional, Sequence

from django.db import OperationalError

from marketplace.cart.domain.interfaces import CatalogGateway, CatalogProduct, CatalogVariant
from marketplace.catalog.domain.models import Product
from marketplace.domain.exceptions import TransientUnavailable
from marketplace.querying.statuses import ModerationStatus

logger = logging.getLogger(__name__)


def _valid_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class DjangoCatalogGateway(CatalogGateway):
    """Catalog lookups over the ORM. Only published, approved products are purchasable."""

    def listed_products(self):
        return (
            Product.objects.filter(
                workflow_state=Product.WORKFLOW_PUBLISHED, moderation_status=ModerationStatus.APPROVED
            )
            .select_related("seller")
            .prefetch_related("variants")
        )

    def to_catalog_product(self, product: Product) -> CatalogProduct:
        seller = product.seller
        seller_name = seller.get_full_name() or seller.username if seller else "Seller"
        return CatalogProduct(
            id=str(product.id),
            seller_id=str(product.seller_id),
            title=product.name,
            price=product.price,
            stock=product.stock_quantity,
            variants=tuple(
                CatalogVariant(attributes=dict(variant.attributes or {}), stock=variant.stock_quantity, price=variant.price)
                for variant in product.variants.all()
            ),
            seller_name=seller_name or "Seller",
        )

    def get_product(self, product_id) -> Optional[CatalogProduct]:
        if not _valid_uuid(product_id):
            return None
        try:
            product = self.listed_products().filter(id=product_id).first()
        except OperationalError as e:
            raise TransientUnavailable(f"Catalog lookup failed: {e}") from e
        return self.to_catalog_product(product) if product is not None else None

    def get_products(self, product_ids: Sequence) -> Dict[str, CatalogProduct]:
        ids = [product_id for product_id in product_ids if _valid_uuid(product_id)]
        if not ids:
            return {}
        try:
            products = list(self.listed_products().filter(id__in=ids))
        except OperationalError as e:
            raise TransientUnavailable(f"Catalog lookup failed: {e}") from e
        logger.debug(f"Catalog batch lookup: requested={len(ids)}, found={len(products)}")
        return {str(product.id): self.to_catalog_product(product) for product in products}
