"""
CartService - Shopping Cart Operations

Handles add, update, remove and clear for a cart identified by an explicit
CartContext, plus promo code application. Every operation re-reads live
catalog state, repairs the stored cart (removes lines that became invalid,
clamps quantities above stock), persists the repair and returns the fully
recomputed CartSummary.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from marketplace.cart.domain.interfaces import CartStore, CatalogGateway, CatalogProduct
from marketplace.cart.domain.lines import CartContext, CartLine, find_line, is_same_line, normalize_attributes, variant_label
from marketplace.cart.domain.summary import CartAdjustment, CartSummary, PricedLine, money
from marketplace.conf import CartOptions, get_cart_options
from marketplace.domain.exceptions import TransientUnavailable
from marketplace.infra.observability.metrics import cart_adjustments_total, cart_grand_total, cart_mutations_total
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .inventory_service import AvailabilityService, ProductAvailability
from .pricing_service import CartTotalsCalculator
from .promo_service import PromoApplicationResult, PromoCodeService


@dataclass(frozen=True)
class CartMutationResult:
    """
    Outcome of a cart operation.

    Attributes:
        status: added, incremented, updated, removed, not_found, cleared or unchanged
        summary: Recomputed cart summary (promo discount included)
        quantity: Quantity accepted by the request (0 when the line was removed)
        line_quantity: Final quantity of the affected line
        adjusted: True when the requested quantity was clamped to stock
        removed: True when the affected line is no longer in the cart
        found: False when the referenced line was not in the cart
        adjustments: Corrections made to other lines while reconciling
    """

    ADDED = "added"
    INCREMENTED = "incremented"
    UPDATED = "updated"
    REMOVED = "removed"
    NOT_FOUND = "not_found"
    CLEARED = "cleared"
    UNCHANGED = "unchanged"

    status: str
    summary: CartSummary
    quantity: int = 0
    line_quantity: int = 0
    adjusted: bool = False
    removed: bool = False
    found: bool = True
    message: str = ""
    adjustments: Tuple[CartAdjustment, ...] = ()

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "quantity": self.quantity,
            "line_quantity": self.line_quantity,
            "adjusted": self.adjusted,
            "removed": self.removed,
            "found": self.found,
            "adjustments": [adjustment.to_dict() for adjustment in self.adjustments],
            "summary": self.summary.to_dict(),
        }


class CartService(BaseService):
    """
    Service for managing shopping cart operations.

    Dependencies (all injectable):
    - CatalogGateway: live product/variant lookup
    - CartStore: persisted cart lines and active promo code
    - AvailabilityService: stock and price resolution
    - CartTotalsCalculator: seller grouping, shipping and totals
    - PromoCodeService: discount evaluation
    """

    def __init__(
        self,
        catalog: Optional[CatalogGateway] = None,
        store: Optional[CartStore] = None,
        availability_service: Optional[AvailabilityService] = None,
        totals_calculator: Optional[CartTotalsCalculator] = None,
        promo_service: Optional[PromoCodeService] = None,
        options: Optional[CartOptions] = None,
    ):
        super().__init__()
        if catalog is None or store is None:
            from marketplace.infra.persistence import DjangoCartStore, DjangoCatalogGateway

            catalog = catalog or DjangoCatalogGateway()
            store = store or DjangoCartStore(options=options)
        self.catalog = catalog
        self.store = store
        self.availability_service = availability_service or AvailabilityService()
        self.totals_calculator = totals_calculator or CartTotalsCalculator(options=options)
        self.promo_service = promo_service or PromoCodeService()
        self._options = options

    @property
    def options(self) -> CartOptions:
        return self._options or get_cart_options()

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _reconcile(
        self, lines: Sequence[CartLine]
    ) -> Tuple[List[CartLine], List[PricedLine], List[CartAdjustment], Dict[str, str]]:
        """Price stored lines against live catalog state, dropping or clamping what no longer fits."""
        products = self.catalog.get_products(list(dict.fromkeys(str(line.product_id) for line in lines)))

        kept: List[CartLine] = []
        priced: List[PricedLine] = []
        adjustments: List[CartAdjustment] = []
        seller_names: Dict[str, str] = {}

        for line in lines:
            product = products.get(str(line.product_id))
            availability = (
                self.availability_service.resolve_availability(product, line.variant_attributes)
                if product is not None
                else None
            )

            if availability is None or availability.variant_missing:
                adjustments.append(
                    CartAdjustment(
                        product_id=str(line.product_id),
                        reason=CartAdjustment.REMOVED_UNAVAILABLE,
                        previous_quantity=line.quantity,
                        quantity=0,
                        variant_attributes=line.variant_attributes,
                    )
                )
                continue

            if availability.available_stock <= 0:
                adjustments.append(
                    CartAdjustment(
                        product_id=str(line.product_id),
                        reason=CartAdjustment.REMOVED_OUT_OF_STOCK,
                        previous_quantity=line.quantity,
                        quantity=0,
                        variant_attributes=line.variant_attributes,
                    )
                )
                continue

            quantity = line.quantity if line.quantity > 0 else 1
            if quantity > availability.available_stock:
                adjustments.append(
                    CartAdjustment(
                        product_id=str(line.product_id),
                        reason=CartAdjustment.CLAMPED_TO_STOCK,
                        previous_quantity=quantity,
                        quantity=availability.available_stock,
                        variant_attributes=line.variant_attributes,
                    )
                )
                quantity = availability.available_stock

            kept.append(
                CartLine(
                    product_id=str(product.id),
                    seller_id=product.seller_id,
                    quantity=quantity,
                    variant_attributes=normalize_attributes(line.variant_attributes),
                )
            )
            priced.append(self._price_line(product, availability, line.variant_attributes, quantity))
            seller_names.setdefault(product.seller_id, product.seller_name)

        return kept, priced, adjustments, seller_names

    def _price_line(
        self, product: CatalogProduct, availability: ProductAvailability, attributes: Mapping[str, str], quantity: int
    ) -> PricedLine:
        attributes = normalize_attributes(attributes)
        return PricedLine(
            product_id=str(product.id),
            seller_id=product.seller_id,
            title=product.title,
            quantity=quantity,
            unit_price=money(availability.unit_price),
            line_total=money(availability.unit_price * quantity),
            available_stock=availability.available_stock,
            variant_attributes=attributes,
            variant_label=variant_label(attributes),
        )

    def _build(self, context: CartContext, lines: Sequence[CartLine]) -> Tuple[CartSummary, Tuple[CartAdjustment, ...]]:
        """Reconcile, persist corrections, total and re-apply the stored promo code."""
        kept, priced, adjustments, seller_names = self._reconcile(lines)

        if adjustments or any(
            a.seller_id != b.seller_id or a.quantity != b.quantity for a, b in zip(kept, lines)
        ):
            self.store.replace_cart(context, kept)
            for adjustment in adjustments:
                cart_adjustments_total.labels(reason=adjustment.reason).inc()
            self.logger.info(f"Cart {context.cart_key} reconciled: {len(adjustments)} adjustment(s)")

        summary = self.totals_calculator.calculate(priced, seller_names)

        stored_code = self.store.get_promo_code(context)
        if stored_code:
            promo = self.promo_service.apply_stored(summary, stored_code)
            if not promo.success:
                self.logger.info(f"Stored promo code {stored_code} dropped for cart {context.cart_key}: {promo.message}")
                self.store.set_promo_code(context, None)
            summary = promo.summary

        cart_grand_total.observe(float(summary.grand_total))
        return summary, tuple(adjustments)

    def _current(self, context: CartContext) -> Tuple[CartSummary, Tuple[CartAdjustment, ...]]:
        return self._build(context, self.store.get_items(context))

    def _replace_and_build(self, context: CartContext, lines: Sequence[CartLine]):
        self.store.replace_cart(context, lines)
        return self._current(context)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @BaseService.log_performance
    def get_summary(self, context: CartContext) -> ServiceResult[CartMutationResult]:
        """
        Get the recomputed cart summary.

        Example:
            >>> result = cart_service.get_summary(CartContext.for_user(user))
            >>> if result.ok:
            ...     total = result.value.summary.grand_total
        """
        try:
            with self.store.atomic():
                summary, adjustments = self._current(context)
            return service_ok(
                CartMutationResult(status=CartMutationResult.UNCHANGED, summary=summary, adjustments=adjustments)
            )
        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error getting cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not load the cart")

    @BaseService.log_performance
    def add_to_cart(
        self,
        context: CartContext,
        product_id,
        variant_attributes: Optional[Mapping[str, str]] = None,
        quantity: int = 1,
    ) -> ServiceResult[CartMutationResult]:
        """
        Add a product (or variant) to the cart.

        Quantities <= 0 count as 1. The accepted quantity is limited to what is
        left in stock after the units already in the cart; when that is less
        than requested the result is flagged ``adjusted``.

        Returns:
            ServiceResult with CartMutationResult, or an error:
            - product_not_found: product missing or not listed
            - variant_required: variant-bearing product without a selection
            - variant_unavailable: no variant matches the selection
            - product_out_of_stock: nothing left to add
        """
        requested = quantity if quantity and quantity > 0 else 1
        try:
            product = self.catalog.get_product(product_id)
            if product is None:
                cart_mutations_total.labels(action="add", outcome="not_found").inc()
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "This product is unavailable.")

            attributes = normalize_attributes(variant_attributes)
            if product.has_variants and not attributes:
                cart_mutations_total.labels(action="add", outcome="rejected").inc()
                return service_err(ErrorCodes.VARIANT_REQUIRED, "Please select a variant.")

            availability = self.availability_service.resolve_availability(product, attributes)
            if availability.variant_missing:
                cart_mutations_total.labels(action="add", outcome="rejected").inc()
                return service_err(ErrorCodes.VARIANT_UNAVAILABLE, "Selected variant is unavailable.")

            with self.store.atomic():
                lines = self.store.get_items(context)
                existing = find_line(lines, product.id, attributes)
                existing_quantity = existing.quantity if existing else 0

                available_for_add = max(availability.available_stock - existing_quantity, 0)
                if available_for_add == 0:
                    cart_mutations_total.labels(action="add", outcome="out_of_stock").inc()
                    return service_err(ErrorCodes.PRODUCT_OUT_OF_STOCK, "This item is out of stock.")

                accepted = min(requested, available_for_add)
                line_quantity = existing_quantity + accepted

                if existing is not None:
                    status = CartMutationResult.INCREMENTED
                    lines = [line.with_quantity(line_quantity) if line is existing else line for line in lines]
                else:
                    status = CartMutationResult.ADDED
                    new_line = CartLine(
                        product_id=str(product.id),
                        seller_id=product.seller_id,
                        quantity=accepted,
                        variant_attributes=attributes,
                    )
                    lines = [new_line] + list(lines)

                summary, adjustments = self._replace_and_build(context, lines)

            adjusted = accepted < requested
            message = "Added to cart." if status == CartMutationResult.ADDED else "Quantity updated."
            if adjusted:
                message = f"Only {accepted} more could be added due to limited stock."

            self.logger.info(
                f"Cart {context.cart_key}: {status} product {product.id} requested={requested} accepted={accepted}"
            )
            cart_mutations_total.labels(action="add", outcome="adjusted" if adjusted else "ok").inc()

            return service_ok(
                CartMutationResult(
                    status=status,
                    summary=summary,
                    quantity=accepted,
                    line_quantity=line_quantity,
                    adjusted=adjusted,
                    message=message,
                    adjustments=adjustments,
                )
            )

        except TransientUnavailable:
            raise
        except Exception as e:
            cart_mutations_total.labels(action="add", outcome="error").inc()
            self.logger.error(f"Error adding product {product_id} to cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not add the item to the cart")

    @BaseService.log_performance
    def update_quantity(
        self,
        context: CartContext,
        product_id,
        variant_attributes: Optional[Mapping[str, str]] = None,
        quantity: int = 1,
    ) -> ServiceResult[CartMutationResult]:
        """
        Set the quantity of a cart line.

        A quantity <= 0 removes the line. Otherwise the quantity is clamped to
        [1, available stock]; a line whose product or variant is gone, or has
        no stock left, is removed instead.
        """
        try:
            with self.store.atomic():
                lines = self.store.get_items(context)
                existing = find_line(lines, product_id, variant_attributes)

                if existing is None:
                    summary, adjustments = self._build(context, lines)
                    cart_mutations_total.labels(action="update", outcome="not_found").inc()
                    return service_ok(
                        CartMutationResult(
                            status=CartMutationResult.NOT_FOUND,
                            summary=summary,
                            found=False,
                            message="Item not found in cart.",
                            adjustments=adjustments,
                        )
                    )

                remaining = [line for line in lines if line is not existing]

                if quantity is None or quantity <= 0:
                    summary, adjustments = self._replace_and_build(context, remaining)
                    cart_mutations_total.labels(action="update", outcome="removed").inc()
                    return service_ok(
                        CartMutationResult(
                            status=CartMutationResult.REMOVED,
                            summary=summary,
                            removed=True,
                            message="Item removed from cart.",
                            adjustments=adjustments,
                        )
                    )

                product = self.catalog.get_product(existing.product_id)
                availability = (
                    self.availability_service.resolve_availability(product, existing.variant_attributes)
                    if product is not None
                    else None
                )

                if availability is None or not availability.in_stock:
                    summary, adjustments = self._replace_and_build(context, remaining)
                    cart_mutations_total.labels(action="update", outcome="removed_unavailable").inc()
                    return service_ok(
                        CartMutationResult(
                            status=CartMutationResult.REMOVED,
                            summary=summary,
                            removed=True,
                            message="This item is no longer available and was removed from your cart.",
                            adjustments=adjustments,
                        )
                    )

                new_quantity = min(max(quantity, 1), availability.available_stock)
                lines = [line.with_quantity(new_quantity) if line is existing else line for line in lines]
                summary, adjustments = self._replace_and_build(context, lines)

            adjusted = new_quantity != quantity
            cart_mutations_total.labels(action="update", outcome="adjusted" if adjusted else "ok").inc()
            return service_ok(
                CartMutationResult(
                    status=CartMutationResult.UPDATED,
                    summary=summary,
                    quantity=new_quantity,
                    line_quantity=new_quantity,
                    adjusted=adjusted,
                    message=(
                        f"Only {new_quantity} available; quantity adjusted." if adjusted else "Quantity updated."
                    ),
                    adjustments=adjustments,
                )
            )

        except TransientUnavailable:
            raise
        except Exception as e:
            cart_mutations_total.labels(action="update", outcome="error").inc()
            self.logger.error(f"Error updating product {product_id} in cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not update the cart item")

    @BaseService.log_performance
    def remove_from_cart(
        self, context: CartContext, product_id, variant_attributes: Optional[Mapping[str, str]] = None
    ) -> ServiceResult[CartMutationResult]:
        """
        Remove a line. Idempotent: a missing line reports ``found=False`` and
        leaves the cart untouched.
        """
        try:
            with self.store.atomic():
                lines = self.store.get_items(context)
                remaining = [line for line in lines if not is_same_line(line, product_id, variant_attributes)]

                if len(remaining) == len(lines):
                    summary, adjustments = self._build(context, lines)
                    cart_mutations_total.labels(action="remove", outcome="not_found").inc()
                    return service_ok(
                        CartMutationResult(
                            status=CartMutationResult.NOT_FOUND,
                            summary=summary,
                            found=False,
                            message="Item not found in cart.",
                            adjustments=adjustments,
                        )
                    )

                summary, adjustments = self._replace_and_build(context, remaining)

            self.logger.info(f"Cart {context.cart_key}: removed product {product_id}")
            cart_mutations_total.labels(action="remove", outcome="ok").inc()
            return service_ok(
                CartMutationResult(
                    status=CartMutationResult.REMOVED,
                    summary=summary,
                    removed=True,
                    message="Item removed from cart.",
                    adjustments=adjustments,
                )
            )

        except TransientUnavailable:
            raise
        except Exception as e:
            cart_mutations_total.labels(action="remove", outcome="error").inc()
            self.logger.error(f"Error removing product {product_id} from cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not remove the cart item")

    @BaseService.log_performance
    def clear_cart(self, context: CartContext) -> ServiceResult[CartMutationResult]:
        """Remove every line and the active promo code."""
        try:
            with self.store.atomic():
                self.store.replace_cart(context, [])
                self.store.set_promo_code(context, None)

            self.logger.info(f"Cleared cart {context.cart_key}")
            cart_mutations_total.labels(action="clear", outcome="ok").inc()
            return service_ok(
                CartMutationResult(
                    status=CartMutationResult.CLEARED, summary=CartSummary.empty(), removed=True, message="Cart cleared."
                )
            )

        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error clearing cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not clear the cart")

    @BaseService.log_performance
    def apply_promo(self, context: CartContext, code: Optional[str]) -> ServiceResult[PromoApplicationResult]:
        """
        Apply a promo code to the cart.

        Promo rejections are not errors: they come back as a successful
        ServiceResult whose PromoApplicationResult has ``success=False``.
        """
        try:
            with self.store.atomic():
                summary, _ = self._current(context)
                result = self.promo_service.apply(summary, code)
                if result.success and not result.already_applied:
                    self.store.set_promo_code(context, result.applied_code)
            return service_ok(result)

        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error applying promo code to cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not apply the promo code")

    @BaseService.log_performance
    def clear_promo(self, context: CartContext) -> ServiceResult[PromoApplicationResult]:
        """Remove the active promo code. Always succeeds, even when none is set."""
        try:
            with self.store.atomic():
                self.store.set_promo_code(context, None)
                summary, _ = self._current(context)
            return service_ok(self.promo_service.clear(summary))

        except TransientUnavailable:
            raise
        except Exception as e:
            self.logger.error(f"Error clearing promo code for cart {context.cart_key}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, "Could not remove the promo code")
