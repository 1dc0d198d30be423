import logging
from typing import List, Optional, Sequence

from django.db import OperationalError, transaction

from marketplace.cart.domain.interfaces import CartStore
from marketplace.cart.domain.lines import CartContext, CartLine, merge_lines
from marketplace.cart.domain.models import Cart, CartItem
from marketplace.conf import CartOptions, get_cart_options
from marketplace.domain.exceptions import TransientUnavailable

logger = logging.getLogger(__name__)


class DjangoCartStore(CartStore):
    """
    Cart persistence over the ORM.

    ``replace_cart`` rewrites all lines of the cart in one transaction. Duplicate
    lines are merged and the line count is capped at the configured maximum.
    Concurrent writers to the same cart are last-write-wins.
    """

    def __init__(self, options: Optional[CartOptions] = None):
        self._options = options

    @property
    def options(self) -> CartOptions:
        return self._options or get_cart_options()

    def atomic(self):
        return transaction.atomic()

    def _cart(self, context: CartContext, create: bool = False) -> Optional[Cart]:
        try:
            if create:
                cart, created = Cart.objects.get_or_create(
                    cart_key=context.cart_key, defaults={"user_id": context.user_id}
                )
                if created:
                    logger.debug(f"Created cart {context.cart_key}")
                return cart
            return Cart.objects.filter(cart_key=context.cart_key).first()
        except OperationalError as e:
            raise TransientUnavailable(f"Cart store unavailable: {e}") from e

    def get_items(self, context: CartContext) -> List[CartLine]:
        cart = self._cart(context)
        if cart is None:
            return []
        lines = [
            CartLine(
                product_id=str(item.product_id),
                seller_id=item.seller_id,
                quantity=item.quantity,
                variant_attributes=dict(item.variant_attributes or {}),
            )
            for item in cart.items.all()
        ]
        return merge_lines(lines, self.options.max_items)

    def replace_cart(self, context: CartContext, lines: Sequence[CartLine]) -> None:
        lines = merge_lines(lines, self.options.max_items)
        try:
            with transaction.atomic():
                cart = self._cart(context, create=bool(lines))
                if cart is None:
                    return
                cart.items.all().delete()
                CartItem.objects.bulk_create(
                    [
                        CartItem(
                            cart=cart,
                            product_id=line.product_id,
                            seller_id=line.seller_id,
                            quantity=line.quantity,
                            variant_attributes=line.variant_attributes,
                            position=position,
                        )
                        for position, line in enumerate(lines)
                    ]
                )
                cart.save(update_fields=["updated_at"])
        except OperationalError as e:
            raise TransientUnavailable(f"Cart store unavailable: {e}") from e

        logger.debug(f"Cart {context.cart_key} stored with {len(lines)} line(s)")

    def get_promo_code(self, context: CartContext) -> Optional[str]:
        cart = self._cart(context)
        if cart is None or not cart.promo_code:
            return None
        return cart.promo_code

    def set_promo_code(self, context: CartContext, code: Optional[str]) -> None:
        cart = self._cart(context, create=bool(code))
        if cart is None:
            return
        cart.promo_code = code or ""
        cart.save(update_fields=["promo_code", "updated_at"])
