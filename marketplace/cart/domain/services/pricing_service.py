"""
Cart pricing - shipping, totals and seller settlement

Builds a CartSummary from priced lines. All arithmetic uses Decimal and
rounds to cents with ROUND_HALF_UP.
"""

from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Sequence

from marketplace.cart.domain.interfaces import ShippingCalculator
from marketplace.cart.domain.summary import (
    ZERO,
    CartSummary,
    PricedLine,
    SellerGroup,
    SellerSettlement,
    Settlement,
    money,
)
from marketplace.conf import CartOptions, ShippingRule, get_cart_options
from marketplace.services.base import BaseService


class RuleBasedShippingCalculator(ShippingCalculator):
    """
    Shipping from configured per-seller rules.

    A seller without its own rule uses the default rule. Shipping is free once
    the seller subtotal reaches the rule's threshold, otherwise it is
    ``base_rate + per_item_rate * quantity``.
    """

    def __init__(self, options: Optional[CartOptions] = None):
        self._options = options

    @property
    def options(self) -> CartOptions:
        return self._options or get_cart_options()

    def resolve_rule(self, seller_id: str) -> ShippingRule:
        options = self.options
        return options.shipping_rules.get(str(seller_id).strip().lower(), options.default_shipping)

    def compute_shipping(self, seller_id: str, lines: Sequence[PricedLine]) -> Decimal:
        rule = self.resolve_rule(seller_id)
        subtotal = sum((line.line_total for line in lines), ZERO)
        if rule.free_shipping_threshold is not None and subtotal >= rule.free_shipping_threshold:
            return ZERO

        quantity = max(sum(line.quantity for line in lines), 0)
        return money(max(rule.base_rate, ZERO) + max(rule.per_item_rate, ZERO) * quantity)


class CartTotalsCalculator(BaseService):
    """
    Service for aggregating priced lines into a CartSummary.

    Responsibilities:
    - Group lines by seller in order of first appearance
    - Compute seller subtotals and shipping
    - Project platform commission and seller payouts

    Discounts are not applied here; the promo engine works on the result.
    """

    def __init__(self, shipping_calculator: Optional[ShippingCalculator] = None, options: Optional[CartOptions] = None):
        super().__init__()
        self._options = options
        self.shipping_calculator = shipping_calculator or RuleBasedShippingCalculator(options)

    @property
    def options(self) -> CartOptions:
        return self._options or get_cart_options()

    def commission_for(self, subtotal: Decimal) -> Decimal:
        rate = min(max(self.options.platform_commission_rate, Decimal("0")), Decimal("1"))
        return money(subtotal * rate)

    def calculate(self, lines: Sequence[PricedLine], seller_names: Optional[Mapping[str, str]] = None) -> CartSummary:
        """
        Compute totals for priced lines.

        Args:
            lines: Priced lines, in cart order
            seller_names: Optional display names keyed by seller id

        Returns:
            CartSummary without any discount applied
        """
        if not lines:
            return CartSummary.empty()

        seller_names = seller_names or {}
        grouped: Dict[str, List[PricedLine]] = {}
        for line in lines:
            grouped.setdefault(line.seller_id, []).append(line)

        groups = []
        settlements = []
        items_subtotal = ZERO
        shipping_total = ZERO

        for seller_id, seller_lines in grouped.items():
            subtotal = money(sum((line.line_total for line in seller_lines), ZERO))
            shipping = money(self.shipping_calculator.compute_shipping(seller_id, seller_lines))
            groups.append(
                SellerGroup(
                    seller_id=seller_id,
                    seller_name=seller_names.get(seller_id) or "Seller",
                    subtotal=subtotal,
                    shipping=shipping,
                    total=subtotal + shipping,
                    lines=tuple(seller_lines),
                )
            )

            commission = self.commission_for(subtotal)
            settlements.append(
                SellerSettlement(
                    seller_id=seller_id,
                    subtotal=subtotal,
                    shipping=shipping,
                    commission=commission,
                    payout=max(ZERO, subtotal + shipping - commission),
                )
            )

            items_subtotal += subtotal
            shipping_total += shipping

        settlement = Settlement(
            sellers=tuple(settlements),
            platform_commission_total=sum((s.commission for s in settlements), ZERO),
            seller_payout_total=sum((s.payout for s in settlements), ZERO),
        )

        summary = CartSummary(
            seller_groups=tuple(groups),
            items_subtotal=items_subtotal,
            shipping_total=shipping_total,
            grand_total=items_subtotal + shipping_total,
            total_quantity=sum(line.quantity for line in lines),
            settlement=settlement,
        )

        self.logger.debug(
            f"Cart totals calculated: sellers={len(groups)}, subtotal={items_subtotal}, shipping={shipping_total}"
        )
        return summary
