from decimal import Decimal

import pytest

from marketplace.cart.domain.services import CartTotalsCalculator, RuleBasedShippingCalculator
from marketplace.cart.domain.summary import PricedLine
from marketplace.conf import CartOptions, ShippingRule


def priced(product_id, seller_id, unit_price, quantity):
    unit_price = Decimal(unit_price)
    return PricedLine(
        product_id=product_id,
        seller_id=seller_id,
        title=f"Product {product_id}",
        quantity=quantity,
        unit_price=unit_price,
        line_total=unit_price * quantity,
        available_stock=100,
    )


@pytest.mark.unit
class TestShippingCalculatorUnit:
    def setup_method(self):
        self.options = CartOptions(
            default_shipping=ShippingRule(
                base_rate=Decimal("5.00"), per_item_rate=Decimal("1.00"), free_shipping_threshold=Decimal("100")
            ),
            shipping_rules={"seller-b": ShippingRule(base_rate=Decimal("2.50"))},
        )
        self.calculator = RuleBasedShippingCalculator(self.options)

    def test_base_plus_per_item(self):
        lines = [priced("1", "seller-a", "10.00", 3)]
        assert self.calculator.compute_shipping("seller-a", lines) == Decimal("8.00")

    def test_free_at_threshold(self):
        lines = [priced("1", "seller-a", "50.00", 2)]
        assert self.calculator.compute_shipping("seller-a", lines) == Decimal("0.00")

    def test_seller_rule_matched_case_insensitively(self):
        lines = [priced("1", "SELLER-B", "10.00", 4)]
        assert self.calculator.compute_shipping("SELLER-B", lines) == Decimal("2.50")


@pytest.mark.unit
class TestCartTotalsCalculatorUnit:
    def setup_method(self):
        self.options = CartOptions(
            default_shipping=ShippingRule(base_rate=Decimal("4.00")),
            platform_commission_rate=Decimal("0.10"),
        )
        self.calculator = CartTotalsCalculator(options=self.options)

    def test_empty_cart(self):
        summary = self.calculator.calculate([])

        assert summary.is_empty
        assert summary.grand_total == Decimal("0.00")
        assert summary.total_quantity == 0

    def test_groups_by_seller_in_first_seen_order(self):
        lines = [
            priced("1", "seller-b", "10.00", 1),
            priced("2", "seller-a", "5.00", 2),
            priced("3", "seller-b", "1.25", 4),
        ]

        summary = self.calculator.calculate(lines, {"seller-a": "Alpha"})

        assert [group.seller_id for group in summary.seller_groups] == ["seller-b", "seller-a"]
        group_b, group_a = summary.seller_groups
        assert group_b.subtotal == Decimal("15.00")
        assert group_b.seller_name == "Seller"
        assert group_a.seller_name == "Alpha"
        assert group_a.total == Decimal("14.00")

    def test_totals_are_consistent(self):
        lines = [priced("1", "seller-a", "19.99", 3), priced("2", "seller-b", "0.33", 3)]

        summary = self.calculator.calculate(lines)

        assert summary.items_subtotal == sum(group.subtotal for group in summary.seller_groups)
        assert summary.shipping_total == sum(group.shipping for group in summary.seller_groups)
        assert summary.grand_total == summary.items_subtotal + summary.shipping_total
        assert summary.items_subtotal == Decimal("60.96")
        assert summary.shipping_total == Decimal("8.00")
        assert summary.total_quantity == 6

    def test_settlement_projects_commission_and_payout(self):
        summary = self.calculator.calculate([priced("1", "seller-a", "33.35", 1)])
        seller = summary.settlement.sellers[0]

        # 10% of 33.35 rounds half up to 3.34
        assert seller.commission == Decimal("3.34")
        assert seller.payout == Decimal("33.35") + Decimal("4.00") - Decimal("3.34")
        assert summary.settlement.platform_commission_total == Decimal("3.34")
