from decimal import Decimal

import pytest
from django.test import override_settings

from marketplace.conf import (
    DEFAULT_PROMO_RULES,
    MAX_ALLOWED_CART_ITEMS,
    get_cart_options,
    get_promo_rules,
    get_report_options,
)


@pytest.mark.unit
class TestMarketplaceConf:
    @override_settings(MARKETPLACE={"CART": {"MAX_ITEMS": 0}})
    def test_misconfigured_max_items_falls_back_to_one(self):
        assert get_cart_options().max_items == 1

    @override_settings(MARKETPLACE={"CART": {"MAX_ITEMS": 10_000}})
    def test_max_items_has_a_ceiling(self):
        assert get_cart_options().max_items == MAX_ALLOWED_CART_ITEMS

    @override_settings(
        MARKETPLACE={
            "CART": {
                "SHIPPING_BASE": "3.00",
                "SHIPPING_RULES": {" Seller-X ": {"base_rate": "1.00", "free_shipping_threshold": "25"}},
                "PLATFORM_COMMISSION_RATE": "1.5",
            }
        }
    )
    def test_shipping_rules_and_commission(self):
        options = get_cart_options()

        assert options.default_shipping.base_rate == Decimal("3.00")
        assert options.shipping_rules["seller-x"].base_rate == Decimal("1.00")
        assert options.shipping_rules["seller-x"].free_shipping_threshold == Decimal("25")
        assert options.platform_commission_rate == Decimal("1")

    @override_settings(MARKETPLACE={})
    def test_default_promo_rules(self):
        assert get_promo_rules() == DEFAULT_PROMO_RULES

    @override_settings(
        MARKETPLACE={"PROMO": {"CODES": [{"code": " spring ", "value": "5", "discount_type": "fixed", "expires_on": "2030-01-01T00:00:00"}]}}
    )
    def test_configured_promo_rules(self):
        (rule,) = get_promo_rules()

        assert rule.code == "SPRING"
        assert rule.value == Decimal("5")
        assert rule.expires_on.tzinfo is not None

    @override_settings(MARKETPLACE={"REPORTS": {"MIN_PAGE_SIZE": 20, "MAX_PAGE_SIZE": 5, "EXPORT_ROW_LIMIT": -1}})
    def test_report_options_are_sanitized(self):
        options = get_report_options()

        assert options.min_page_size == 20
        assert options.max_page_size == 20
        assert options.export_row_limit == 50000
