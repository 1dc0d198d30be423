"""
Marketplace configuration.

Options are read from ``settings.MARKETPLACE`` on every call so that
``override_settings`` in tests takes effect immediately.

    MARKETPLACE = {
        "CART": {"MAX_ITEMS": 50, "SHIPPING_BASE": "4.99", ...},
        "PROMO": {"CODES": [{"code": "SAVE10", "value": "0.10"}]},
        "REPORTS": {"EXPORT_ROW_LIMIT": 50000, ...},
    }
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)

MAX_ALLOWED_CART_ITEMS = 100

PERCENTAGE = "percentage"
FIXED_AMOUNT = "fixed"


@dataclass(frozen=True)
class ShippingRule:
    base_rate: Decimal = Decimal("0")
    per_item_rate: Decimal = Decimal("0")
    free_shipping_threshold: Optional[Decimal] = None


@dataclass(frozen=True)
class CartOptions:
    max_items: int = 50
    default_shipping: ShippingRule = field(default_factory=ShippingRule)
    shipping_rules: Dict[str, ShippingRule] = field(default_factory=dict)
    platform_commission_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class PromoRule:
    code: str
    value: Decimal
    discount_type: str = PERCENTAGE
    seller_id: Optional[str] = None
    minimum_subtotal: Optional[Decimal] = None
    expires_on: Optional[datetime] = None
    active: bool = True
    description: Optional[str] = None


DEFAULT_PROMO_RULES = (
    PromoRule(code="SAVE10", value=Decimal("0.10"), discount_type=PERCENTAGE, description="10% off your items"),
)


@dataclass(frozen=True)
class ReportOptions:
    export_row_limit: int = 50000
    default_page_size: int = 50
    min_page_size: int = 10
    max_page_size: int = 200
    audit_retention_days: int = 730
    default_window_days: int = 30


def _section(name: str) -> dict:
    return getattr(settings, "MARKETPLACE", {}).get(name, {}) or {}


def _decimal(value, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    return Decimal(str(value))


def _shipping_rule(raw: dict, fallback: ShippingRule) -> ShippingRule:
    return ShippingRule(
        base_rate=max(_decimal(raw.get("base_rate"), fallback.base_rate), Decimal("0")),
        per_item_rate=max(_decimal(raw.get("per_item_rate"), fallback.per_item_rate), Decimal("0")),
        free_shipping_threshold=_decimal(raw.get("free_shipping_threshold"), fallback.free_shipping_threshold),
    )


def get_cart_options() -> CartOptions:
    raw = _section("CART")

    max_items = int(raw.get("MAX_ITEMS", 50))
    if max_items <= 0:
        logger.warning(f"Cart MAX_ITEMS misconfigured as {max_items}. Falling back to 1.")
        max_items = 1
    max_items = min(max_items, MAX_ALLOWED_CART_ITEMS)

    default_shipping = ShippingRule(
        base_rate=max(_decimal(raw.get("SHIPPING_BASE"), Decimal("0")), Decimal("0")),
        per_item_rate=max(_decimal(raw.get("SHIPPING_PER_ITEM"), Decimal("0")), Decimal("0")),
        free_shipping_threshold=_decimal(raw.get("FREE_SHIPPING_THRESHOLD")),
    )

    # Seller ids are tenant ids and compared case-insensitively
    shipping_rules = {
        str(seller_id).strip().lower(): _shipping_rule(rule or {}, default_shipping)
        for seller_id, rule in (raw.get("SHIPPING_RULES") or {}).items()
    }

    rate = _decimal(raw.get("PLATFORM_COMMISSION_RATE"), Decimal("0"))
    rate = min(max(rate, Decimal("0")), Decimal("1"))

    return CartOptions(
        max_items=max_items,
        default_shipping=default_shipping,
        shipping_rules=shipping_rules,
        platform_commission_rate=rate,
    )


def get_promo_rules() -> Tuple[PromoRule, ...]:
    raw = _section("PROMO")
    codes = raw.get("CODES")
    if codes is None:
        return DEFAULT_PROMO_RULES

    rules = []
    for entry in codes:
        expires_on = entry.get("expires_on")
        if isinstance(expires_on, str):
            expires_on = parse_datetime(expires_on)
        if expires_on is not None and timezone.is_naive(expires_on):
            expires_on = timezone.make_aware(expires_on, dt_timezone.utc)
        rules.append(
            PromoRule(
                code=str(entry["code"]).strip().upper(),
                value=_decimal(entry.get("value"), Decimal("0")),
                discount_type=entry.get("discount_type", PERCENTAGE),
                seller_id=entry.get("seller_id"),
                minimum_subtotal=_decimal(entry.get("minimum_subtotal")),
                expires_on=expires_on,
                active=entry.get("active", True),
                description=entry.get("description"),
            )
        )
    return tuple(rules)


def get_report_options() -> ReportOptions:
    raw = _section("REPORTS")
    defaults = ReportOptions()

    min_size = max(int(raw.get("MIN_PAGE_SIZE", defaults.min_page_size)), 1)
    max_size = max(int(raw.get("MAX_PAGE_SIZE", defaults.max_page_size)), min_size)
    export_limit = int(raw.get("EXPORT_ROW_LIMIT", defaults.export_row_limit))

    return ReportOptions(
        export_row_limit=export_limit if export_limit > 0 else defaults.export_row_limit,
        default_page_size=int(raw.get("DEFAULT_PAGE_SIZE", defaults.default_page_size)),
        min_page_size=min_size,
        max_page_size=max_size,
        audit_retention_days=int(raw.get("AUDIT_RETENTION_DAYS", defaults.audit_retention_days)),
        default_window_days=int(raw.get("DEFAULT_WINDOW_DAYS", defaults.default_window_days)),
    )
