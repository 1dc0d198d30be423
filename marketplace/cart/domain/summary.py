"""
Priced cart values.

CartSummary keeps these relations:
    items_subtotal = sum of seller group subtotals
    shipping_total = sum of seller group shipping
    grand_total    = max(0, items_subtotal + shipping_total - discount_total)
"""

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Tuple

ZERO = Decimal("0.00")
TWO_PLACES = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    seller_id: str
    title: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    available_stock: int
    variant_attributes: Dict[str, str] = field(default_factory=dict)
    variant_label: str = ""

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "seller_id": self.seller_id,
            "title": self.title,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "line_total": str(self.line_total),
            "available_stock": self.available_stock,
            "variant_attributes": dict(self.variant_attributes),
            "variant_label": self.variant_label,
        }


@dataclass(frozen=True)
class SellerGroup:
    seller_id: str
    seller_name: str
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    lines: Tuple[PricedLine, ...] = ()

    @property
    def quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "seller_id": self.seller_id,
            "seller_name": self.seller_name,
            "subtotal": str(self.subtotal),
            "shipping": str(self.shipping),
            "total": str(self.total),
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class SellerSettlement:
    seller_id: str
    subtotal: Decimal
    shipping: Decimal
    commission: Decimal
    payout: Decimal


@dataclass(frozen=True)
class Settlement:
    """Projected platform commission and seller payouts for the cart."""

    sellers: Tuple[SellerSettlement, ...] = ()
    platform_commission_total: Decimal = ZERO
    seller_payout_total: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "sellers": [
                {
                    "seller_id": seller.seller_id,
                    "subtotal": str(seller.subtotal),
                    "shipping": str(seller.shipping),
                    "commission": str(seller.commission),
                    "payout": str(seller.payout),
                }
                for seller in self.sellers
            ],
            "platform_commission_total": str(self.platform_commission_total),
            "seller_payout_total": str(self.seller_payout_total),
        }


@dataclass(frozen=True)
class CartSummary:
    seller_groups: Tuple[SellerGroup, ...] = ()
    items_subtotal: Decimal = ZERO
    shipping_total: Decimal = ZERO
    grand_total: Decimal = ZERO
    total_quantity: int = 0
    settlement: Settlement = field(default_factory=Settlement)
    discount_total: Decimal = ZERO
    applied_promo_code: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return len(self.seller_groups) == 0

    @classmethod
    def empty(cls) -> "CartSummary":
        return cls()

    def seller_subtotal(self, seller_id: str) -> Decimal:
        """Subtotal of one seller's lines; seller ids compare case-insensitively."""
        wanted = str(seller_id).strip().casefold()
        return sum(
            (group.subtotal for group in self.seller_groups if group.seller_id.casefold() == wanted),
            ZERO,
        )

    def with_discount(self, discount: Decimal, code: str) -> "CartSummary":
        """Apply a discount capped at subtotal + shipping, rounding to cents."""
        gross = self.items_subtotal + self.shipping_total
        discount = money(min(max(discount, ZERO), gross))
        return replace(
            self,
            discount_total=discount,
            applied_promo_code=code,
            grand_total=money(max(ZERO, gross - discount)),
        )

    def without_discount(self) -> "CartSummary":
        return replace(
            self,
            discount_total=ZERO,
            applied_promo_code=None,
            grand_total=money(self.items_subtotal + self.shipping_total),
        )

    def to_dict(self) -> dict:
        return {
            "seller_groups": [group.to_dict() for group in self.seller_groups],
            "items_subtotal": str(self.items_subtotal),
            "shipping_total": str(self.shipping_total),
            "discount_total": str(self.discount_total),
            "grand_total": str(self.grand_total),
            "total_quantity": self.total_quantity,
            "applied_promo_code": self.applied_promo_code,
            "is_empty": self.is_empty,
            "settlement": self.settlement.to_dict(),
        }


@dataclass(frozen=True)
class CartAdjustment:
    """A correction made while reconciling a stored cart against the live catalog."""

    REMOVED_UNAVAILABLE = "removed_unavailable"
    REMOVED_OUT_OF_STOCK = "removed_out_of_stock"
    CLAMPED_TO_STOCK = "clamped_to_stock"

    product_id: str
    reason: str
    previous_quantity: int
    quantity: int
    variant_attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def removed(self) -> bool:
        return self.quantity == 0

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "reason": self.reason,
            "previous_quantity": self.previous_quantity,
            "quantity": self.quantity,
            "variant_attributes": dict(self.variant_attributes),
        }
