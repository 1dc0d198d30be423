"""
PromoCodeService - Promo code evaluation

Validates a promo code against a CartSummary and returns the summary with the
discount already applied. The service holds no state: which code is active
for a cart is kept by the cart store and passed in by the caller.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Sequence

from django.utils import timezone

from marketplace.cart.domain.summary import ZERO, CartSummary, money
from marketplace.conf import FIXED_AMOUNT, PromoRule, get_promo_rules
from marketplace.infra.observability.metrics import promo_applications_total
from marketplace.services.base import BaseService


@dataclass(frozen=True)
class PromoApplicationResult:
    success: bool
    message: str
    summary: CartSummary
    applied_code: Optional[str] = None
    already_applied: bool = False

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "applied_code": self.applied_code,
            "already_applied": self.already_applied,
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class PromoEvaluation:
    success: bool
    message: str
    code: str = ""
    discount: Decimal = ZERO

    @classmethod
    def failed(cls, message: str) -> "PromoEvaluation":
        return cls(success=False, message=message)


def normalize_code(value: Optional[str]) -> str:
    return (value or "").strip().upper()


class PromoCodeService(BaseService):
    """
    Service for applying and clearing promo codes.

    Rules:
    - Codes are matched case-insensitively against active rules
    - Expired rules, seller-scoped rules with no matching items and carts below
      the minimum subtotal are rejected with a message
    - Percentage rules discount ``value`` x base, fixed rules ``value``; the
      discount never exceeds the base and is rounded to cents
    - Only one code is active at a time; applying another replaces it
    """

    def __init__(self, rules: Optional[Sequence[PromoRule]] = None, now: Callable = timezone.now):
        super().__init__()
        self._rules = tuple(rules) if rules is not None else None
        self.now = now

    @property
    def rules(self) -> Sequence[PromoRule]:
        return self._rules if self._rules is not None else get_promo_rules()

    def find_rule(self, code: str) -> Optional[PromoRule]:
        for rule in self.rules:
            if rule.active and rule.code.upper() == code:
                return rule
        return None

    def evaluate(self, code: Optional[str], summary: CartSummary) -> PromoEvaluation:
        normalized = normalize_code(code)
        if not normalized:
            return PromoEvaluation.failed("Enter a promo code.")

        rule = self.find_rule(normalized)
        if rule is None:
            return PromoEvaluation.failed("Promo code is invalid.")

        if rule.expires_on is not None and rule.expires_on < self.now():
            return PromoEvaluation.failed("This promo code has expired.")

        base = summary.items_subtotal if not rule.seller_id else summary.seller_subtotal(rule.seller_id)
        if base <= 0:
            return PromoEvaluation.failed("This promo code does not apply to your items.")

        if rule.minimum_subtotal is not None and base < rule.minimum_subtotal:
            return PromoEvaluation.failed("Order does not meet the promo requirements.")

        discount = rule.value if rule.discount_type == FIXED_AMOUNT else base * rule.value
        discount = money(min(discount, base))
        if discount <= 0:
            return PromoEvaluation.failed("Promo code is not applicable.")

        return PromoEvaluation(success=True, message=rule.description or "", code=normalized, discount=discount)

    @BaseService.log_performance
    def apply(self, summary: CartSummary, code: Optional[str]) -> PromoApplicationResult:
        """
        Apply a promo code to a cart summary.

        Args:
            summary: Current summary; its ``applied_promo_code`` is the active code
            code: Code entered by the buyer

        Returns:
            PromoApplicationResult. On failure the summary is returned exactly
            as passed in.

        Example:
            >>> result = promo_service.apply(summary, "save10")
            >>> result.summary.discount_total
            Decimal('10.00')
        """
        if summary.is_empty:
            promo_applications_total.labels(outcome="empty_cart").inc()
            return PromoApplicationResult(
                success=False, message="Add items to your cart before applying a promo code.", summary=summary
            )

        normalized = normalize_code(code)
        active = normalize_code(summary.applied_promo_code)
        if normalized and normalized == active:
            promo_applications_total.labels(outcome="already_applied").inc()
            return PromoApplicationResult(
                success=True,
                message="Promo code already applied.",
                summary=summary,
                applied_code=active,
                already_applied=True,
            )

        evaluation = self.evaluate(normalized, summary.without_discount())
        if not evaluation.success:
            promo_applications_total.labels(outcome="rejected").inc()
            self.logger.info(f"Promo code {normalized!r} rejected: {evaluation.message}")
            return PromoApplicationResult(
                success=False, message=evaluation.message, summary=summary, applied_code=summary.applied_promo_code
            )

        if active:
            self.logger.info(f"Promo code {active} replaced by {evaluation.code}")

        promo_applications_total.labels(outcome="applied").inc()
        return PromoApplicationResult(
            success=True,
            message=evaluation.message or "Promo code applied.",
            summary=summary.without_discount().with_discount(evaluation.discount, evaluation.code),
            applied_code=evaluation.code,
        )

    def apply_stored(self, summary: CartSummary, stored_code: Optional[str]) -> PromoApplicationResult:
        """
        Re-apply the cart's stored code to a freshly computed summary.

        A stored code that no longer qualifies (cart changed, code expired)
        yields a failed result with the discount removed; the caller should
        then forget the code.
        """
        base = summary.without_discount()
        if not normalize_code(stored_code) or base.is_empty:
            return PromoApplicationResult(success=False, message="", summary=base)

        evaluation = self.evaluate(stored_code, base)
        if not evaluation.success:
            return PromoApplicationResult(success=False, message=evaluation.message, summary=base)

        return PromoApplicationResult(
            success=True,
            message=evaluation.message,
            summary=base.with_discount(evaluation.discount, evaluation.code),
            applied_code=evaluation.code,
        )

    def clear(self, summary: CartSummary) -> PromoApplicationResult:
        """Remove any active code. Always succeeds."""
        promo_applications_total.labels(outcome="cleared").inc()
        return PromoApplicationResult(success=True, message="Promo code removed.", summary=summary.without_discount())
