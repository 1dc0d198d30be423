from .cart_service import CartMutationResult, CartService
from .inventory_service import AvailabilityService, ProductAvailability
from .pricing_service import CartTotalsCalculator, RuleBasedShippingCalculator
from .promo_service import PromoApplicationResult, PromoCodeService

__all__ = [
    "AvailabilityService",
    "CartMutationResult",
    "CartService",
    "CartTotalsCalculator",
    "ProductAvailability",
    "PromoApplicationResult",
    "PromoCodeService",
    "RuleBasedShippingCalculator",
]
