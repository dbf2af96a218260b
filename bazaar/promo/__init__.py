"""
Promo codes — lookup, acceptance rules and discount math.

    from bazaar import promo

    validator = promo.PromoCodeValidator(store, config)
    applied = await validator.check(code, subtotal, product_ids, user_id)

evaluate() is the pure core and needs no store.
"""

from bazaar.promo._types import (
    DiscountType,
    AppliesTo,
    PromoCode,
    AppliedPromo,
    normalize_code,
)
from bazaar.promo._rules import evaluate, effective_minimum, discount_for
from bazaar.promo._validator import PromoCodeValidator

__all__ = (
    "DiscountType",
    "AppliesTo",
    "PromoCode",
    "AppliedPromo",
    "normalize_code",
    "evaluate",
    "effective_minimum",
    "discount_for",
    "PromoCodeValidator",
)
