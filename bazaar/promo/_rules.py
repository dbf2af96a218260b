"""
Promo rules — pure acceptance checks over an already-loaded promo.

First failing check wins:

    live?  →  under max_uses?  →  under usage_per_user?
           →  effective minimum met?  →  discount

No I/O here; PromoCodeValidator loads the promo, the user's prior usage
and the catalog prices, then calls evaluate().
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from collections.abc import Mapping

from kungfu import Result, Ok, Error

from bazaar._types import ZERO, ProductId, money
from bazaar.errors import CheckoutError, Errors
from bazaar.promo._types import AppliedPromo, AppliesTo, DiscountType, PromoCode


def evaluate(
    promo: PromoCode,
    *,
    subtotal: Decimal,
    cart_product_ids: frozenset[ProductId],
    prior_usage: int,
    prices: Mapping[ProductId, Decimal],
    now: datetime,
) -> Result[AppliedPromo, CheckoutError]:
    """
    Decide whether promo applies to this cart and what it is worth.

    prices maps product id to its live effective price; only consulted for
    SPECIFIC promos.
    """
    if not promo.is_live(now):
        return Error(Errors.promo_not_found(promo.code))

    if promo.is_exhausted:
        return Error(Errors.promo_exhausted(promo.code))

    if promo.usage_per_user is not None and prior_usage >= promo.usage_per_user:
        return Error(Errors.promo_user_limit_reached(promo.code))

    match effective_minimum(promo, cart_product_ids, prices):
        case Error(err):
            return Error(err)
        case Ok(minimum) if money(subtotal) < minimum:
            return Error(Errors.promo_minimum_not_met(promo.code, minimum))

    return Ok(AppliedPromo(promo=promo, discount=discount_for(promo, subtotal)))


def effective_minimum(
    promo: PromoCode,
    cart_product_ids: frozenset[ProductId],
    prices: Mapping[ProductId, Decimal],
) -> Result[Decimal, CheckoutError]:
    """
    Minimum order amount the subtotal must reach.

    For SPECIFIC promos this is the highest price among the promo's
    products that are in the cart, not min_order_amount.
    """
    if promo.applies_to is not AppliesTo.SPECIFIC:
        return Ok(money(promo.min_order_amount))

    eligible = cart_product_ids & (promo.product_ids or frozenset())
    if not eligible:
        return Error(Errors.promo_not_applicable(promo.code))

    if any(pid not in prices for pid in eligible):
        return Error(Errors.invalid_cart("A product in your cart is no longer available"))

    return Ok(max(money(prices[pid]) for pid in eligible))


def discount_for(promo: PromoCode, subtotal: Decimal) -> Decimal:
    """Discount stays between zero and the subtotal."""
    subtotal = money(subtotal)
    match promo.discount_type:
        case DiscountType.PERCENTAGE:
            amount = money(subtotal * promo.discount_value / 100)
        case DiscountType.FIXED:
            amount = money(promo.discount_value)
    return max(ZERO, min(amount, subtotal))


__all__ = ("evaluate", "effective_minimum", "discount_for")
