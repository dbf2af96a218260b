"""
Pricing — order total arithmetic.

    total = compute(subtotal, shipping_fee, discount)

All amounts are Money (Decimal, 0.01). The total is never negative.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from collections.abc import Iterable

from bazaar._types import ZERO, money


def compute(subtotal: Decimal, shipping_fee: Decimal, discount: Decimal) -> Decimal:
    """
    Final payable total: subtotal + shipping - discount, floored at zero.

    The promo validator already clamps discounts to the subtotal; the floor
    covers any caller that didn't.
    """
    total = money(subtotal) + money(shipping_fee) - money(discount)
    return max(ZERO, money(total))


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return money(money(unit_price) * quantity)


def subtotal(lines: Iterable[tuple[Decimal, int]]) -> Decimal:
    """Sum of unit_price * quantity over (unit_price, quantity) pairs."""
    return money(sum((line_total(price, qty) for price, qty in lines), ZERO))


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """What the customer sees in the order summary."""

    subtotal: Decimal
    shipping_fee: Decimal
    discount: Decimal
    total: Decimal

    @classmethod
    def of(cls, subtotal: Decimal, shipping_fee: Decimal, discount: Decimal) -> PriceBreakdown:
        return cls(
            subtotal=money(subtotal),
            shipping_fee=money(shipping_fee),
            discount=money(discount),
            total=compute(subtotal, shipping_fee, discount),
        )


__all__ = ("compute", "line_total", "subtotal", "PriceBreakdown")
