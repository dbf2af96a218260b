"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from bazaar import UserId, ProductId
from bazaar.cart import CartLine, CartSnapshot, MemoryCartStore
from bazaar.checkout import CheckoutSession, StaticIdentity
from bazaar.orders import Product
from bazaar.promo import DiscountType, PromoCode
from bazaar.shipping import ShippingRate
from bazaar.store import MemoryStore


# Catalog
PANJABI = Product(ProductId("panjabi"), "Cotton Panjabi", Decimal("900.00"), Decimal("800.00"))
SAREE = Product(ProductId("saree"), "Jamdani Saree", Decimal("400.00"))

DHAKA = ShippingRate("dhaka", "Dhaka", Decimal("60.00"), estimated_days=2)
OUTSIDE = ShippingRate("outside", "Outside Dhaka", Decimal("120.00"), estimated_days=5)

SAVE10 = PromoCode(
    id="promo-save10",
    code="SAVE10",
    discount_type=DiscountType.PERCENTAGE,
    discount_value=Decimal("10"),
    min_order_amount=Decimal("1000.00"),
    max_uses=100,
)


def demo_store(latency: float = 0.01) -> MemoryStore:
    return (
        MemoryStore(latency=latency)
        .add_product(PANJABI)
        .add_product(SAREE)
        .add_shipping_rate(DHAKA)
        .add_shipping_rate(OUTSIDE)
        .add_promo(SAVE10)
    )


def demo_session(user: str = "alice") -> CheckoutSession:
    """Panjabi (sale 800) + Saree (400): subtotal 1200."""
    cart = CartSnapshot((
        CartLine(PANJABI.id, PANJABI.name, PANJABI.price, 1),
        CartLine(SAREE.id, SAREE.name, SAREE.price, 1),
    ))
    return CheckoutSession(StaticIdentity(UserId(user)), MemoryCartStore(cart))


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
