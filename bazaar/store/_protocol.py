"""
Checkout store — typed persistence protocol.

All methods return Result for explicit error handling. Implementations:
MemoryStore (tests, demos) and SQLAlchemyStore.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol
from collections.abc import Iterable

from kungfu import Result

from bazaar._types import OrderId, ProductId, UserId
from bazaar.errors import StoreError, StoreErrorKind

if TYPE_CHECKING:
    from bazaar.orders import NewOrder, Order, OrderItem, Product
    from bazaar.promo import PromoCode
    from bazaar.shipping import ShippingRate


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutStore(Protocol):
    """
    Relational store behind checkout.

    place_order must be all-or-nothing: the order header, its items, the
    conditional used_count increment and the usage ledger row commit
    together or not at all.
    """

    async def get_products(
        self, ids: Iterable[ProductId]
    ) -> Result[dict[ProductId, Product], StoreError]:
        """Products by id. Unknown ids are simply absent from the mapping."""
        ...

    async def get_shipping_rate(
        self, rate_id: str
    ) -> Result[ShippingRate | None, StoreError]:
        ...

    async def list_shipping_rates(self) -> Result[list[ShippingRate], StoreError]:
        ...

    async def get_promo(self, code: str) -> Result[PromoCode | None, StoreError]:
        """Promo by normalized (uppercase) code, live or not."""
        ...

    async def count_promo_usage(
        self, promo_id: str, user_id: UserId
    ) -> Result[int, StoreError]:
        """How many times this user has redeemed this promo."""
        ...

    async def place_order(self, new: NewOrder) -> Result[Order, StoreError]:
        """
        Commit a checkout atomically.

        Returns Error(CONFLICT) if the promo hit max_uses before the commit.
        """
        ...

    async def get_order(
        self, order_id: OrderId
    ) -> Result[tuple[Order, tuple[OrderItem, ...]] | None, StoreError]:
        ...


__all__ = (
    "StoreErrorKind",
    "StoreError",
    "CheckoutStore",
)
