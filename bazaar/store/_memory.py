"""
In-memory checkout store.

Note: For tests and single-process demos. Commits are serialized by one
lock; a failed commit is undone by running the recorded compensations in
reverse, so readers never observe a partial order.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from collections.abc import Callable, Iterable

import structlog
from kungfu import Result, Ok, Error

from bazaar._types import OrderId, ProductId, UserId
from bazaar.orders import NewOrder, Order, OrderItem, Product, PromoUsage
from bazaar.promo._types import PromoCode, normalize_code
from bazaar.shipping._types import ShippingRate
from bazaar.errors import StoreError, StoreErrorKind

logger = structlog.get_logger(__name__)

type Compensation = Callable[[], None]


class MemoryStore:
    """
    Dict-backed CheckoutStore.

    latency simulates a remote backend: every call sleeps that long first.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self.products: dict[ProductId, Product] = {}
        self.shipping_rates: dict[str, ShippingRate] = {}
        self.promos: dict[str, PromoCode] = {}
        self.orders: dict[OrderId, Order] = {}
        self.items: list[OrderItem] = []
        self.usages: list[PromoUsage] = []
        self._latency = latency
        self._lock = asyncio.Lock()

    # ═══════════════════════════════════════════════════════════════════════════
    # Seeding
    # ═══════════════════════════════════════════════════════════════════════════

    def add_product(self, product: Product) -> MemoryStore:
        self.products[product.id] = product
        return self

    def add_shipping_rate(self, rate: ShippingRate) -> MemoryStore:
        self.shipping_rates[rate.id] = rate
        return self

    def add_promo(self, promo: PromoCode) -> MemoryStore:
        promo = replace(promo, code=normalize_code(promo.code))
        self.promos[promo.id] = promo
        return self

    def promo(self, code: str) -> PromoCode | None:
        code = normalize_code(code)
        return next((p for p in self.promos.values() if p.code == code), None)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    async def _io(self) -> None:
        await asyncio.sleep(self._latency)

    async def get_products(
        self, ids: Iterable[ProductId]
    ) -> Result[dict[ProductId, Product], StoreError]:
        await self._io()
        return Ok({pid: self.products[pid] for pid in ids if pid in self.products})

    async def get_shipping_rate(
        self, rate_id: str
    ) -> Result[ShippingRate | None, StoreError]:
        await self._io()
        return Ok(self.shipping_rates.get(rate_id))

    async def list_shipping_rates(self) -> Result[list[ShippingRate], StoreError]:
        await self._io()
        return Ok(list(self.shipping_rates.values()))

    async def get_promo(self, code: str) -> Result[PromoCode | None, StoreError]:
        await self._io()
        return Ok(self.promo(code))

    async def count_promo_usage(
        self, promo_id: str, user_id: UserId
    ) -> Result[int, StoreError]:
        await self._io()
        return Ok(sum(
            1 for u in self.usages
            if u.promo_code_id == promo_id and u.user_id == user_id
        ))

    async def get_order(
        self, order_id: OrderId
    ) -> Result[tuple[Order, tuple[OrderItem, ...]] | None, StoreError]:
        await self._io()
        order = self.orders.get(order_id)
        if order is None:
            return Ok(None)
        return Ok((order, tuple(i for i in self.items if i.order_id == order_id)))

    # ═══════════════════════════════════════════════════════════════════════════
    # Atomic commit
    # ═══════════════════════════════════════════════════════════════════════════

    async def place_order(self, new: NewOrder) -> Result[Order, StoreError]:
        await self._io()
        async with self._lock:
            undo: list[Compensation] = []
            try:
                self._insert_order(new.order, undo)
                self._insert_items(new.items, undo)
                if new.usage is not None and not self._redeem_promo(new.usage, undo):
                    self._rollback(undo)
                    return Error(StoreError(
                        StoreErrorKind.CONFLICT,
                        f"Promo {new.usage.promo_code_id} reached max_uses",
                    ))
            except Exception as e:
                self._rollback(undo)
                return Error(StoreError(StoreErrorKind.FAILED, f"Failed to place order: {e}", e))

            return Ok(new.order)

    def _insert_order(self, order: Order, undo: list[Compensation]) -> None:
        if order.id in self.orders:
            raise ValueError(f"Duplicate order id {order.id.value}")
        self.orders[order.id] = order
        undo.append(lambda: self.orders.pop(order.id, None))

    def _insert_items(self, items: tuple[OrderItem, ...], undo: list[Compensation]) -> None:
        start = len(self.items)
        self.items.extend(items)
        undo.append(lambda: self.items.__delitem__(slice(start, start + len(items))))

    def _redeem_promo(self, usage: PromoUsage, undo: list[Compensation]) -> bool:
        """Increment used_count if still under max_uses; record the ledger row."""
        promo = self.promos.get(usage.promo_code_id)
        if promo is None or promo.is_exhausted:
            return False

        self.promos[promo.id] = replace(promo, used_count=promo.used_count + 1)
        undo.append(lambda: self.promos.__setitem__(promo.id, promo))

        self.usages.append(usage)
        undo.append(lambda: self.usages.remove(usage))
        return True

    def _rollback(self, undo: list[Compensation]) -> None:
        """Run compensations in reverse."""
        for compensate in reversed(undo):
            compensate()
        logger.warning("order_rolled_back", steps=len(undo))


__all__ = ("MemoryStore",)
