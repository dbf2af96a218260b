"""
Order types — what a successful checkout persists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from bazaar._types import OrderId, ProductId, UserId
from bazaar.orders._status import OrderStatus


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    BKASH = "bkash"
    ROCKET = "rocket"
    NAGAD = "nagad"

    @property
    def is_mobile_banking(self) -> bool:
        """Mobile-banking payments need the sender number and transaction id."""
        return self is not PaymentMethod.CASH_ON_DELIVERY


@dataclass(frozen=True, slots=True)
class PaymentInfo:
    method: PaymentMethod
    sender_number: str | None = None
    transaction_id: str | None = None


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    full_name: str
    phone: str
    address: str
    city: str
    sender_number: str | None = None
    transaction_id: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """Catalog entry as seen by checkout."""

    id: ProductId
    name: str
    price: Decimal
    sale_price: Decimal | None = None
    is_active: bool = True

    @property
    def effective_price(self) -> Decimal:
        """Sale price when set, list price otherwise."""
        return self.sale_price if self.sale_price else self.price


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderItem:
    """
    One purchased line.

    price is the live unit price at purchase time, never recomputed later.
    """

    order_id: OrderId
    product_id: ProductId
    quantity: int
    price: Decimal


@dataclass(frozen=True, slots=True)
class Order:
    id: OrderId
    user_id: UserId
    total_amount: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    status: OrderStatus
    created_at: datetime
    notes: str | None = None
    promo_code: str | None = None
    promo_code_id: str | None = None


@dataclass(frozen=True, slots=True)
class PromoUsage:
    """Usage ledger entry: one per redemption."""

    promo_code_id: str
    user_id: UserId
    order_id: OrderId
    used_at: datetime


@dataclass(frozen=True, slots=True)
class NewOrder:
    """
    Everything the store needs to commit one checkout atomically.

    usage is set when a promo was applied; the store increments the promo's
    used_count conditionally and records the ledger row in the same
    transaction.
    """

    order: Order
    items: tuple[OrderItem, ...]
    usage: PromoUsage | None = None


__all__ = (
    "PaymentMethod",
    "PaymentInfo",
    "ShippingAddress",
    "Product",
    "OrderItem",
    "Order",
    "PromoUsage",
    "NewOrder",
)
