"""
Checkout session — who is checking out, with what cart, and what they asked for.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from bazaar._types import UserId
from bazaar.cart import CartStore
from bazaar.orders import PaymentInfo, ShippingAddress


class Identity(Protocol):
    """Identity provider for the current request."""

    async def current_user(self) -> UserId | None:
        """Signed-in user, or None when there is no session."""
        ...


@dataclass(frozen=True, slots=True)
class StaticIdentity:
    """Fixed identity. Used by tests and by adapters that resolve the user up front."""

    user_id: UserId | None = None

    async def current_user(self) -> UserId | None:
        return self.user_id


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    identity: Identity
    cart: CartStore


@dataclass(frozen=True, slots=True)
class PlaceOrderRequest:
    """
    The checkout form.

    Only ids and customer-entered text; every amount is recomputed.
    """

    shipping_rate_id: str
    payment: PaymentInfo
    address: ShippingAddress
    promo_code: str | None = None
    notes: str | None = None


__all__ = ("Identity", "StaticIdentity", "CheckoutSession", "PlaceOrderRequest")
