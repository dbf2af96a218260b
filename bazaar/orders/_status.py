"""
Order status lifecycle.

    pending → confirmed → shipped → delivered
    pending | confirmed | shipped → cancelled

Status changes after creation belong to the admin workflow; checkout only
ever creates PENDING orders.
"""

from __future__ import annotations

from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _TRANSITIONS[self]

    @property
    def customer_message(self) -> str:
        """Text for the customer-facing status update notification."""
        return _MESSAGES[self]


_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_MESSAGES: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Your order has been received",
    OrderStatus.CONFIRMED: "Your order has been confirmed",
    OrderStatus.SHIPPED: "Your order has been shipped",
    OrderStatus.DELIVERED: "Your order has been delivered",
    OrderStatus.CANCELLED: "Your order has been cancelled",
}


__all__ = ("OrderStatus",)
