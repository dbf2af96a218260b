"""
Orders — persisted checkout results and the status lifecycle.
"""

from bazaar.orders._status import OrderStatus
from bazaar.orders._types import (
    PaymentMethod,
    PaymentInfo,
    ShippingAddress,
    Product,
    OrderItem,
    Order,
    PromoUsage,
    NewOrder,
)

__all__ = (
    "OrderStatus",
    "PaymentMethod",
    "PaymentInfo",
    "ShippingAddress",
    "Product",
    "OrderItem",
    "Order",
    "PromoUsage",
    "NewOrder",
)
