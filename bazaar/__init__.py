"""
bazaar — checkout pricing and order placement for the storefront.

    from bazaar import checkout            # Quote and place orders
    from bazaar import promo               # Promo code rules
    from bazaar import shipping            # Delivery areas and fees
    from bazaar import store               # Memory and SQLAlchemy stores
    from bazaar import pricing             # Totals
"""

from bazaar import errors
from bazaar import config
from bazaar import pricing
from bazaar import cart
from bazaar import orders
from bazaar import promo
from bazaar import shipping
from bazaar import store
from bazaar import checkout
from bazaar._types import (
    Money,
    money,
    UserId,
    ProductId,
    OrderId,
)
from bazaar.config import CheckoutConfig
from bazaar.errors import CheckoutError, CheckoutErrorKind

__version__ = "0.1.0"

__all__ = (
    "errors",
    "config",
    "pricing",
    "cart",
    "orders",
    "promo",
    "shipping",
    "store",
    "checkout",
    "Money",
    "money",
    "UserId",
    "ProductId",
    "OrderId",
    "CheckoutConfig",
    "CheckoutError",
    "CheckoutErrorKind",
)
