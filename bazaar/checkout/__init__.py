"""
Checkout — quote and place orders.

    from bazaar import checkout

    coordinator = checkout.OrderPlacementCoordinator(store, config, notifier)
    session = checkout.CheckoutSession(identity, cart)

    quote = await coordinator.quote(session, "dhaka", "SAVE10")
    placed = await coordinator.place_order(session, request)
"""

from bazaar.checkout._session import (
    Identity,
    StaticIdentity,
    CheckoutSession,
    PlaceOrderRequest,
)
from bazaar.checkout._details import validate_details
from bazaar.checkout._notify import (
    ORDER_PLACED,
    Outcome,
    Notifier,
    LoggingNotifier,
    CollectingNotifier,
)
from bazaar.checkout._quote import (
    QuoteInput,
    PricedLine,
    PricedCart,
    Quote,
    QuoteNode,
)
from bazaar.checkout._coordinator import OrderConfirmation, OrderPlacementCoordinator

__all__ = (
    "Identity",
    "StaticIdentity",
    "CheckoutSession",
    "PlaceOrderRequest",
    "validate_details",
    "ORDER_PLACED",
    "Outcome",
    "Notifier",
    "LoggingNotifier",
    "CollectingNotifier",
    "QuoteInput",
    "PricedLine",
    "PricedCart",
    "Quote",
    "QuoteNode",
    "OrderConfirmation",
    "OrderPlacementCoordinator",
)
