"""
FastAPI integration for checkout.

    from bazaar.contrib import fastapi

    app = fastapi.create_app(coordinator, session=get_session)

Routes:
    GET  /shipping-rates
    POST /checkout/quote
    POST /checkout/orders
"""

from bazaar.contrib._fastapi import (
    checkout_router,
    create_app,
    raise_for,
    status_for,
)

__all__ = (
    "checkout_router",
    "create_app",
    "raise_for",
    "status_for",
)
