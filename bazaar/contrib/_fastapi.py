from typing import Annotated, Any, NoReturn
from collections.abc import Callable

import fastapi
from kungfu import Error, Ok

from bazaar.checkout import CheckoutSession, OrderPlacementCoordinator
from bazaar.errors import CheckoutError, CheckoutErrorKind
from bazaar.contrib._schemas import (
    ErrorOut,
    OrderOut,
    PlaceOrderIn,
    QuoteIn,
    QuoteOut,
    ShippingRateOut,
)

_STATUS: dict[CheckoutErrorKind, int] = {
    CheckoutErrorKind.NOT_AUTHENTICATED: 401,
    CheckoutErrorKind.PROMO_EXHAUSTED: 409,
    CheckoutErrorKind.ORDER_PLACEMENT_FAILED: 500,
    CheckoutErrorKind.UPSTREAM_UNAVAILABLE: 503,
}


def status_for(kind: CheckoutErrorKind) -> int:
    """HTTP status for an error kind; validation errors are 422."""
    return _STATUS.get(kind, 422)


def raise_for(error: CheckoutError) -> NoReturn:
    raise fastapi.HTTPException(
        status_code=status_for(error.kind),
        detail=ErrorOut.from_domain(error).model_dump(mode="json"),
    )


def checkout_router(
    coordinator: OrderPlacementCoordinator,
    session: Callable[..., Any],
) -> fastapi.APIRouter:
    """
    Routes over one coordinator.

    session is a FastAPI dependency returning the request's CheckoutSession.
    """
    router = fastapi.APIRouter()
    Session = Annotated[CheckoutSession, fastapi.Depends(session)]

    @router.get("/shipping-rates")
    async def list_shipping_rates() -> list[ShippingRateOut]:
        match await coordinator.resolver.list_active():
            case Ok(rates):
                return [ShippingRateOut.from_domain(rate) for rate in rates]
            case Error(err):
                raise_for(err)

    @router.post("/checkout/quote")
    async def quote(req: QuoteIn, checkout: Session) -> QuoteOut:
        match await coordinator.quote(checkout, req.shipping_rate_id, req.promo_code):
            case Ok(priced):
                return QuoteOut.from_domain(priced)
            case Error(err):
                raise_for(err)

    @router.post("/checkout/orders", status_code=201)
    async def place_order(req: PlaceOrderIn, checkout: Session) -> OrderOut:
        match await coordinator.place_order(checkout, req.to_domain()):
            case Ok(confirmation):
                return OrderOut.from_domain(confirmation)
            case Error(err):
                raise_for(err)

    return router


def create_app(
    coordinator: OrderPlacementCoordinator,
    session: Callable[..., Any],
) -> fastapi.FastAPI:
    app = fastapi.FastAPI(title="bazaar checkout")
    app.include_router(checkout_router(coordinator, session))
    return app
