"""
OrderPlacementCoordinator — validate, price, commit, clear, notify.

    coordinator = OrderPlacementCoordinator(store, config, notifier)

    match await coordinator.place_order(session, request):
        case Ok(confirmation):
            confirmation.message  # "Order #1a2b3c4d placed. Total: ৳1140.00"
        case Error(err):
            err.kind

Flow:
    identity → cart → form → quote (live data) → atomic write → clear cart

Validation failures stop before the write and never roll anything back.
The write is one store transaction: order header, items, conditional
used_count increment and usage row. Losing the increment race fails the
whole write with PROMO_EXHAUSTED. The cart is cleared only after commit.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import uuid4
from collections.abc import Callable

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

from bazaar import _upstream
from bazaar._types import OrderId, UserId
from bazaar.cart import CartSnapshot, CartStore
from bazaar.config import CheckoutConfig
from bazaar.errors import CheckoutError, Errors
from bazaar.orders import (
    NewOrder,
    Order,
    OrderItem,
    OrderStatus,
    PaymentInfo,
    PromoUsage,
    ShippingAddress,
)
from bazaar.promo import PromoCodeValidator
from bazaar.promo._validator import utcnow
from bazaar.shipping import ShippingRateResolver
from bazaar.store import CheckoutStore
from bazaar.checkout._details import validate_details
from bazaar.checkout._notify import ORDER_PLACED, LoggingNotifier, Notifier, Outcome
from bazaar.checkout._quote import Quote, QuoteInput, QuoteNode
from bazaar.checkout._session import CheckoutSession, PlaceOrderRequest

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    """What the customer sees after a successful checkout."""

    order: Order
    items: tuple[OrderItem, ...]
    message: str
    pay_to: str | None = None

    @property
    def short_id(self) -> str:
        return self.order.id.short


class OrderPlacementCoordinator:
    def __init__(
        self,
        store: CheckoutStore,
        config: CheckoutConfig | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._config = config or CheckoutConfig()
        self._notifier = notifier or LoggingNotifier()
        self._clock = clock
        self.resolver = ShippingRateResolver(store, self._config)
        self.validator = PromoCodeValidator(store, self._config, clock)

    # ═══════════════════════════════════════════════════════════════════════════
    # Quote
    # ═══════════════════════════════════════════════════════════════════════════

    async def quote(
        self,
        session: CheckoutSession,
        shipping_rate_id: str,
        promo_code: str | None = None,
    ) -> Result[Quote, CheckoutError]:
        """Price the session's cart without writing anything."""
        match await self._open(session):
            case Error(err):
                return Error(err)
            case Ok((user_id, cart)):
                return await self._quote(user_id, cart, shipping_rate_id, promo_code)

    async def _open(
        self, session: CheckoutSession
    ) -> Result[tuple[UserId, CartSnapshot], CheckoutError]:
        user_id = await session.identity.current_user()
        if user_id is None:
            return Error(Errors.not_authenticated())

        cart = await session.cart.get()
        if cart.is_empty:
            return Error(Errors.invalid_cart("Your cart is empty"))
        return Ok((user_id, cart))

    async def _quote(
        self,
        user_id: UserId,
        cart: CartSnapshot,
        shipping_rate_id: str,
        promo_code: str | None,
    ) -> Result[Quote, CheckoutError]:
        return await QuoteNode.execute(QuoteInput(
            store=self._store,
            config=self._config,
            resolver=self.resolver,
            validator=self.validator,
            user_id=user_id,
            cart=cart,
            shipping_rate_id=shipping_rate_id,
            promo_code=promo_code,
        ))

    # ═══════════════════════════════════════════════════════════════════════════
    # Place
    # ═══════════════════════════════════════════════════════════════════════════

    async def place_order(
        self, session: CheckoutSession, request: PlaceOrderRequest
    ) -> Result[OrderConfirmation, CheckoutError]:
        result = await self._place(session, request)

        match result:
            case Ok(confirmation):
                await self._notifier.notify(Outcome(
                    ORDER_PLACED, confirmation.message, confirmation.order.id
                ))
            case Error(err):
                logger.info("checkout_rejected", kind=err.kind.value, reason=err.message)
                await self._notifier.notify(Outcome(err.kind.value, err.message))
        return result

    async def _place(
        self, session: CheckoutSession, request: PlaceOrderRequest
    ) -> Result[OrderConfirmation, CheckoutError]:
        match await self._open(session):
            case Error(err):
                return Error(err)
            case Ok((user_id, cart)):
                pass

        match validate_details(request.address, request.payment):
            case Error(err):
                return Error(err)

        match await self._quote(user_id, cart, request.shipping_rate_id, request.promo_code):
            case Error(err):
                return Error(err)
            case Ok(quote):
                new = self._draft(user_id, quote, request)

        committed = await _upstream.call(
            "Orders",
            lambda: self._store.place_order(new),
            timeout=self._config.timeout_seconds,
            on_conflict=lambda _: Errors.promo_exhausted(new.order.promo_code or ""),
            on_raised=lambda e: Errors.order_placement_failed(cause=e),
        )
        match committed:
            case Error(err):
                logger.warning(
                    "order_write_rejected",
                    order_id=new.order.id.value,
                    user_id=user_id.value,
                    kind=err.kind.value,
                )
                return Error(err)
            case Ok(order):
                logger.info(
                    "order_placed",
                    order_id=order.id.value,
                    user_id=user_id.value,
                    total=str(order.total_amount),
                    promo_code=order.promo_code,
                )

        await self._clear_cart(session.cart, order.id)
        return Ok(self._confirm(order, new.items))

    def _draft(
        self, user_id: UserId, quote: Quote, request: PlaceOrderRequest
    ) -> NewOrder:
        """Build the write from live figures only."""
        order_id = OrderId(str(uuid4()))
        now = self._clock()
        applied = quote.promo

        order = Order(
            id=order_id,
            user_id=user_id,
            total_amount=quote.total,
            shipping_cost=quote.shipping.fee,
            discount_amount=quote.discount,
            shipping_address=_address(request.address, request.payment),
            payment_method=request.payment.method,
            status=OrderStatus.PENDING,
            created_at=now,
            notes=(request.notes or "").strip() or None,
            promo_code=applied.code if applied is not None else None,
            promo_code_id=applied.promo.id if applied is not None else None,
        )
        items = tuple(
            OrderItem(
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                price=line.unit_price,
            )
            for line in quote.lines
        )
        usage = (
            PromoUsage(
                promo_code_id=applied.promo.id,
                user_id=user_id,
                order_id=order_id,
                used_at=now,
            )
            if applied is not None
            else None
        )
        return NewOrder(order=order, items=items, usage=usage)

    async def _clear_cart(self, cart: CartStore, order_id: OrderId) -> None:
        """The order is committed; a cart that fails to clear is only logged."""
        cleared = await L.catching_async(cart.clear, on_error=lambda e: e)
        match cleared:
            case Error(e):
                logger.warning("cart_clear_failed", order_id=order_id.value, error=str(e))

    def _confirm(self, order: Order, items: tuple[OrderItem, ...]) -> OrderConfirmation:
        total = self._config.format(order.total_amount)
        return OrderConfirmation(
            order=order,
            items=items,
            message=f"Order #{order.id.short} placed. Total: {total}",
            pay_to=self._config.payment_accounts.number_for(order.payment_method.value),
        )


def _address(address: ShippingAddress, payment: PaymentInfo) -> ShippingAddress:
    """Payment references travel with the address; dropped for cash on delivery."""
    if not payment.method.is_mobile_banking:
        return replace(address, sender_number=None, transaction_id=None)
    return replace(
        address,
        sender_number=payment.sender_number.strip() if payment.sender_number else None,
        transaction_id=payment.transaction_id.strip() if payment.transaction_id else None,
    )


__all__ = ("OrderConfirmation", "OrderPlacementCoordinator")
