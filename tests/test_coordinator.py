import asyncio
from dataclasses import replace
from decimal import Decimal

from kungfu import Error, Ok
from structlog.testing import capture_logs

from bazaar.cart import CartSnapshot, MemoryCartStore
from bazaar.checkout import (
    ORDER_PLACED,
    CheckoutSession,
    CollectingNotifier,
    OrderPlacementCoordinator,
    StaticIdentity,
)
from bazaar.errors import CheckoutErrorKind
from bazaar.orders import OrderStatus, PaymentInfo, PaymentMethod
from bazaar.store import MemoryStore, SQLAlchemyStore
from tests.conftest import (
    ALICE,
    BOB,
    LAST_ONE,
    PANJABI,
    RETIRED,
    SAREE,
    SAVE10,
    clock,
    error_of,
    line,
    request_for,
    seeded,
    session_for,
    unwrap,
)

D = Decimal


# ═══════════════════════════════════════════════════════════════════════════════
# Happy path
# ═══════════════════════════════════════════════════════════════════════════════


async def test_end_to_end_dhaka_save10(coordinator, store, notifier) -> None:
    session = session_for()

    confirmation = unwrap(await coordinator.place_order(session, request_for("SAVE10")))

    order = confirmation.order
    assert order.total_amount == D("1140.00")
    assert order.shipping_cost == D("60.00")
    assert order.discount_amount == D("120.00")
    assert order.status is OrderStatus.PENDING
    assert order.promo_code == "SAVE10"
    assert order.promo_code_id == SAVE10.id
    assert order.user_id == ALICE

    assert confirmation.short_id == order.id.value[:8]
    assert confirmation.message == f"Order #{confirmation.short_id} placed. Total: ৳1140.00"

    assert store.orders[order.id] == order
    assert [(i.product_id, i.price) for i in store.items] == [
        (PANJABI.id, D("800.00")),
        (SAREE.id, D("400.00")),
    ]
    assert store.promo("SAVE10").used_count == 1
    assert [(u.promo_code_id, u.user_id, u.order_id) for u in store.usages] == [
        (SAVE10.id, ALICE, order.id)
    ]

    assert (await session.cart.get()).is_empty
    assert notifier.last is not None
    assert notifier.last.kind == ORDER_PLACED
    assert notifier.last.order_id == order.id


async def test_order_without_promo(coordinator, store) -> None:
    confirmation = unwrap(await coordinator.place_order(session_for(), request_for()))
    assert confirmation.order.total_amount == D("1260.00")
    assert confirmation.order.discount_amount == D("0.00")
    assert confirmation.order.promo_code is None
    assert store.usages == []


async def test_client_prices_are_ignored(coordinator, store) -> None:
    # browser still shows the old list price and a bogus saree price
    cart = CartSnapshot((line(PANJABI, unit_price=D("1.00")), line(SAREE, unit_price=D("0.01"))))

    confirmation = unwrap(await coordinator.place_order(session_for(cart=cart), request_for()))

    assert [i.price for i in confirmation.items] == [D("800.00"), D("400.00")]
    assert confirmation.order.total_amount == D("1260.00")


async def test_quantities_multiply(coordinator) -> None:
    cart = CartSnapshot((line(SAREE, quantity=3),))
    quote = unwrap(await coordinator.quote(session_for(cart=cart), "outside"))
    assert quote.breakdown.subtotal == D("1200.00")
    assert quote.total == D("1320.00")


async def test_mobile_banking_references_are_kept(coordinator) -> None:
    payment = PaymentInfo(PaymentMethod.BKASH, " 01811111111 ", "TX123")
    confirmation = unwrap(
        await coordinator.place_order(session_for(), request_for(payment=payment))
    )
    address = confirmation.order.shipping_address
    assert address.sender_number == "01811111111"
    assert address.transaction_id == "TX123"
    assert confirmation.order.payment_method is PaymentMethod.BKASH


async def test_logs_the_placed_order(coordinator) -> None:
    with capture_logs() as logs:
        confirmation = unwrap(await coordinator.place_order(session_for(), request_for()))

    placed = [e for e in logs if e["event"] == "order_placed"]
    assert placed and placed[0]["order_id"] == confirmation.order.id.value


# ═══════════════════════════════════════════════════════════════════════════════
# Quote
# ═══════════════════════════════════════════════════════════════════════════════


async def test_quote_prices_without_writing(coordinator, store) -> None:
    session = session_for()
    quote = unwrap(await coordinator.quote(session, "dhaka", "save10"))

    assert quote.breakdown.subtotal == D("1200.00")
    assert quote.shipping.fee == D("60.00")
    assert quote.discount == D("120.00")
    assert quote.total == D("1140.00")
    assert quote.promo is not None and quote.promo.code == "SAVE10"

    assert store.orders == {}
    assert store.promo("SAVE10").used_count == 0
    assert not (await session.cart.get()).is_empty


async def test_quote_reports_shipping_before_promo(coordinator) -> None:
    result = await coordinator.quote(session_for(), "mars", "NOPE")
    assert error_of(result).kind is CheckoutErrorKind.INVALID_SHIPPING_AREA


async def test_quote_needs_a_user(coordinator) -> None:
    result = await coordinator.quote(session_for(user=None), "dhaka")
    assert error_of(result).kind is CheckoutErrorKind.NOT_AUTHENTICATED


# ═══════════════════════════════════════════════════════════════════════════════
# Rejections before the write
# ═══════════════════════════════════════════════════════════════════════════════


async def test_not_authenticated_comes_first(coordinator, store, notifier) -> None:
    session = CheckoutSession(StaticIdentity(None), MemoryCartStore())

    result = await coordinator.place_order(session, request_for("NOPE", shipping_rate_id="mars"))

    assert error_of(result).kind is CheckoutErrorKind.NOT_AUTHENTICATED
    assert error_of(result).kind.is_fatal
    assert store.orders == {}
    assert notifier.last.kind == "not_authenticated"


async def test_empty_cart(coordinator) -> None:
    result = await coordinator.place_order(session_for(cart=CartSnapshot()), request_for())
    assert error_of(result).kind is CheckoutErrorKind.INVALID_CART


async def test_unavailable_product(coordinator, store) -> None:
    cart = CartSnapshot((line(SAREE), line(RETIRED)))
    result = await coordinator.place_order(session_for(cart=cart), request_for())
    assert error_of(result).kind is CheckoutErrorKind.INVALID_CART
    assert store.orders == {}


async def test_missing_details(coordinator) -> None:
    address = replace(request_for().address, city=" ", phone="")
    result = await coordinator.place_order(session_for(), request_for(address=address))
    err = error_of(result)
    assert err.kind is CheckoutErrorKind.INVALID_DETAILS
    assert err.fields == ("phone", "city")


async def test_mobile_banking_needs_transaction_id(coordinator) -> None:
    payment = PaymentInfo(PaymentMethod.NAGAD, sender_number="01911111111")
    result = await coordinator.place_order(session_for(), request_for(payment=payment))
    assert error_of(result).fields == ("transaction_id",)


async def test_invalid_area_keeps_cart(coordinator, store) -> None:
    session = session_for()
    result = await coordinator.place_order(session, request_for(shipping_rate_id="sylhet"))

    assert error_of(result).kind is CheckoutErrorKind.INVALID_SHIPPING_AREA
    assert not (await session.cart.get()).is_empty
    assert store.orders == {}


async def test_promo_minimum_not_met(coordinator, store) -> None:
    cart = CartSnapshot((line(SAREE),))
    result = await coordinator.place_order(session_for(cart=cart), request_for("SAVE10"))
    assert error_of(result).kind is CheckoutErrorKind.PROMO_MINIMUM_NOT_MET
    assert store.orders == {}


async def test_every_failure_is_notified(coordinator, notifier) -> None:
    await coordinator.place_order(session_for(), request_for("NOPE"))
    await coordinator.place_order(session_for(), request_for(shipping_rate_id="mars"))
    assert [o.kind for o in notifier.outcomes] == ["promo_not_found", "invalid_shipping_area"]
    assert not any(o.ok for o in notifier.outcomes)


# ═══════════════════════════════════════════════════════════════════════════════
# Write phase
# ═══════════════════════════════════════════════════════════════════════════════


async def test_last_use_race(config) -> None:
    # latency lets both checkouts pass validation before either commits
    store = seeded(latency=0.01)
    coordinator = OrderPlacementCoordinator(store, config, CollectingNotifier(), clock=clock)

    results = await asyncio.gather(
        coordinator.place_order(session_for(ALICE), request_for("LASTONE")),
        coordinator.place_order(session_for(BOB), request_for("LASTONE")),
    )

    won = [unwrap(r) for r in results if isinstance(r, Ok)]
    lost = [error_of(r) for r in results if isinstance(r, Error)]
    assert len(won) == 1
    assert [e.kind for e in lost] == [CheckoutErrorKind.PROMO_EXHAUSTED]
    assert won[0].order.discount_amount == D("100.00")
    assert store.promo("LASTONE").used_count == 1
    assert len(store.orders) == 1
    assert len(store.usages) == 1


async def test_exhausted_promo_rejected_up_front(coordinator, store) -> None:
    store.add_promo(replace(LAST_ONE, used_count=1))
    result = await coordinator.place_order(session_for(), request_for("lastone"))
    assert error_of(result).kind is CheckoutErrorKind.PROMO_EXHAUSTED


async def test_write_failure_leaves_nothing_behind(coordinator, store, monkeypatch) -> None:
    def boom(usage, undo):
        raise RuntimeError("lost connection")

    monkeypatch.setattr(store, "_redeem_promo", boom)
    session = session_for()

    result = await coordinator.place_order(session, request_for("SAVE10"))

    assert error_of(result).kind is CheckoutErrorKind.ORDER_PLACEMENT_FAILED
    assert store.orders == {}
    assert store.items == []
    assert store.promo("SAVE10").used_count == 0
    assert not (await session.cart.get()).is_empty


async def test_slow_store_is_upstream_unavailable(config) -> None:
    store = seeded(latency=0.5)
    notifier = CollectingNotifier()
    coordinator = OrderPlacementCoordinator(
        store, config.with_timeout(seconds=0.05), notifier, clock=clock
    )

    result = await coordinator.place_order(session_for(), request_for())

    assert error_of(result).kind is CheckoutErrorKind.UPSTREAM_UNAVAILABLE
    assert store.orders == {}
    assert notifier.last.kind == "upstream_unavailable"


class SlowCommitStore(MemoryStore):
    async def place_order(self, new):
        await asyncio.sleep(1.0)
        return await super().place_order(new)


async def test_write_timeout_is_upstream_unavailable(config) -> None:
    store = seeded(store_class=SlowCommitStore)
    coordinator = OrderPlacementCoordinator(
        store, config.with_timeout(seconds=0.2), CollectingNotifier(), clock=clock
    )
    session = session_for()

    result = await coordinator.place_order(session, request_for("SAVE10"))

    assert error_of(result).kind is CheckoutErrorKind.UPSTREAM_UNAVAILABLE
    assert store.orders == {}
    assert store.items == []
    assert store.usages == []
    assert store.promo("SAVE10").used_count == 0
    assert not (await session.cart.get()).is_empty


class RaisingStore(MemoryStore):
    async def place_order(self, new):
        raise RuntimeError("disk full")


async def test_raising_write_is_order_placement_failed(config) -> None:
    store = seeded(store_class=RaisingStore)
    notifier = CollectingNotifier()
    coordinator = OrderPlacementCoordinator(store, config, notifier, clock=clock)
    session = session_for()

    result = await coordinator.place_order(session, request_for())

    err = error_of(result)
    assert err.kind is CheckoutErrorKind.ORDER_PLACEMENT_FAILED
    assert isinstance(err.cause, RuntimeError)
    assert notifier.last.kind == "order_placement_failed"
    assert not (await session.cart.get()).is_empty


class BrokenCart(MemoryCartStore):
    async def clear(self) -> None:
        raise OSError("storage quota exceeded")


async def test_cart_clear_failure_does_not_fail_order(coordinator, store) -> None:
    session = CheckoutSession(StaticIdentity(ALICE), BrokenCart(CartSnapshot((line(SAREE),))))

    confirmation = unwrap(await coordinator.place_order(session, request_for()))

    assert confirmation.order.id in store.orders


async def test_against_sqlalchemy_store(sql_store: SQLAlchemyStore, config) -> None:
    coordinator = OrderPlacementCoordinator(sql_store, config, CollectingNotifier(), clock=clock)

    first = unwrap(await coordinator.place_order(session_for(ALICE), request_for("LASTONE")))
    second = await coordinator.place_order(session_for(BOB), request_for("LASTONE"))

    assert first.order.total_amount == D("1160.00")
    assert error_of(second).kind is CheckoutErrorKind.PROMO_EXHAUSTED

    order, items = unwrap(await sql_store.get_order(first.order.id))
    assert order.total_amount == D("1160.00")
    assert len(items) == 2
