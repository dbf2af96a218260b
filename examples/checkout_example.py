"""
Checkout — quote, place, and the last-use race.

Level 5: bazaar.checkout
Level 4: bazaar.graph (nodnod)
Level 2: kungfu.Result
"""

import asyncio
from dataclasses import replace

from kungfu import Ok, Error

from bazaar import checkout, log
from bazaar.checkout import OrderPlacementCoordinator, PlaceOrderRequest
from bazaar.orders import PaymentInfo, PaymentMethod, ShippingAddress
from examples._infra import SAVE10, banner, demo_session, demo_store, run

ADDRESS = ShippingAddress("Alice Rahman", "01711000000", "House 12, Road 5", "Dhaka")


async def main() -> None:
    log.configure_logging("WARNING")
    store = demo_store()
    notifier = checkout.CollectingNotifier()
    coordinator = OrderPlacementCoordinator(store, notifier=notifier)

    banner("Quote: Dhaka + SAVE10")
    match await coordinator.quote(demo_session(), "dhaka", "save10"):
        case Ok(q):
            b = q.breakdown
            print(f"  subtotal {b.subtotal} + shipping {b.shipping_fee} - discount {b.discount}")
            print(f"  total    {b.total}")
        case Error(e):
            print(f"  ✗ {e}")

    banner("Place order")
    request = PlaceOrderRequest(
        shipping_rate_id="dhaka",
        payment=PaymentInfo(PaymentMethod.CASH_ON_DELIVERY),
        address=ADDRESS,
        promo_code="SAVE10",
    )
    match await coordinator.place_order(demo_session(), request):
        case Ok(confirmation):
            print(f"  ✓ {confirmation.message}")
        case Error(e):
            print(f"  ✗ {e}")

    banner("Race: two checkouts, one use left")
    store.add_promo(replace(SAVE10, max_uses=2, used_count=1))
    results = await asyncio.gather(
        coordinator.place_order(demo_session("bob"), request),
        coordinator.place_order(demo_session("carol"), request),
    )
    for result in results:
        match result:
            case Ok(confirmation):
                print(f"  ✓ {confirmation.message}")
            case Error(e):
                print(f"  ✗ {e}")
    print(f"  used_count = {store.promo('SAVE10').used_count}")

    banner("Notifications")
    for outcome in notifier.outcomes:
        print(f"  [{outcome.kind}] {outcome.message}")


if __name__ == "__main__":
    run(main)
