from decimal import Decimal

from bazaar import ProductId
from bazaar.errors import StoreErrorKind
from tests.conftest import LAST_ONE, SAVE10, draft_order, error_of, unwrap


async def test_reads(store) -> None:
    products = unwrap(await store.get_products([ProductId("A"), ProductId("ghost")]))
    assert set(products) == {ProductId("A")}
    assert unwrap(await store.get_shipping_rate("nowhere")) is None
    assert unwrap(await store.get_promo("  save10 ")).id == SAVE10.id


async def test_place_order_writes_everything(store) -> None:
    new = draft_order("o-1", promo=LAST_ONE)
    order = unwrap(await store.place_order(new))

    assert order.id in store.orders
    assert [i.order_id for i in store.items] == [order.id, order.id]
    assert store.promo("LASTONE").used_count == 1
    assert store.usages == [new.usage]

    found = unwrap(await store.get_order(order.id))
    assert found is not None
    assert found[0] == order
    assert [i.price for i in found[1]] == [Decimal("800.00"), Decimal("400.00")]


async def test_lost_increment_is_conflict_and_writes_nothing(store) -> None:
    unwrap(await store.place_order(draft_order("o-1", promo=LAST_ONE)))

    result = await store.place_order(draft_order("o-2", promo=LAST_ONE))

    assert error_of(result).kind is StoreErrorKind.CONFLICT
    assert list(store.orders) == [draft_order("o-1").order.id]
    assert len(store.items) == 2
    assert store.promo("LASTONE").used_count == 1


async def test_failure_between_items_and_increment_rolls_back(store, monkeypatch) -> None:
    def boom(usage, undo):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store, "_redeem_promo", boom)

    result = await store.place_order(draft_order("o-1", promo=SAVE10))

    assert error_of(result).kind is StoreErrorKind.FAILED
    assert store.orders == {}
    assert store.items == []
    assert store.usages == []
    assert store.promo("SAVE10").used_count == 0


async def test_duplicate_order_id_fails(store) -> None:
    unwrap(await store.place_order(draft_order("o-1")))
    result = await store.place_order(draft_order("o-1"))
    assert error_of(result).kind is StoreErrorKind.FAILED
    assert len(store.items) == 2
