from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from kungfu import Error, Ok

from bazaar import OrderId, ProductId, UserId
from bazaar.cart import CartLine, CartSnapshot, MemoryCartStore
from bazaar.checkout import (
    CheckoutSession,
    CollectingNotifier,
    OrderPlacementCoordinator,
    PlaceOrderRequest,
    StaticIdentity,
)
from bazaar.config import CheckoutConfig
from bazaar.orders import (
    NewOrder,
    Order,
    OrderItem,
    OrderStatus,
    PaymentInfo,
    PaymentMethod,
    Product,
    PromoUsage,
    ShippingAddress,
)
from bazaar.promo import AppliesTo, DiscountType, PromoCode
from bazaar.shipping import ShippingRate
from bazaar.store import MemoryStore, SQLAlchemyStore, create_database
from bazaar.store._tables import (
    ProductTable,
    PromoCodeProductTable,
    PromoCodeTable,
    ShippingRateTable,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

ALICE = UserId("alice")
BOB = UserId("bob")

# Catalog: panjabi is on sale (900 → 800); subtotal of one panjabi + one saree is 1200.
PANJABI = Product(ProductId("panjabi"), "Cotton Panjabi", Decimal("900.00"), Decimal("800.00"))
SAREE = Product(ProductId("saree"), "Jamdani Saree", Decimal("400.00"))
PRODUCT_A = Product(ProductId("A"), "Product A", Decimal("300.00"))
PRODUCT_B = Product(ProductId("B"), "Product B", Decimal("700.00"))
RETIRED = Product(ProductId("retired"), "Retired Kurta", Decimal("500.00"), is_active=False)

DHAKA = ShippingRate("dhaka", "Dhaka", Decimal("60.00"), estimated_days=2)
OUTSIDE = ShippingRate("outside", "Outside Dhaka", Decimal("120.00"), estimated_days=5)
CLOSED = ShippingRate("sylhet", "Sylhet", Decimal("100.00"), is_active=False)

SAVE10 = PromoCode(
    id="promo-save10",
    code="SAVE10",
    discount_type=DiscountType.PERCENTAGE,
    discount_value=Decimal("10"),
    min_order_amount=Decimal("1000.00"),
)
LAST_ONE = PromoCode(
    id="promo-last",
    code="LASTONE",
    discount_type=DiscountType.FIXED,
    discount_value=Decimal("100.00"),
    max_uses=1,
)
PICKED = PromoCode(
    id="promo-picked",
    code="PICKED",
    discount_type=DiscountType.FIXED,
    discount_value=Decimal("50.00"),
    applies_to=AppliesTo.SPECIFIC,
    product_ids=frozenset({PRODUCT_A.id, PRODUCT_B.id}),
)
EXPIRED = PromoCode(
    id="promo-expired",
    code="OLD",
    discount_type=DiscountType.PERCENTAGE,
    discount_value=Decimal("20"),
    expires_at=NOW - timedelta(days=1),
)

PRODUCTS = (PANJABI, SAREE, PRODUCT_A, PRODUCT_B, RETIRED)
RATES = (DHAKA, OUTSIDE, CLOSED)
PROMOS = (SAVE10, LAST_ONE, PICKED, EXPIRED)

ADDRESS = ShippingAddress("Alice Rahman", "01711000000", "House 12, Road 5", "Dhaka")
COD = PaymentInfo(PaymentMethod.CASH_ON_DELIVERY)


def line(product: Product, quantity: int = 1, unit_price: Decimal | None = None) -> CartLine:
    return CartLine(
        product.id,
        product.name,
        unit_price if unit_price is not None else product.effective_price,
        quantity,
    )


def standard_cart() -> CartSnapshot:
    return CartSnapshot((line(PANJABI), line(SAREE)))


def session_for(
    user: UserId | None = ALICE, cart: CartSnapshot | None = None
) -> CheckoutSession:
    return CheckoutSession(
        StaticIdentity(user),
        MemoryCartStore(cart if cart is not None else standard_cart()),
    )


def request_for(
    promo_code: str | None = None,
    shipping_rate_id: str = "dhaka",
    payment: PaymentInfo = COD,
    address: ShippingAddress = ADDRESS,
) -> PlaceOrderRequest:
    return PlaceOrderRequest(
        shipping_rate_id=shipping_rate_id,
        payment=payment,
        address=address,
        promo_code=promo_code,
    )


def clock() -> datetime:
    return NOW


def seeded(latency: float = 0.0, store_class: type[MemoryStore] = MemoryStore) -> MemoryStore:
    store = store_class(latency=latency)
    for product in PRODUCTS:
        store.add_product(product)
    for rate in RATES:
        store.add_shipping_rate(rate)
    for promo in PROMOS:
        store.add_promo(promo)
    return store


@pytest.fixture
def config() -> CheckoutConfig:
    return CheckoutConfig().with_timeout(seconds=2)


@pytest.fixture
def store() -> MemoryStore:
    return seeded()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def coordinator(
    store: MemoryStore, config: CheckoutConfig, notifier: CollectingNotifier
) -> OrderPlacementCoordinator:
    return OrderPlacementCoordinator(store, config, notifier, clock=clock)


@pytest.fixture
async def sql_store(tmp_path):
    session_factory, engine = await create_database(
        f"sqlite+aiosqlite:///{tmp_path}/shop.db"
    )
    async with session_factory() as session:
        async with session.begin():
            session.add_all([
                ProductTable(
                    id=p.id.value,
                    name=p.name,
                    price=p.price,
                    sale_price=p.sale_price,
                    is_active=p.is_active,
                )
                for p in PRODUCTS
            ])
            session.add_all([
                ShippingRateTable(
                    id=r.id,
                    area_name=r.area_name,
                    rate=r.rate,
                    estimated_days=r.estimated_days,
                    is_active=r.is_active,
                )
                for r in RATES
            ])
            session.add_all([
                PromoCodeTable(
                    id=p.id,
                    code=p.code,
                    discount_type=p.discount_type.value,
                    discount_value=p.discount_value,
                    min_order_amount=p.min_order_amount,
                    max_uses=p.max_uses,
                    used_count=p.used_count,
                    usage_per_user=p.usage_per_user,
                    applies_to=p.applies_to.value,
                    is_active=p.is_active,
                    expires_at=p.expires_at,
                )
                for p in PROMOS
            ])
            await session.flush()
            session.add_all([
                PromoCodeProductTable(promo_code_id=PICKED.id, product_id=pid.value)
                for pid in sorted(PICKED.product_ids or (), key=lambda p: p.value)
            ])

    yield SQLAlchemyStore(session_factory)

    await engine.dispose()


def unwrap(result):
    match result:
        case Ok(value):
            return value
        case Error(err):
            raise AssertionError(f"expected Ok, got {err}")


def error_of(result):
    match result:
        case Error(err):
            return err
        case Ok(value):
            raise AssertionError(f"expected Error, got {value!r}")


def draft_order(
    order_id: str,
    user: UserId = ALICE,
    promo: PromoCode | None = None,
) -> NewOrder:
    """One panjabi + one saree to Dhaka, optionally redeeming promo."""
    oid = OrderId(order_id)
    order = Order(
        id=oid,
        user_id=user,
        total_amount=Decimal("1160.00"),
        shipping_cost=Decimal("60.00"),
        discount_amount=Decimal("100.00") if promo else Decimal("0.00"),
        shipping_address=ADDRESS,
        payment_method=PaymentMethod.CASH_ON_DELIVERY,
        status=OrderStatus.PENDING,
        created_at=NOW,
        promo_code=promo.code if promo else None,
        promo_code_id=promo.id if promo else None,
    )
    items = (
        OrderItem(oid, PANJABI.id, 1, PANJABI.effective_price),
        OrderItem(oid, SAREE.id, 1, SAREE.effective_price),
    )
    usage = PromoUsage(promo.id, user, oid, NOW) if promo else None
    return NewOrder(order, items, usage)
