"""
SQLAlchemy store — CheckoutStore over an async session factory.

Usage:
    session_factory, engine = await create_database(url)
    store = SQLAlchemyStore(session_factory)

place_order runs in a single transaction. The promo increment is a
conditional UPDATE:

    UPDATE promo_codes SET used_count = used_count + 1
    WHERE id = :id AND (max_uses IS NULL OR used_count < max_uses)

Zero rows updated means another checkout took the last use; the
transaction rolls back and the store reports CONFLICT.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timezone

import structlog
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from bazaar._types import OrderId, ProductId, UserId
from bazaar.orders import (
    NewOrder,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    Product,
    PromoUsage,
    ShippingAddress,
)
from bazaar.promo._types import AppliesTo, DiscountType, PromoCode, normalize_code
from bazaar.shipping._types import ShippingRate
from bazaar.errors import StoreError, StoreErrorKind
from bazaar.store._tables import (
    OrderItemTable,
    OrderTable,
    ProductTable,
    PromoCodeProductTable,
    PromoCodeTable,
    PromoUsageTable,
    ShippingRateTable,
)

logger = structlog.get_logger(__name__)


class PromoConflict(Exception):
    """Conditional increment matched no row."""


class SQLAlchemyStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_products(
        self, ids: Iterable[ProductId]
    ) -> Result[dict[ProductId, Product], StoreError]:
        keys = [pid.value for pid in ids]
        try:
            async with self._session_factory() as session:
                rows = (
                    await session.execute(
                        select(ProductTable).where(ProductTable.id.in_(keys))
                    )
                ).scalars()
                return Ok({ProductId(row.id): _product(row) for row in rows})
        except Exception as e:
            return Error(_read_error("get products", e))

    async def get_shipping_rate(
        self, rate_id: str
    ) -> Result[ShippingRate | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ShippingRateTable, rate_id)
                return Ok(_shipping_rate(row) if row is not None else None)
        except Exception as e:
            return Error(_read_error("get shipping rate", e))

    async def list_shipping_rates(self) -> Result[list[ShippingRate], StoreError]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(select(ShippingRateTable))).scalars()
                return Ok([_shipping_rate(row) for row in rows])
        except Exception as e:
            return Error(_read_error("list shipping rates", e))

    async def get_promo(self, code: str) -> Result[PromoCode | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = (
                    await session.execute(
                        select(PromoCodeTable).where(
                            PromoCodeTable.code == normalize_code(code)
                        )
                    )
                ).scalar_one_or_none()
                if row is None:
                    return Ok(None)

                product_ids = (
                    await session.execute(
                        select(PromoCodeProductTable.product_id).where(
                            PromoCodeProductTable.promo_code_id == row.id
                        )
                    )
                ).scalars()
                return Ok(_promo(row, frozenset(ProductId(p) for p in product_ids)))
        except Exception as e:
            return Error(_read_error("get promo", e))

    async def count_promo_usage(
        self, promo_id: str, user_id: UserId
    ) -> Result[int, StoreError]:
        try:
            async with self._session_factory() as session:
                count = await session.scalar(
                    select(func.count()).select_from(PromoUsageTable).where(
                        PromoUsageTable.promo_code_id == promo_id,
                        PromoUsageTable.user_id == user_id.value,
                    )
                )
                return Ok(int(count or 0))
        except Exception as e:
            return Error(_read_error("count promo usage", e))

    async def get_order(
        self, order_id: OrderId
    ) -> Result[tuple[Order, tuple[OrderItem, ...]] | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id.value)
                if row is None:
                    return Ok(None)
                items = (
                    await session.execute(
                        select(OrderItemTable)
                        .where(OrderItemTable.order_id == order_id.value)
                        .order_by(OrderItemTable.id)
                    )
                ).scalars()
                return Ok((_order(row), tuple(_order_item(i) for i in items)))
        except Exception as e:
            return Error(_read_error("get order", e))

    # ═══════════════════════════════════════════════════════════════════════════
    # Atomic commit
    # ═══════════════════════════════════════════════════════════════════════════

    async def place_order(self, new: NewOrder) -> Result[Order, StoreError]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._insert_order(session, new.order)
                    await self._insert_items(session, new.items)
                    if new.usage is not None:
                        await self._redeem_promo(session, new.usage)
        except PromoConflict as e:
            return Error(StoreError(StoreErrorKind.CONFLICT, str(e), e))
        except Exception as e:
            logger.error("order_write_failed", order_id=new.order.id.value, error=str(e))
            kind = (
                StoreErrorKind.UNAVAILABLE
                if isinstance(e, (OperationalError, ConnectionError))
                else StoreErrorKind.FAILED
            )
            return Error(StoreError(kind, f"Failed to place order: {e}", e))

        return Ok(new.order)

    async def _insert_order(self, session: AsyncSession, order: Order) -> None:
        address = order.shipping_address
        session.add(OrderTable(
            id=order.id.value,
            user_id=order.user_id.value,
            total_amount=order.total_amount,
            shipping_cost=order.shipping_cost,
            discount_amount=order.discount_amount,
            full_name=address.full_name,
            phone=address.phone,
            address=address.address,
            city=address.city,
            sender_number=address.sender_number,
            transaction_id=address.transaction_id,
            payment_method=order.payment_method.value,
            notes=order.notes,
            promo_code_id=order.promo_code_id,
            promo_code=order.promo_code,
            status=order.status.value,
            created_at=order.created_at,
        ))
        await session.flush()

    async def _insert_items(self, session: AsyncSession, items: tuple[OrderItem, ...]) -> None:
        session.add_all([
            OrderItemTable(
                order_id=item.order_id.value,
                product_id=item.product_id.value,
                quantity=item.quantity,
                price=item.price,
            )
            for item in items
        ])
        await session.flush()

    async def _redeem_promo(self, session: AsyncSession, usage: PromoUsage) -> None:
        result = await session.execute(
            update(PromoCodeTable)
            .where(
                PromoCodeTable.id == usage.promo_code_id,
                or_(
                    PromoCodeTable.max_uses.is_(None),
                    PromoCodeTable.used_count < PromoCodeTable.max_uses,
                ),
            )
            .values(used_count=PromoCodeTable.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise PromoConflict(f"Promo {usage.promo_code_id} reached max_uses")

        session.add(PromoUsageTable(
            promo_code_id=usage.promo_code_id,
            user_id=usage.user_id.value,
            order_id=usage.order_id.value,
            used_at=usage.used_at,
        ))
        await session.flush()


# ═══════════════════════════════════════════════════════════════════════════════
# Row mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _read_error(what: str, e: Exception) -> StoreError:
    kind = (
        StoreErrorKind.UNAVAILABLE
        if isinstance(e, (OperationalError, ConnectionError, OSError))
        else StoreErrorKind.FAILED
    )
    return StoreError(kind, f"Failed to {what}: {e}", e)


def _product(row: ProductTable) -> Product:
    return Product(
        id=ProductId(row.id),
        name=row.name,
        price=row.price,
        sale_price=row.sale_price,
        is_active=row.is_active,
    )


def _shipping_rate(row: ShippingRateTable) -> ShippingRate:
    return ShippingRate(
        id=row.id,
        area_name=row.area_name,
        rate=row.rate,
        estimated_days=row.estimated_days,
        is_active=row.is_active,
    )


def _promo(row: PromoCodeTable, product_ids: frozenset[ProductId]) -> PromoCode:
    applies_to = AppliesTo(row.applies_to)
    expires_at = row.expires_at
    if expires_at is not None and expires_at.tzinfo is None:
        # SQLite drops the offset
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return PromoCode(
        id=row.id,
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        min_order_amount=row.min_order_amount,
        max_uses=row.max_uses,
        used_count=row.used_count,
        usage_per_user=row.usage_per_user,
        applies_to=applies_to,
        product_ids=product_ids if applies_to is AppliesTo.SPECIFIC else None,
        is_active=row.is_active,
        expires_at=expires_at,
    )


def _order(row: OrderTable) -> Order:
    created_at = row.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Order(
        id=OrderId(row.id),
        user_id=UserId(row.user_id),
        total_amount=row.total_amount,
        shipping_cost=row.shipping_cost,
        discount_amount=row.discount_amount,
        shipping_address=ShippingAddress(
            full_name=row.full_name,
            phone=row.phone,
            address=row.address,
            city=row.city,
            sender_number=row.sender_number,
            transaction_id=row.transaction_id,
        ),
        payment_method=PaymentMethod(row.payment_method),
        status=OrderStatus(row.status),
        created_at=created_at,
        notes=row.notes,
        promo_code=row.promo_code,
        promo_code_id=row.promo_code_id,
    )


def _order_item(row: OrderItemTable) -> OrderItem:
    return OrderItem(
        order_id=OrderId(row.order_id),
        product_id=ProductId(row.product_id),
        quantity=row.quantity,
        price=row.price,
    )


__all__ = ("SQLAlchemyStore", "PromoConflict")
